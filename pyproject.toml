[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "roguevox"
version = "0.1.0"
description = "Simulation core for a small voxel game: input state, wall-grid editing, A* pathfinding, voxel map, occluder meshing, probe lighting and skeletal animation."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["voxel", "lighting", "light-probes", "pathfinding", "a-star", "skeletal-animation", "game"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["roguevox"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
