"""Input state, wall-grid editing, A* pathfinding, voxel map, occluder meshing, probe lighting and skeletal animation."""

__version__ = "0.1.0"

__all__ = ["animation", "editor", "input", "lighting", "occluders", "pathfinding", "voxels"]