# roguevox

This package holds the simulation core of a small grid-based voxel game. It is plain Python, and numpy is its only dependency. You supply the frame loop, and every part can be used and tested separately.

## Modules

- **`roguevox.input`**: `InputState` records keyboard, mouse button, wheel and cursor state once per frame.
  - Call `begin(x, y)` once, then `update(keys_down, mouse_x, mouse_y, left_button, right_button)` every frame.
  - `key_down(code)` is true while a key is held. `key_pressed(code)` is true only on the frame the key went down.
  - Keycodes outside `0..371` raise `IndexError`.
  - `scroll(delta)` accumulates wheel movement, which appears as `mouse_wheel_up` or `mouse_wheel_down` on the next update.
  - `prevent_right_mouse_hold()` suppresses `right_mouse_down()` until the right button is clicked again.
  - Key constants such as `KEY_W` and `KEY_TAB` are provided.
- **`roguevox.pathfinding`**: `find_path(start, goal, passable, width, depth)` is an 8-connected A\* search. It returns a list of `Node`s from start to goal. The list is empty when the goal is blocked, equals the start, or cannot be reached. `heuristic` is the Euclidean distance.
- **`roguevox.editor`**: `Editor(width, depth, on_map_changed)` is a top-down wall grid with a border and a default wall layout.
  - `update(input_state, viewport_w, viewport_h, window_w, window_h)` pans the camera with W/A/S/D and resets it with R.
  - A held left mouse button places a wall under the cursor and a held right button removes it. Each change calls `on_map_changed`.
  - `is_wall`, `set_wall` and `find_path` query and edit the grid directly.
  - `map_range` maps a value linearly from one range onto another.
- **`roguevox.voxels`**: `VoxelWorld(width, height, depth, is_wall)` is a 3D solid-voxel map.
  - `init_map()` builds walls from `is_wall`, then adds the floor, a ceiling at height 13 with a hole, the border walls and two cubes. It also loads light preset 0.
  - The solidity queries are `cell_is_solid`, `cell_is_empty` and `is_static_solid`. Dynamic occupancy is set with `set_dynamic_solid` and cleared with `clear_dynamic_solids`.
  - `closest_hit` walks a line of sight from an origin to a destination and returns a `HitData`.
  - `Light` and `load_light_setup` provide the preset lights.
- **`roguevox.occluders`**: `generate_occluders(world)` merges the exposed static faces greedily into rectangles, with two `Triangle`s per rectangle.
  - It returns an `OccluderMesh` that groups the triangles by facing.
  - The mesh also holds collision line segments at floor level.
  - `all_triangles()` returns the triangles in generation order.
- **`roguevox.lighting`**: `LightingGrid(world, seed)` computes face lighting and probe lighting for a world.
  - `calculate_direct_lighting(light_model)` lights every exposed voxel side from each light it can see. You supply `light_model(light, position, normal, voxel_size)`.
  - `propagate(samples_per_frame)` refreshes a batch of `GridProbe`s from nearby lit faces. It walks a shuffled order that the seed makes reproducible.
  - `calculate_indirect_lighting()` averages the neighbouring probes onto each face.
  - `texture_data()` returns an RGBA array indexed `[z, y, x]`.
- **`roguevox.animation`**: This module covers keyframed skeletal animation.
  - An `Animation` holds `AnimatedNode`s, and each node holds a list of `NodeKey`s.
  - A `SkinnedModel` holds the joints, added with `add_joint`, and the bones, added with `add_bone`.
  - It interpolates position and scale linearly and rotation with slerp.
  - `update_bone_transforms_from_bind_pose()` and `update_bone_transforms_from_animation(seconds, clip)` compute the bone matrices.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from roguevox.editor import Editor
from roguevox.voxels import VoxelWorld
from roguevox.occluders import generate_occluders
from roguevox.lighting import LightingGrid

editor = Editor(32, 32, None)
world = VoxelWorld(32, 16, 32, editor.is_wall)
world.init_map()

mesh = generate_occluders(world)
print(len(mesh.all_triangles()), "occluder triangles")

def flat_light(light, position, normal, voxel_size):
    return tuple(c * light.strength for c in light.color)

grid = LightingGrid(world, 0)
grid.calculate_direct_lighting(flat_light)
print(grid.total_face_count(), "visible voxel faces")
grid.propagate(100)

print([(n.x, n.y) for n in editor.find_path(2, 2, 12, 20)])
```

Animating a joint:

```python
from roguevox.animation import AnimatedNode, Animation, NodeKey, SkinnedModel

model = SkinnedModel("rig")
root = model.add_joint("root", -1)
model.add_joint("arm", root)
model.add_bone("arm")

clip = Animation("wave", duration=10.0, tick_rate=10.0)
clip.add_node(AnimatedNode("arm", [
    NodeKey(position=(0.0, 0.0, 0.0), time_stamp=0.0),
    NodeKey(position=(1.0, 0.0, 0.0), time_stamp=10.0),
]))
model.animations.append(clip)

pose = model.update_bone_transforms_from_animation(0.5, clip)
print(pose.local[0][:3, 3])  # translation halfway along the clip
```

## What it does not do

The package has no window, renderer, audio or command-line program, and it loads no files. Meshes, textures, fonts and animation clips are not read from disk. You build models and clips in code and feed input state from your own event loop. `texture_data()` returns a plain array that you upload to a graphics API yourself.