# pirender

A small OpenGL renderer built on pyglet. It draws meshes into an off-screen
scene target. It renders emissive colours and occluders into targets of their
own and lights the screen from a point with a screen-space pass. It then
composites the result onto the window.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install .[test]
pytest
```

## Modules

- `pirender.mathtool`: column-major 4x4 matrices, returned as tuples of 16
  floats in the order OpenGL expects. The module provides:
  - `create_identity_matrix()` and `multiply_matrices(a, b)`, which returns
    `a * b`.
  - `create_perspective_matrix(fov_y, aspect, near_z, far_z)`. The `fov_y`
    argument is in radians.
  - `create_orthographic_matrix(left, right, bottom, top, near_z, far_z)`.
  - `create_look_at_matrix(eye, center, up)` and
    `create_view_matrix(position, center, up)`. The second differs from the
    first only in the sign of the forward translation term.
  - `create_model_matrix(rotate_y_deg, rotate_x_deg)`, which returns `Ry * Rx`.
  - `create_transform_matrix(offset, rotate_deg, scale)`. It rotates by
    `rotate_deg[1]` about Y and by `rotate_deg[2]` about X, and ignores
    `rotate_deg[0]`. The scale multiplies the diagonal only.
  - `invert_matrix(m)`, which uses Gauss-Jordan elimination and raises
    `ValueError` for a singular matrix.
- `pirender.geometry`: vertex and index data as a frozen `MeshData`.
  - Each vertex holds six floats: the position, then the normal.
  - The indices form a triangle list.
  - `cube_mesh_data()` gives a unit cube with per-face normals.
  - `panel_mesh_data()` gives a unit square facing +Z.
  - `sphere_mesh_data(sector_count=32, stack_count=16)` gives a UV sphere of
    radius 0.5.
  - `MeshData` checks its own shape and raises `ValueError` when it is wrong.
- `pirender.instance`: `Instance` is a dataclass with these fields:
  - `mesh`;
  - `model_matrix`, which defaults to the identity;
  - `color`, which defaults to white;
  - `emissive`, which defaults to black with alpha 1.

  Colours take 3 or 4 components, and a missing alpha becomes 1.0. Assigning
  a value of the wrong length raises `ValueError`. `CubeInstance`,
  `PanelInstance` and `SphereInstance` are subclasses that add nothing.
- `pirender.shaders`: GLSL ES 3.00 sources (`#version 300 es`).
  - `shader_pair(name)` returns a `ShaderPair` with `vertex` and `fragment`
    source.
  - The names are listed in `SHADER_NAMES`: `scene`, `quad`, `radiance`,
    `block_map`, `diffuse` and `ppgi`.
  - An unknown name raises `KeyError`.
- `pirender.platform`: `Platform(width, height)` opens a full-screen pyglet
  window titled "Pi Renderer". It asks for a double-buffered OpenGL 3.3
  context with a 24-bit depth buffer.
  - `poll_events()` processes window events and returns an `InputState`. Its
    fields `up`, `down`, `left` and `right` report whether W, S, A and D are
    held.
  - `running` becomes `False` once the window is asked to close.
  - `swap_buffers()` presents the frame.
  - `shutdown()` closes the window, and so does leaving a `with` block.
  - If the window cannot be created, `Platform` raises `RuntimeError`.
- `pirender.gpu`: GPU resources, which need a current OpenGL context.
  - `Mesh(data)` uploads a `MeshData` with 16-bit indices. `CubeMesh`,
    `PanelMesh` and `SphereMesh` build the shapes above.
  - `RenderTarget(width, height, with_depth=False)` is a framebuffer with an
    RGBA texture. It raises `RuntimeError` when the framebuffer is
    incomplete.
  - `compile_program(vertex_source, fragment_source)` raises `ShaderError`
    with the driver's log.
  - `pack_floats` and `pack_indices` need no context. `pack_indices` raises
    `ValueError` for an index that does not fit in 16 bits.
- `pirender.renderer`: `Renderer` owns the programs, the render targets, a
  full-screen quad, and a cube and a panel mesh.

## Matrices

```python
from pirender.mathtool import (
    create_perspective_matrix, create_look_at_matrix, multiply_matrices,
    create_transform_matrix, invert_matrix,
)

proj = create_perspective_matrix(1.0, 800 / 600, 0.1, 100.0)
view = create_look_at_matrix((0, 0, 5), (0, 0, 0), (0, 1, 0))
vp = multiply_matrices(proj, view)

model = create_transform_matrix((1.0, 0.0, 0.0), (0.0, 30.0, 0.0), (1.0, 1.0, 1.0))
inverse = invert_matrix(model)
```

## A frame

```python
from pirender.gpu import CubeMesh
from pirender.instance import CubeInstance
from pirender.mathtool import (
    create_look_at_matrix, create_perspective_matrix, multiply_matrices,
)
from pirender.platform import Platform
from pirender.renderer import Renderer

with Platform(800, 600) as platform:
    renderer = Renderer()
    renderer.init()
    renderer.resize(800, 600)

    proj = create_perspective_matrix(1.0, 800 / 600, 0.1, 100.0)
    view = create_look_at_matrix((0, 0, 5), (0, 0, 0), (0, 1, 0))
    vp = multiply_matrices(proj, view)

    cube = CubeInstance(CubeMesh())
    cube.emissive = (1.0, 0.5, 0.2)
    scene = [cube]

    while platform.running:
        keys = platform.poll_events()
        renderer.render_emissive_to_radiance(vp, scene)
        renderer.render_block_map(vp, scene)
        renderer.render_sdf_diffuse(vp, scene, (0.0, 0.0, 0.0), vp)
        renderer.render_static_instances(vp, scene)
        renderer.render_ppgi()
        renderer.finish_frame(True)
        platform.swap_buffers()

    renderer.shutdown()
```

## Renderer details

`init()` compiles every program and creates the render targets at 800x600. If
it fails, it releases what it made and raises `ShaderError` or
`RuntimeError`. Every drawing method raises `RuntimeError` until `init()` has
succeeded. `resize(width, height)` sets the screen size used for viewports.
`reinitialize_targets(width, height)` recreates the targets at a new size.
`shutdown()` is safe to call more than once.

The passes:

- `render_emissive_to_radiance` writes each instance's emissive colour into
  the radiance target.
- `render_block_map` writes occluders as white into the block map target.
- `render_diffuse` draws the `diffuse` program into the first blur target. It
  binds the radiance and block-map textures and sets the attenuation
  uniforms.
- `render_sdf_diffuse` lights the first blur target from a single point.
  `player_screen_uv(player_world_pos, view_projection)` projects the point to
  screen UV, and the light is shadowed by the block map. The pass uses the
  fixed range `SDF_LIGHT_RANGE` (0.2). `light_range_for(screen_uv)` computes
  an adaptive range, but the pass does not use it.
- `render_static_instances` clears the scene target and draws lit instances.
  `render_dynamic_instances` draws over the target without clearing it.
- `render_ppgi` adds the blur target to the scene.
- `finish_frame(use_post_processing=True)` copies the post-processed image to
  the screen, or the plain scene image when `use_post_processing` is false.

`render`, `render_cubes` and `render_panel` draw white cubes or a panel
directly into the current framebuffer.

## What it does not do

The package is a library. It has no command to run, no built-in scene or game
loop, and no camera control driven by the W/A/S/D input it reports. You build
the loop yourself, as in the example above. The shaders are written as GLSL ES
3.00, so the OpenGL driver must accept that shading language.