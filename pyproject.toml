[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pirender"
version = "0.1.0"
description = "Small OpenGL renderer with screen-space global illumination, built-in meshes and column-major matrix helpers"
requires-python = ">=3.10"
dependencies = [
    "pyglet",
]
keywords = ["opengl", "renderer", "global-illumination", "framebuffer", "shaders", "matrix", "pyglet"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pirender"]

[tool.pytest.ini_options]
addopts = "-ra"
