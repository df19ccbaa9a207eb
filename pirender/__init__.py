"""OpenGL renderer with screen-space lighting, built-in meshes and matrix helpers."""

__version__ = "0.1.0"