"""Drawable instances: a mesh with its transform and material colours."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from pirender.mathtool import create_identity_matrix


def _rgba(values: Sequence[float], name: str) -> tuple[float, float, float, float]:
    rgba = tuple(float(v) for v in values)
    if len(rgba) == 3:
        rgba += (1.0,)
    if len(rgba) != 4:
        raise ValueError(f"{name} needs 3 or 4 components, got {len(rgba)}")
    return rgba  # type: ignore[return-value]


def _matrix(values: Sequence[float]) -> tuple[float, ...]:
    matrix = tuple(float(v) for v in values)
    if len(matrix) != 16:
        raise ValueError(f"model_matrix needs 16 values, got {len(matrix)}")
    return matrix


@dataclass
class Instance:
    """A mesh placed in the scene.

    Colours take 3 or 4 components; a missing alpha is 1.0.
    """

    mesh: Any
    model_matrix: Sequence[float] = field(default_factory=create_identity_matrix)
    color: Sequence[float] = (1.0, 1.0, 1.0, 1.0)
    emissive: Sequence[float] = (0.0, 0.0, 0.0, 1.0)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "model_matrix":
            value = _matrix(value)
        elif name in ("color", "emissive"):
            value = _rgba(value, name)
        super().__setattr__(name, value)


class CubeInstance(Instance):
    """An instance drawn with a cube mesh."""


class PanelInstance(Instance):
    """An instance drawn with a panel mesh."""


class SphereInstance(Instance):
    """An instance drawn with a sphere mesh."""