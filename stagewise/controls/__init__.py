"""Concrete control parametrizations."""

from stagewise.controls.poly_zero import ControlParametrizationPolyZero
from stagewise.controls.poly_one import ControlParametrizationPolyOne

__all__ = [
    "ControlParametrizationPolyZero",
    "ControlParametrizationPolyOne",
]
