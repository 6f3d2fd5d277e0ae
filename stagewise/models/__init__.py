"""Concrete differential action models."""

from stagewise.models.lqr import DifferentialActionModelLQR

__all__ = ["DifferentialActionModelLQR"]
