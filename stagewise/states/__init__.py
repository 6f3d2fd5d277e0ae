"""Concrete state manifolds."""

from stagewise.states.vector import StateVector

__all__ = ["StateVector"]
