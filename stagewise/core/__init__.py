"""Collaborator interfaces: state manifold, differential model, control parametrization."""

from stagewise.core.state import StateManifold, Jcomponent
from stagewise.core.differential import (
    DifferentialActionModelAbstract,
    DifferentialActionData,
)
from stagewise.core.control import ControlParametrizationAbstract

__all__ = [
    "StateManifold",
    "Jcomponent",
    "DifferentialActionModelAbstract",
    "DifferentialActionData",
    "ControlParametrizationAbstract",
]
