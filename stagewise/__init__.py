"""
Stagewise: integrated action models for trajectory optimization.

This library discretizes continuous-time action models (dynamics plus
running cost) into discrete-time models for DDP-like solvers, with:
- Explicit Euler and second-order Runge-Kutta integration
- Control parametrizations over the integration step
- First and second-order derivatives propagated through the stages
- Manifold-aware state updates
"""

__version__ = "0.1.0"

from stagewise.core.state import StateManifold, Jcomponent
from stagewise.core.differential import (
    DifferentialActionModelAbstract,
    DifferentialActionData,
)
from stagewise.core.control import ControlParametrizationAbstract
from stagewise.states.vector import StateVector
from stagewise.controls.poly_zero import ControlParametrizationPolyZero
from stagewise.controls.poly_one import ControlParametrizationPolyOne
from stagewise.models.lqr import DifferentialActionModelLQR
from stagewise.integrators.base import IntegratedActionModelAbstract, IntegratedActionData
from stagewise.integrators.euler import IntegratedActionModelEuler, IntegratedActionDataEuler
from stagewise.integrators.rk2 import IntegratedActionModelRK2, IntegratedActionDataRK2
from stagewise.integrators.factory import IntegratorType, create_integrated_model
from stagewise.stepping.rollout import Trajectory, rollout

__all__ = [
    "StateManifold",
    "Jcomponent",
    "DifferentialActionModelAbstract",
    "DifferentialActionData",
    "ControlParametrizationAbstract",
    "StateVector",
    "ControlParametrizationPolyZero",
    "ControlParametrizationPolyOne",
    "DifferentialActionModelLQR",
    "IntegratedActionModelAbstract",
    "IntegratedActionData",
    "IntegratedActionModelEuler",
    "IntegratedActionDataEuler",
    "IntegratedActionModelRK2",
    "IntegratedActionDataRK2",
    "IntegratorType",
    "create_integrated_model",
    "Trajectory",
    "rollout",
]
