"""Integrated action models for different integration schemes."""

from stagewise.integrators.base import IntegratedActionModelAbstract, IntegratedActionData
from stagewise.integrators.euler import IntegratedActionModelEuler, IntegratedActionDataEuler
from stagewise.integrators.rk2 import IntegratedActionModelRK2, IntegratedActionDataRK2
from stagewise.integrators.factory import IntegratorType, create_integrated_model

__all__ = [
    "IntegratedActionModelAbstract",
    "IntegratedActionData",
    "IntegratedActionModelEuler",
    "IntegratedActionDataEuler",
    "IntegratedActionModelRK2",
    "IntegratedActionDataRK2",
    "IntegratorType",
    "create_integrated_model",
]
