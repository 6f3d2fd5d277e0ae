"""Integrated model factory."""

from enum import Enum
from typing import Optional, Union

from stagewise.core.control import ControlParametrizationAbstract
from stagewise.core.differential import DifferentialActionModelAbstract
from stagewise.integrators.base import IntegratedActionModelAbstract, DEFAULT_TIME_STEP
from stagewise.integrators.euler import IntegratedActionModelEuler
from stagewise.integrators.rk2 import IntegratedActionModelRK2


class IntegratorType(Enum):
    """Available integration schemes."""
    EULER = "euler"
    RK2 = "rk2"


_INTEGRATORS = {
    IntegratorType.EULER: IntegratedActionModelEuler,
    IntegratorType.RK2: IntegratedActionModelRK2,
}


def create_integrated_model(
    integrator: Union[IntegratorType, str],
    differential: DifferentialActionModelAbstract,
    control: Optional[ControlParametrizationAbstract] = None,
    time_step: float = DEFAULT_TIME_STEP,
    with_cost_residual: bool = True,
) -> IntegratedActionModelAbstract:
    """
    Build an integrated action model for the requested scheme.

    Args:
        integrator: IntegratorType or its name ("euler", "rk2")
        differential: Continuous-time model
        control: Control parametrization (PolyZero if not provided)
        time_step: Integration step
        with_cost_residual: Copy the differential cost residual into data

    Returns:
        Integrated action model
    """
    if isinstance(integrator, str):
        try:
            integrator = IntegratorType(integrator.lower())
        except ValueError:
            names = ", ".join(t.value for t in IntegratorType)
            raise ValueError(
                f"Unknown integrator '{integrator}' (expected one of: {names})"
            ) from None

    return _INTEGRATORS[integrator](
        differential,
        control=control,
        time_step=time_step,
        with_cost_residual=with_cost_residual,
    )
