"""Base integrated action model interface."""

import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
import numpy as np
from numpy.typing import NDArray

from stagewise.core.control import ControlParametrizationAbstract
from stagewise.core.differential import DifferentialActionModelAbstract
from stagewise.core.state import StateManifold, Jcomponent
from stagewise.controls.poly_zero import ControlParametrizationPolyZero
from stagewise.utils.checks import check_vector

DEFAULT_TIME_STEP = 1e-3


@dataclass
class IntegratedActionData:
    """Discrete-time model output, reused across solver iterations."""

    cost: float
    xnext: NDArray  # (nx,)
    r: NDArray      # (nr,)
    Fx: NDArray     # (ndx, ndx)
    Fu: NDArray     # (ndx, nu)
    Lx: NDArray     # (ndx,)
    Lu: NDArray     # (nu,)
    Lxx: NDArray    # (ndx, ndx)
    Lxu: NDArray    # (ndx, nu)
    Luu: NDArray    # (nu, nu)


def allocate_outputs(model: "IntegratedActionModelAbstract") -> dict[str, Any]:
    """Zero-initialized buffers of IntegratedActionData for model."""
    nx, ndx = model.state.nx, model.state.ndx
    nu = model.nu
    return dict(
        cost=0.0,
        xnext=np.zeros(nx),
        r=np.zeros(model.nr),
        Fx=np.zeros((ndx, ndx)),
        Fu=np.zeros((ndx, nu)),
        Lx=np.zeros(ndx),
        Lu=np.zeros(nu),
        Lxx=np.zeros((ndx, ndx)),
        Lxu=np.zeros((ndx, nu)),
        Luu=np.zeros((nu, nu)),
    )


class IntegratedActionModelAbstract(ABC):
    """
    Discretization of a differential action model over one time step.

    Maps (x, p) to the next state and the integrated running cost, where p
    are the parameters of the control parametrization. Derivatives are taken
    w.r.t. the tangent space of x and w.r.t. p.

    A negative time step given at construction is replaced by 1e-3 with a
    warning, whereas the dt setter rejects it. A zero time step disables the
    integration: the state is not propagated and the cost is the differential
    cost evaluated once.
    """

    def __init__(
        self,
        differential: DifferentialActionModelAbstract,
        control: Optional[ControlParametrizationAbstract] = None,
        time_step: float = DEFAULT_TIME_STEP,
        with_cost_residual: bool = True,
    ):
        """
        Initialize integrated action model.

        Args:
            differential: Continuous-time model, may be shared between models
            control: Control parametrization (PolyZero if not provided)
            time_step: Integration step, clamped to 1e-3 if negative
            with_cost_residual: Copy the differential cost residual into data
        """
        if control is None:
            control = ControlParametrizationPolyZero(differential.nu)
        if control.nu != differential.nu:
            raise ValueError(
                "Invalid argument: control has wrong dimension "
                f"(it should be {differential.nu})"
            )
        self._differential = differential
        self._control = control
        self._time_step = time_step
        self._with_cost_residual = with_cost_residual
        self._init()

    def _init(self) -> None:
        if self._time_step < 0.0:
            warnings.warn(
                f"dt should be positive, set to {DEFAULT_TIME_STEP}",
                UserWarning,
                stacklevel=3,
            )
            self._time_step = DEFAULT_TIME_STEP
        self._time_step2 = self._time_step * self._time_step
        self._enable_integration = self._time_step != 0.0
        self._unone = np.zeros(self._control.np)

    @property
    def state(self) -> StateManifold:
        return self._differential.state

    @property
    def nu(self) -> int:
        """Dimension of the control parameters p."""
        return self._control.np

    @property
    def nu_diff(self) -> int:
        """Dimension of the control of the differential model."""
        return self._differential.nu

    @property
    def nr(self) -> int:
        return self._differential.nr

    @property
    def u_lb(self) -> NDArray:
        """Lower bounds on p, converted from the current differential limits."""
        return self._control.convert_bounds(
            self._differential.u_lb, self._differential.u_ub
        )[0]

    @property
    def u_ub(self) -> NDArray:
        """Upper bounds on p, converted from the current differential limits."""
        return self._control.convert_bounds(
            self._differential.u_lb, self._differential.u_ub
        )[1]

    @property
    def has_control_limits(self) -> bool:
        return self._differential.has_control_limits

    @property
    def unone(self) -> NDArray:
        """Neutral control parameters."""
        return self._unone

    @property
    def with_cost_residual(self) -> bool:
        return self._with_cost_residual

    @property
    def enable_integration(self) -> bool:
        return self._enable_integration

    @property
    def control(self) -> ControlParametrizationAbstract:
        return self._control

    @property
    def dt(self) -> float:
        """Integration time step."""
        return self._time_step

    @dt.setter
    def dt(self, dt: float) -> None:
        if dt < 0.0:
            raise ValueError("Invalid argument: dt has to be positive")
        self._time_step = dt
        self._time_step2 = dt * dt
        self._enable_integration = dt != 0.0

    @property
    def differential(self) -> DifferentialActionModelAbstract:
        return self._differential

    @differential.setter
    def differential(self, model: DifferentialActionModelAbstract) -> None:
        if self._control.nu != model.nu:
            self._control.resize(model.nu)
            self._unone = np.zeros(self._control.np)
        self._differential = model

    def _check_inputs(self, x: NDArray, p: NDArray) -> tuple[NDArray, NDArray]:
        x = check_vector("x", x, self.state.nx)
        p = check_vector("p", p, self.nu)
        return x, p

    @abstractmethod
    def calc(self, data: IntegratedActionData, x: NDArray, p: NDArray) -> None:
        """
        Compute the next state and the integrated cost.

        Args:
            data: Scratch data created by this model
            x: State (nx,)
            p: Control parameters (nu,)
        """
        ...

    @abstractmethod
    def calc_diff(
        self, data: IntegratedActionData, x: NDArray, p: NDArray
    ) -> None:
        """
        Compute the derivatives of the next state and of the integrated cost.

        Recomputes everything calc computes, so it does not rely on a
        preceding calc with the same arguments.

        Args:
            data: Scratch data created by this model
            x: State (nx,)
            p: Control parameters (nu,)
        """
        ...

    @abstractmethod
    def create_data(self) -> IntegratedActionData:
        """Allocate the scratch data of this model."""
        ...

    @abstractmethod
    def check_data(self, data: IntegratedActionData) -> bool:
        """Check that data was created for this model."""
        ...

    def _calc_diff_static(self, data: IntegratedActionData, x: NDArray, p: NDArray) -> None:
        """Derivatives with integration disabled: x is kept, l is evaluated once at t = 0."""
        control = self._control
        diff_data = data.differential[0]
        data.Fx[:] = self.state.Jintegrate(x, data.dx, Jcomponent.FIRST)
        data.Fu[:] = 0.0
        data.Lx[:] = diff_data.Lx
        data.Lu[:] = control.multiply_dvalue_transpose_by(0.0, p, diff_data.Lu)
        data.Lxx[:] = diff_data.Lxx
        data.Lxu[:] = control.multiply_by_dvalue(0.0, p, diff_data.Lxu)
        data.Luu[:] = control.multiply_dvalue_transpose_by(
            0.0, p, control.multiply_by_dvalue(0.0, p, diff_data.Luu)
        )

    def quasi_static(
        self,
        data: IntegratedActionData,
        x: NDArray,
        maxiter: int = 100,
        tol: float = 1e-9,
    ) -> NDArray:
        """
        Control parameters that keep the system at rest at x.

        Delegates to the differential model and maps the resulting control
        back to the parameter space.

        Returns:
            Control parameters (nu,)
        """
        x = check_vector("x", x, self.state.nx)
        u = self._differential.quasi_static(data.differential[0], x, maxiter, tol)
        return self._control.value_inv(0.0, u)

    def __repr__(self) -> str:
        return f"{type(self).__name__} {{dt={self._time_step}, {self._differential!r}}}"
