"""Explicit Euler integrated action model."""

import warnings
from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray

from stagewise.core.differential import DifferentialActionData
from stagewise.core.state import Jcomponent
from stagewise.integrators.base import (
    IntegratedActionModelAbstract,
    IntegratedActionData,
    allocate_outputs,
)


@dataclass
class IntegratedActionDataEuler(IntegratedActionData):
    """Euler scratch data: a single stage."""

    differential: list[DifferentialActionData]  # one record
    u_diff: NDArray   # (nu_diff,) control value at t = 0
    dx: NDArray       # (ndx,) state increment
    da_du: NDArray    # (nv, nu) acceleration Jacobian w.r.t. p
    Ludiffu: NDArray  # (nu_diff, nu)

    @classmethod
    def from_model(
        cls, model: "IntegratedActionModelEuler"
    ) -> "IntegratedActionDataEuler":
        nv, ndx = model.state.nv, model.state.ndx
        return cls(
            **allocate_outputs(model),
            differential=[model.differential.create_data()],
            u_diff=np.zeros(model.nu_diff),
            dx=np.zeros(ndx),
            da_du=np.zeros((nv, model.nu)),
            Ludiffu=np.zeros((model.nu_diff, model.nu)),
        )


class IntegratedActionModelEuler(IntegratedActionModelAbstract):
    """
    Symplectic-style explicit Euler step on x = [q, v]:

        dx = [v dt + a dt^2, a dt],  xnext = x ⊕ dx,  cost = dt l(x, u)

    with a, l evaluated once at u = u(0; p).
    """

    def calc(self, data: IntegratedActionDataEuler, x: NDArray, p: NDArray) -> None:
        x, p = self._check_inputs(x, p)
        self._forward(data, x, p)

    def calc_diff(
        self, data: IntegratedActionDataEuler, x: NDArray, p: NDArray
    ) -> None:
        x, p = self._check_inputs(x, p)
        self._forward(data, x, p)

        state = self.state
        control = self._control
        nv, ndx = state.nv, state.ndx
        dt, dt2 = self._time_step, self._time_step2
        diff_data = data.differential[0]
        self._differential.calc_diff(diff_data, x, data.u_diff)

        if self._enable_integration:
            da_dx = diff_data.Fx
            data.Fx[:nv] = dt2 * da_dx
            data.Fx[nv:] = dt * da_dx
            data.Fx[:nv, ndx - nv:] += dt * np.eye(nv)

            data.da_du[:] = control.multiply_by_dvalue(0.0, p, diff_data.Fu)
            data.Fu[:nv] = dt2 * data.da_du
            data.Fu[nv:] = dt * data.da_du

            data.Fx[:] = state.Jintegrate_transport(
                x, data.dx, data.Fx, Jcomponent.SECOND
            ) + state.Jintegrate(x, data.dx, Jcomponent.FIRST)
            data.Fu[:] = state.Jintegrate_transport(
                x, data.dx, data.Fu, Jcomponent.SECOND
            )

            data.Lx[:] = dt * diff_data.Lx
            data.Lu[:] = dt * control.multiply_dvalue_transpose_by(0.0, p, diff_data.Lu)
            data.Lxx[:] = dt * diff_data.Lxx
            data.Lxu[:] = dt * control.multiply_by_dvalue(0.0, p, diff_data.Lxu)
            data.Ludiffu[:] = control.multiply_by_dvalue(0.0, p, diff_data.Luu)
            data.Luu[:] = dt * control.multiply_dvalue_transpose_by(0.0, p, data.Ludiffu)
        else:
            self._calc_diff_static(data, x, p)

    def _forward(self, data: IntegratedActionDataEuler, x: NDArray, p: NDArray) -> None:
        nv = self.state.nv
        dt, dt2 = self._time_step, self._time_step2
        diff_data = data.differential[0]

        data.u_diff[:] = self._control.value(0.0, p)
        self._differential.calc(diff_data, x, data.u_diff)

        if self._enable_integration:
            v = x[x.shape[0] - nv:]
            a = diff_data.xout
            data.dx[:nv] = v * dt + a * dt2
            data.dx[nv:] = a * dt
            data.xnext[:] = self.state.integrate(x, data.dx)
            data.cost = dt * diff_data.cost
        else:
            data.dx[:] = 0.0
            data.xnext[:] = x
            data.cost = diff_data.cost

        if self._with_cost_residual:
            data.r[:] = diff_data.r

    def create_data(self) -> IntegratedActionDataEuler:
        if self._control.np > self._control.nu:
            warnings.warn(
                "Euler only samples the control at the start of the step; "
                "a parametrization larger than PolyZero adds inert parameters",
                UserWarning,
                stacklevel=2,
            )
        return IntegratedActionDataEuler.from_model(self)

    def check_data(self, data: IntegratedActionData) -> bool:
        if not isinstance(data, IntegratedActionDataEuler):
            return False
        return self._differential.check_data(data.differential[0])

