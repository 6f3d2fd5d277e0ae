"""Second-order Runge-Kutta (midpoint) integrated action model."""

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

RK2_C = (0.0, 0.5)


@dataclass
class IntegratedActionDataRK2(IntegratedActionData):
    """
    RK2 scratch data: one entry per stage in every list.

    Stage i evaluates the differential model at y[i] with control u_diff[i];
    ki[i] = [v(y[i]), a(y[i], u_diff[i])] is the stage derivative.
    """

    differential: list[DifferentialActionData]
    u_diff: list[NDArray]        # (nu_diff,)
    integral: list[float]        # stage running costs
    dx: NDArray                  # (ndx,) final increment dt k1
    ki: list[NDArray]            # (ndx,)
    y: list[NDArray]             # (nx,)
    dx_rk2: list[NDArray]        # (ndx,) increment from x to y[i]

    dki_dx: list[NDArray]        # (ndx, ndx)
    dki_dudiff: list[NDArray]    # (ndx, nu_diff)
    dki_du: list[NDArray]        # (ndx, nu)
    dfi_du: list[NDArray]        # (ndx, nu) direct control contribution
    dyi_dx: list[NDArray]        # (ndx, ndx)
    dyi_du: list[NDArray]        # (ndx, nu)
    dki_dy: list[NDArray]        # (ndx, ndx)

    dli_dx: list[NDArray]        # (ndx,)
    dli_du: list[NDArray]        # (nu,)
    ddli_ddx: list[NDArray]      # (ndx, ndx)
    ddli_ddudiff: list[NDArray]  # (nu_diff, nu_diff)
    ddli_dudiffdu: list[NDArray] # (nu_diff, nu)
    ddli_ddu: list[NDArray]      # (nu, nu)
    ddli_dxdudiff: list[NDArray] # (ndx, nu_diff)
    ddli_dxdu: list[NDArray]     # (ndx, nu)
    Luu_partialx: list[NDArray]  # (nu, nu)
    Lxu_i: list[NDArray]         # (ndx, nu)
    Lxx_partialx: list[NDArray]  # (ndx, ndx)
    Lxx_partialu: list[NDArray]  # (ndx, nu)

    @classmethod
    def from_model(
        cls, model: "IntegratedActionModelRK2"
    ) -> "IntegratedActionDataRK2":
        nx, ndx, nv = model.state.nx, model.state.ndx, model.state.nv
        nu_diff, nu = model.nu_diff, model.nu
        nstages = len(RK2_C)

        def stages(*shape):
            return [np.zeros(shape) for _ in range(nstages)]

        data = cls(
            **allocate_outputs(model),
            differential=[model.differential.create_data() for _ in range(nstages)],
            u_diff=stages(nu_diff),
            integral=[0.0] * nstages,
            dx=np.zeros(ndx),
            ki=stages(ndx),
            y=stages(nx),
            dx_rk2=stages(ndx),
            dki_dx=stages(ndx, ndx),
            dki_dudiff=stages(ndx, nu_diff),
            dki_du=stages(ndx, nu),
            dfi_du=stages(ndx, nu),
            dyi_dx=stages(ndx, ndx),
            dyi_du=stages(ndx, nu),
            dki_dy=stages(ndx, ndx),
            dli_dx=stages(ndx),
            dli_du=stages(nu),
            ddli_ddx=stages(ndx, ndx),
            ddli_ddudiff=stages(nu_diff, nu_diff),
            ddli_dudiffdu=stages(nu_diff, nu),
            ddli_ddu=stages(nu, nu),
            ddli_dxdudiff=stages(ndx, nu_diff),
            ddli_dxdu=stages(ndx, nu),
            Luu_partialx=stages(nu, nu),
            Lxu_i=stages(ndx, nu),
            Lxx_partialx=stages(ndx, ndx),
            Lxx_partialu=stages(ndx, nu),
        )
        data.dyi_dx[0][:] = np.eye(ndx)
        for dki_dy in data.dki_dy:
            dki_dy[:nv, ndx - nv:] = np.eye(nv)
        return data


class IntegratedActionModelRK2(IntegratedActionModelAbstract):
    """
    Explicit midpoint rule on x = [q, v]:

        k0 = [v, a(x, u(0))]
        y1 = x ⊕ (dt/2) k0
        k1 = [v(y1), a(y1, u(1/2))]
        xnext = x ⊕ dt k1,  cost = dt l(y1, u(1/2))

    Only the midpoint cost enters the integrated cost.
    """

    def calc(self, data: IntegratedActionDataRK2, x: NDArray, p: NDArray) -> None:
        x, p = self._check_inputs(x, p)
        self._forward(data, x, p)

    def calc_diff(self, data: IntegratedActionDataRK2, x: NDArray, p: NDArray) -> None:
        x, p = self._check_inputs(x, p)
        self._forward(data, x, p)

        state = self.state
        control = self._control
        nv = state.nv
        dt = self._time_step
        d0 = data.differential[0]
        self._differential.calc_diff(d0, x, data.u_diff[0])

        if not self._enable_integration:
            self._calc_diff_static(data, x, p)
            return

        # Stage 0: y0 = x
        c = RK2_C[0]
        data.dki_dy[0][nv:] = d0.Fx
        data.dki_dx[0][:] = data.dki_dy[0]
        data.dki_dudiff[0][nv:] = d0.Fu
        data.dki_du[0][:] = control.multiply_by_dvalue(c, p, data.dki_dudiff[0])

        data.dli_dx[0][:] = d0.Lx
        data.dli_du[0][:] = control.multiply_dvalue_transpose_by(c, p, d0.Lu)
        data.ddli_ddx[0][:] = d0.Lxx
        data.ddli_ddudiff[0][:] = d0.Luu
        data.ddli_dudiffdu[0][:] = control.multiply_by_dvalue(c, p, data.ddli_ddudiff[0])
        data.ddli_ddu[0][:] = control.multiply_dvalue_transpose_by(
            c, p, data.ddli_dudiffdu[0]
        )
        data.ddli_dxdudiff[0][:] = d0.Lxu
        data.ddli_dxdu[0][:] = control.multiply_by_dvalue(c, p, data.ddli_dxdudiff[0])

        # Stage 1: y1 = x ⊕ c dt k0, derivatives chained through y1
        i, c = 1, RK2_C[1]
        di = data.differential[i]
        self._differential.calc_diff(di, data.y[i], data.u_diff[i])
        data.dki_dy[i][nv:] = di.Fx

        data.dyi_dx[i][:] = state.Jintegrate_transport(
            x, data.dx_rk2[i], c * dt * data.dki_dx[i - 1], Jcomponent.SECOND
        ) + state.Jintegrate(x, data.dx_rk2[i], Jcomponent.FIRST)
        data.dki_dx[i][:] = data.dki_dy[i] @ data.dyi_dx[i]

        data.dyi_du[i][:] = state.Jintegrate_transport(
            x, data.dx_rk2[i], c * dt * data.dki_du[i - 1], Jcomponent.SECOND
        )
        data.dki_dudiff[i][nv:] = di.Fu
        data.dfi_du[i][:] = control.multiply_by_dvalue(c, p, data.dki_dudiff[i])
        data.dki_du[i][:] = data.dki_dy[i] @ data.dyi_du[i] + data.dfi_du[i]

        data.dli_dx[i][:] = data.dyi_dx[i].T @ di.Lx
        data.dli_du[i][:] = control.multiply_dvalue_transpose_by(
            c, p, di.Lu
        ) + data.dyi_du[i].T @ di.Lx

        data.Lxx_partialx[i][:] = di.Lxx @ data.dyi_dx[i]
        data.ddli_ddx[i][:] = data.dyi_dx[i].T @ data.Lxx_partialx[i]

        data.Lxu_i[i][:] = control.multiply_by_dvalue(c, p, di.Lxu)
        data.Luu_partialx[i][:] = data.Lxu_i[i].T @ data.dyi_du[i]
        data.Lxx_partialu[i][:] = di.Lxx @ data.dyi_du[i]
        data.ddli_ddudiff[i][:] = di.Luu
        data.ddli_dudiffdu[i][:] = control.multiply_by_dvalue(c, p, data.ddli_ddudiff[i])
        data.ddli_ddu[i][:] = (
            control.multiply_dvalue_transpose_by(c, p, data.ddli_dudiffdu[i])
            + data.Luu_partialx[i].T
            + data.Luu_partialx[i]
            + data.dyi_du[i].T @ data.Lxx_partialu[i]
        )

        data.ddli_dxdudiff[i][:] = data.dyi_dx[i].T @ di.Lxu
        data.ddli_dxdu[i][:] = (
            control.multiply_by_dvalue(c, p, data.ddli_dxdudiff[i])
            + data.dyi_dx[i].T @ data.Lxx_partialu[i]
        )

        # xnext = x ⊕ dt k1
        data.Fx[:] = state.Jintegrate_transport(
            x, data.dx, dt * data.dki_dx[i], Jcomponent.SECOND
        ) + state.Jintegrate(x, data.dx, Jcomponent.FIRST)
        data.Fu[:] = state.Jintegrate_transport(
            x, data.dx, dt * data.dki_du[i], Jcomponent.SECOND
        )

        data.Lx[:] = dt * data.dli_dx[i]
        data.Lu[:] = dt * data.dli_du[i]
        data.Lxx[:] = dt * data.ddli_ddx[i]
        data.Luu[:] = dt * data.ddli_ddu[i]
        data.Lxu[:] = dt * data.ddli_dxdu[i]

    def _forward(self, data: IntegratedActionDataRK2, x: NDArray, p: NDArray) -> None:
        state = self.state
        nv = state.nv
        dt = self._time_step
        d0 = data.differential[0]

        data.u_diff[0][:] = self._control.value(RK2_C[0], p)
        self._differential.calc(d0, x, data.u_diff[0])

        if self._enable_integration:
            data.y[0][:] = x
            data.ki[0][:nv] = x[x.shape[0] - nv:]
            data.ki[0][nv:] = d0.xout
            data.integral[0] = d0.cost

            d1 = data.differential[1]
            data.dx_rk2[1][:] = RK2_C[1] * dt * data.ki[0]
            data.y[1][:] = state.integrate(x, data.dx_rk2[1])
            data.u_diff[1][:] = self._control.value(RK2_C[1], p)
            self._differential.calc(d1, data.y[1], data.u_diff[1])
            data.ki[1][:nv] = data.y[1][data.y[1].shape[0] - nv:]
            data.ki[1][nv:] = d1.xout
            data.integral[1] = d1.cost

            data.dx[:] = dt * data.ki[1]
            data.xnext[:] = state.integrate(x, data.dx)
            data.cost = dt * data.integral[1]
        else:
            data.dx[:] = 0.0
            data.xnext[:] = x
            data.cost = d0.cost

        if self._with_cost_residual:
            data.r[:] = d0.r

    def create_data(self) -> IntegratedActionDataRK2:
        return IntegratedActionDataRK2.from_model(self)

    def check_data(self, data: IntegratedActionData) -> bool:
        if not isinstance(data, IntegratedActionDataRK2):
            return False
        return all(self._differential.check_data(d) for d in data.differential)
