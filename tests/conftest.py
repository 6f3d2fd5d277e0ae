"""Shared test models."""

import numpy as np
import pytest

from stagewise.core.differential import DifferentialActionModelAbstract
from stagewise.core.state import Jcomponent
from stagewise.models.lqr import DifferentialActionModelLQR
from stagewise.states.vector import StateVector


class WarpedState:
    """
    Vector space with the non-additive retraction

        x ⊕ dx = x + dx + alpha/2 dx∘dx

    Jintegrate w.r.t. dx is diag(1 + alpha dx), so derivative propagation
    through the manifold is exercised with non-identity Jacobians.
    """

    def __init__(self, nq, alpha=0.3):
        self._nx = 2 * nq
        self.alpha = alpha

    @property
    def nx(self):
        return self._nx

    @property
    def ndx(self):
        return self._nx

    @property
    def nq(self):
        return self._nx // 2

    @property
    def nv(self):
        return self._nx // 2

    def zero(self):
        return np.zeros(self._nx)

    def rand(self):
        return np.random.rand(self._nx)

    def integrate(self, x, dx):
        return x + dx + 0.5 * self.alpha * dx * dx

    def diff(self, x0, x1):
        d = x1 - x0
        return 2.0 * d / (1.0 + np.sqrt(1.0 + 2.0 * self.alpha * d))

    def Jintegrate(self, x, dx, firstsecond=Jcomponent.BOTH):
        Jfirst = np.eye(self._nx)
        Jsecond = np.diag(1.0 + self.alpha * dx)
        if firstsecond == Jcomponent.FIRST:
            return Jfirst
        if firstsecond == Jcomponent.SECOND:
            return Jsecond
        return Jfirst, Jsecond

    def Jintegrate_transport(self, x, dx, Jin, firstsecond):
        if firstsecond == Jcomponent.SECOND:
            scale = 1.0 + self.alpha * dx
            return scale.reshape((-1,) + (1,) * (Jin.ndim - 1)) * Jin
        return Jin.copy()


class Pendulum(DifferentialActionModelAbstract):
    """
    Damped pendulum: a = -k sin(q) - b v + beta u

    Cost: l = 1/2 wq sin(q)^2 + 1/2 wv v^2 + 1/2 wu u^2 + c q u
    Residual: r = [sin(q), v, u]
    """

    def __init__(self, state=None, k=9.81, b=0.1, beta=1.0, wq=1.0, wv=0.1, wu=0.01, c=0.05):
        super().__init__(state if state is not None else StateVector(2), nu=1, nr=3)
        self.k, self.b, self.beta = k, b, beta
        self.wq, self.wv, self.wu, self.c = wq, wv, wu, c

    def calc(self, data, x, u):
        q, v = x
        data.xout[:] = [-self.k * np.sin(q) - self.b * v + self.beta * u[0]]
        data.r[:] = [np.sin(q), v, u[0]]
        data.cost = (
            0.5 * self.wq * np.sin(q) ** 2
            + 0.5 * self.wv * v ** 2
            + 0.5 * self.wu * u[0] ** 2
            + self.c * q * u[0]
        )

    def calc_diff(self, data, x, u):
        q, v = x
        data.Fx[:] = [[-self.k * np.cos(q), -self.b]]
        data.Fu[:] = [[self.beta]]
        data.Lx[:] = [self.wq * np.sin(q) * np.cos(q) + self.c * u[0], self.wv * v]
        data.Lu[:] = [self.wu * u[0] + self.c * q]
        data.Lxx[:] = [[self.wq * np.cos(2 * q), 0.0], [0.0, self.wv]]
        data.Lxu[:] = [[self.c], [0.0]]
        data.Luu[:] = [[self.wu]]

    def rhs(self, t, y, u=0.0):
        """Right-hand side for scipy.integrate.solve_ivp."""
        q, v = y
        return [v, -self.k * np.sin(q) - self.b * v + self.beta * u]

    def __repr__(self):
        return "Pendulum"


@pytest.fixture
def double_integrator():
    """a = u, l = 1/2 u^2 on x = [q, v]."""
    return DifferentialActionModelLQR(Fq=[[0.0]], Fv=[[0.0]], Fu=[[1.0]])


@pytest.fixture
def lqr():
    return DifferentialActionModelLQR.random(nq=3, nu=2, drift_free=False, seed=42)


@pytest.fixture
def pendulum():
    return Pendulum()


@pytest.fixture
def warped_pendulum():
    return Pendulum(state=WarpedState(nq=1, alpha=0.3))
