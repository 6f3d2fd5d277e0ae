"""First-order (linear) control parametrization."""

import numpy as np
from numpy.typing import NDArray

from stagewise.core.control import ControlParametrizationAbstract
from stagewise.utils.checks import check_rows, check_cols


class ControlParametrizationPolyOne(ControlParametrizationAbstract):
    """
    Control interpolated linearly over the step.

    p = [u0, u1] holds the control at the start and at the end of the step;
    u(t) = (1 - t) u0 + t u1, so np == 2 nu. Every u(t) with t in [0, 1] is
    a convex combination of u0 and u1, hence replicating the control box on
    both halves of p keeps u(t) inside it.
    """

    def __init__(self, nu: int):
        super().__init__(nu, 2 * nu)

    def resize(self, nu: int) -> None:
        self._nu = nu
        self._np = 2 * nu

    def _weights(self, t: float) -> tuple[float, float]:
        return 1.0 - t, t

    def value(self, t: float, p: NDArray) -> NDArray:
        p = self._check_p(p)
        c0, c1 = self._weights(t)
        return c0 * p[: self._nu] + c1 * p[self._nu:]

    def value_inv(self, t: float, u: NDArray) -> NDArray:
        u = self._check_u(u)
        return np.concatenate([u, u])

    def convert_bounds(
        self, u_lb: NDArray, u_ub: NDArray
    ) -> tuple[NDArray, NDArray]:
        u_lb = self._check_u(u_lb)
        u_ub = self._check_u(u_ub)
        return np.concatenate([u_lb, u_lb]), np.concatenate([u_ub, u_ub])

    def dvalue(self, t: float, p: NDArray) -> NDArray:
        self._check_p(p)
        c0, c1 = self._weights(t)
        eye = np.eye(self._nu)
        return np.hstack([c0 * eye, c1 * eye])

    def multiply_by_dvalue(self, t: float, p: NDArray, A: NDArray) -> NDArray:
        self._check_p(p)
        A = check_cols("A", A, self._nu)
        c0, c1 = self._weights(t)
        return np.concatenate([c0 * A, c1 * A], axis=-1)

    def multiply_dvalue_transpose_by(
        self, t: float, p: NDArray, A: NDArray
    ) -> NDArray:
        self._check_p(p)
        A = check_rows("A", A, self._nu)
        c0, c1 = self._weights(t)
        return np.concatenate([c0 * A, c1 * A], axis=0)
