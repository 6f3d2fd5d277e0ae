"""Zero-order (constant) control parametrization."""

import numpy as np
from numpy.typing import NDArray

from stagewise.core.control import ControlParametrizationAbstract
from stagewise.utils.checks import check_rows, check_cols


class ControlParametrizationPolyZero(ControlParametrizationAbstract):
    """Control held constant over the step: u(t) = p, np == nu."""

    def __init__(self, nu: int):
        super().__init__(nu, nu)

    def resize(self, nu: int) -> None:
        self._nu = nu
        self._np = nu

    def value(self, t: float, p: NDArray) -> NDArray:
        return self._check_p(p).copy()

    def value_inv(self, t: float, u: NDArray) -> NDArray:
        return self._check_u(u).copy()

    def convert_bounds(
        self, u_lb: NDArray, u_ub: NDArray
    ) -> tuple[NDArray, NDArray]:
        u_lb = self._check_u(u_lb)
        u_ub = self._check_u(u_ub)
        return u_lb.copy(), u_ub.copy()

    def dvalue(self, t: float, p: NDArray) -> NDArray:
        self._check_p(p)
        return np.eye(self._nu)

    def multiply_by_dvalue(self, t: float, p: NDArray, A: NDArray) -> NDArray:
        self._check_p(p)
        return check_cols("A", A, self._nu).copy()

    def multiply_dvalue_transpose_by(
        self, t: float, p: NDArray, A: NDArray
    ) -> NDArray:
        self._check_p(p)
        return check_rows("A", A, self._nu).copy()
