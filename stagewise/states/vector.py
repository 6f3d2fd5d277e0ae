"""Euclidean state manifold."""

from typing import Union
import numpy as np
from numpy.typing import NDArray

from stagewise.core.state import Jcomponent
from stagewise.utils.checks import check_vector, check_rows


class StateVector:
    """
    Vector-space state: integrate is addition, all Jacobians are identity.

    The first half of x is read as configuration, the second half as
    velocity.
    """

    def __init__(self, nx: int):
        self._nx = nx

    @property
    def nx(self) -> int:
        return self._nx

    @property
    def ndx(self) -> int:
        return self._nx

    @property
    def nq(self) -> int:
        return self._nx // 2

    @property
    def nv(self) -> int:
        return self._nx // 2

    def zero(self) -> NDArray:
        return np.zeros(self._nx)

    def rand(self) -> NDArray:
        return np.random.rand(self._nx)

    def integrate(self, x: NDArray, dx: NDArray) -> NDArray:
        x = check_vector("x", x, self._nx)
        dx = check_vector("dx", dx, self._nx)
        return x + dx

    def diff(self, x0: NDArray, x1: NDArray) -> NDArray:
        x0 = check_vector("x0", x0, self._nx)
        x1 = check_vector("x1", x1, self._nx)
        return x1 - x0

    def Jintegrate(
        self, x: NDArray, dx: NDArray, firstsecond: Jcomponent = Jcomponent.BOTH
    ) -> Union[NDArray, tuple[NDArray, NDArray]]:
        check_vector("x", x, self._nx)
        check_vector("dx", dx, self._nx)
        if firstsecond == Jcomponent.BOTH:
            return np.eye(self._nx), np.eye(self._nx)
        return np.eye(self._nx)

    def Jintegrate_transport(
        self, x: NDArray, dx: NDArray, Jin: NDArray, firstsecond: Jcomponent
    ) -> NDArray:
        check_vector("x", x, self._nx)
        check_vector("dx", dx, self._nx)
        if firstsecond == Jcomponent.BOTH:
            raise ValueError("Jintegrate_transport needs FIRST or SECOND")
        return check_rows("Jin", Jin, self._nx).copy()

    def __repr__(self) -> str:
        return f"StateVector(nx={self._nx})"
