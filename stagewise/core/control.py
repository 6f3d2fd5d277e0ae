"""Control parametrization interface."""

from abc import ABC, abstractmethod
from numpy.typing import NDArray

from stagewise.utils.checks import check_vector, check_rows, check_cols


class ControlParametrizationAbstract(ABC):
    """
    Control trajectory over one integration step.

    The control u(t) is a function of the normalized time t in [0, 1]
    (0 at the start of the step, 1 at its end) and of the parameters p. The
    parameter space may be larger than the control space.
    """

    def __init__(self, nu: int, nparams: int):
        self._nu = nu
        self._np = nparams

    @property
    def nu(self) -> int:
        """Dimension of the control value."""
        return self._nu

    @property
    def np(self) -> int:
        """Dimension of the control parameters."""
        return self._np

    @abstractmethod
    def resize(self, nu: int) -> None:
        """Change the control dimension (and the parameter dimension with it)."""
        ...

    @abstractmethod
    def value(self, t: float, p: NDArray) -> NDArray:
        """Control value u(t) for parameters p, shape (nu,)."""
        ...

    @abstractmethod
    def value_inv(self, t: float, u: NDArray) -> NDArray:
        """Parameters p such that value(t, p) == u, shape (np,)."""
        ...

    @abstractmethod
    def convert_bounds(
        self, u_lb: NDArray, u_ub: NDArray
    ) -> tuple[NDArray, NDArray]:
        """
        Map box bounds on u to box bounds on p.

        Any p inside the returned box yields value(t, p) inside [u_lb, u_ub].
        """
        ...

    @abstractmethod
    def dvalue(self, t: float, p: NDArray) -> NDArray:
        """Jacobian of value w.r.t. p, shape (nu, np)."""
        ...

    def multiply_by_dvalue(self, t: float, p: NDArray, A: NDArray) -> NDArray:
        """
        Compute A @ dvalue(t, p).

        Args:
            t: Normalized time
            p: Control parameters (np,)
            A: Matrix (m, nu)

        Returns:
            Product (m, np)
        """
        A = check_cols("A", A, self._nu)
        return A @ self.dvalue(t, p)

    def multiply_dvalue_transpose_by(
        self, t: float, p: NDArray, A: NDArray
    ) -> NDArray:
        """
        Compute dvalue(t, p).T @ A.

        Args:
            t: Normalized time
            p: Control parameters (np,)
            A: Matrix (nu, m) or vector (nu,)

        Returns:
            Product (np, m) or (np,)
        """
        A = check_rows("A", A, self._nu)
        return self.dvalue(t, p).T @ A

    def _check_p(self, p: NDArray) -> NDArray:
        return check_vector("p", p, self._np)

    def _check_u(self, u: NDArray) -> NDArray:
        return check_vector("u", u, self._nu)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nu={self._nu}, np={self._np})"
