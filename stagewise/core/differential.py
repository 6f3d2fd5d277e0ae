"""Differential (continuous-time) action model interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional
import numpy as np
import scipy.linalg
from numpy.typing import NDArray

from stagewise.core.state import StateManifold
from stagewise.utils.checks import check_vector


@dataclass
class DifferentialActionData:
    """Output record of a differential model evaluation."""

    xout: NDArray   # (nv,) acceleration
    r: NDArray      # (nr,) cost residual
    Fx: NDArray     # (nv, ndx)
    Fu: NDArray     # (nv, nu)
    Lx: NDArray     # (ndx,)
    Lu: NDArray     # (nu,)
    Lxx: NDArray    # (ndx, ndx)
    Lxu: NDArray    # (ndx, nu)
    Luu: NDArray    # (nu, nu)
    cost: float = 0.0
    model: Optional["DifferentialActionModelAbstract"] = field(
        default=None, repr=False, compare=False
    )  # creating model

    @classmethod
    def zeros(
        cls,
        nv: int,
        ndx: int,
        nu: int,
        nr: int,
        model: Optional["DifferentialActionModelAbstract"] = None,
    ) -> "DifferentialActionData":
        """Allocate a record with all buffers set to zero."""
        return cls(
            model=model,
            xout=np.zeros(nv),
            r=np.zeros(nr),
            Fx=np.zeros((nv, ndx)),
            Fu=np.zeros((nv, nu)),
            Lx=np.zeros(ndx),
            Lu=np.zeros(nu),
            Lxx=np.zeros((ndx, ndx)),
            Lxu=np.zeros((ndx, nu)),
            Luu=np.zeros((nu, nu)),
        )


class DifferentialActionModelAbstract(ABC):
    """
    Continuous-time dynamics xout = a(x, u) and running cost l(x, u).

    Subclasses fill a DifferentialActionData in place: calc writes xout,
    cost and r; calc_diff writes the first derivatives of the dynamics and
    the first and second derivatives of the cost.
    """

    def __init__(self, state: StateManifold, nu: int, nr: int = 0):
        self.state = state
        self.nu = nu
        self.nr = nr
        self._u_lb = np.full(nu, -np.inf)
        self._u_ub = np.full(nu, np.inf)

    @property
    def u_lb(self) -> NDArray:
        """Lower control limits."""
        return self._u_lb

    @u_lb.setter
    def u_lb(self, u_lb: NDArray) -> None:
        self._u_lb = check_vector("u_lb", u_lb, self.nu).copy()

    @property
    def u_ub(self) -> NDArray:
        """Upper control limits."""
        return self._u_ub

    @u_ub.setter
    def u_ub(self, u_ub: NDArray) -> None:
        self._u_ub = check_vector("u_ub", u_ub, self.nu).copy()

    @property
    def has_control_limits(self) -> bool:
        return bool(np.isfinite(self._u_lb).any() or np.isfinite(self._u_ub).any())

    @abstractmethod
    def calc(self, data: DifferentialActionData, x: NDArray, u: NDArray) -> None:
        """Evaluate dynamics and cost at (x, u)."""
        ...

    @abstractmethod
    def calc_diff(
        self, data: DifferentialActionData, x: NDArray, u: NDArray
    ) -> None:
        """Evaluate dynamics and cost derivatives at (x, u)."""
        ...

    def create_data(self) -> DifferentialActionData:
        return DifferentialActionData.zeros(
            self.state.nv, self.state.ndx, self.nu, self.nr, model=self
        )

    def check_data(self, data: DifferentialActionData) -> bool:
        """Check that data was created by this model and still fits its layout."""
        if not isinstance(data, DifferentialActionData) or data.model is not self:
            return False
        nv, ndx = self.state.nv, self.state.ndx
        return (
            data.xout.shape == (nv,)
            and data.r.shape == (self.nr,)
            and data.Fx.shape == (nv, ndx)
            and data.Fu.shape == (nv, self.nu)
            and data.Luu.shape == (self.nu, self.nu)
        )

    def quasi_static(
        self,
        data: DifferentialActionData,
        x: NDArray,
        maxiter: int = 100,
        tol: float = 1e-9,
    ) -> NDArray:
        """
        Control that (approximately) cancels the acceleration at x.

        Newton iterations on a(x_s, u) = 0, where x_s is x with zero
        velocity, using the pseudo-inverse of Fu.

        Args:
            data: Scratch data of this model
            x: State (nx,)
            maxiter: Maximum number of Newton iterations
            tol: Stopping tolerance on the Newton step norm

        Returns:
            Quasi-static control (nu,)
        """
        x_static = check_vector("x", x, self.state.nx).copy()
        nv = self.state.nv
        x_static[x_static.shape[0] - nv:] = 0.0

        u = np.zeros(self.nu)
        for _ in range(maxiter):
            self.calc(data, x_static, u)
            self.calc_diff(data, x_static, u)
            du = -scipy.linalg.pinv(data.Fu) @ data.xout
            u += du
            if np.linalg.norm(du) <= tol:
                break
        return u
