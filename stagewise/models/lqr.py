"""Linear-quadratic differential action model."""

from typing import Optional
import numpy as np
from numpy.typing import NDArray

from stagewise.core.differential import (
    DifferentialActionModelAbstract,
    DifferentialActionData,
)
from stagewise.states.vector import StateVector
from stagewise.utils.checks import check_vector


class DifferentialActionModelLQR(DifferentialActionModelAbstract):
    """
    Linear dynamics with a quadratic cost on a Euclidean state x = [q, v].

        a(x, u) = Fq q + Fv v + Fu u + f0
        l(x, u) = 1/2 x'Q x + x'N u + 1/2 u'R u + lx'x + lu'u

    The residual is r = [x, u].
    """

    def __init__(
        self,
        Fq: NDArray,
        Fv: NDArray,
        Fu: NDArray,
        f0: Optional[NDArray] = None,
        Q: Optional[NDArray] = None,
        N: Optional[NDArray] = None,
        R: Optional[NDArray] = None,
        lx: Optional[NDArray] = None,
        lu: Optional[NDArray] = None,
    ):
        Fq, Fv, Fu = (np.atleast_2d(np.asarray(A, dtype=float)) for A in (Fq, Fv, Fu))
        nq, nu = Fu.shape
        nx = 2 * nq
        if Fq.shape != (nq, nq) or Fv.shape != (nq, nq):
            raise ValueError(
                f"Invalid argument: Fq and Fv have wrong dimension (it should be {nq}x{nq})"
            )
        super().__init__(StateVector(nx), nu, nr=nx + nu)

        self.Fq = Fq
        self.Fv = Fv
        self.Fu = Fu
        self.f0 = np.zeros(nq) if f0 is None else check_vector("f0", f0, nq)
        self.Q = _symmetric("Q", np.zeros((nx, nx)) if Q is None else Q, nx)
        self.R = _symmetric("R", np.eye(nu) if R is None else R, nu)
        self.N = np.zeros((nx, nu)) if N is None else np.asarray(N, dtype=float)
        if self.N.shape != (nx, nu):
            raise ValueError(
                f"Invalid argument: N has wrong dimension (it should be {nx}x{nu})"
            )
        self.lx = np.zeros(nx) if lx is None else check_vector("lx", lx, nx)
        self.lu = np.zeros(nu) if lu is None else check_vector("lu", lu, nu)

    @classmethod
    def random(
        cls, nq: int, nu: int, drift_free: bool = True, seed: Optional[int] = None
    ) -> "DifferentialActionModelLQR":
        """LQR problem with random dynamics and a positive definite cost."""
        rng = np.random.default_rng(seed)
        nx = 2 * nq
        Lq = rng.standard_normal((nx, nx))
        Lr = rng.standard_normal((nu, nu))
        return cls(
            Fq=rng.standard_normal((nq, nq)),
            Fv=rng.standard_normal((nq, nq)),
            Fu=rng.standard_normal((nq, nu)),
            f0=np.zeros(nq) if drift_free else rng.standard_normal(nq),
            Q=Lq @ Lq.T,
            N=rng.standard_normal((nx, nu)),
            R=Lr @ Lr.T + np.eye(nu),
            lx=rng.standard_normal(nx),
            lu=rng.standard_normal(nu),
        )

    def calc(self, data: DifferentialActionData, x: NDArray, u: NDArray) -> None:
        x = check_vector("x", x, self.state.nx)
        u = check_vector("u", u, self.nu)
        nq = self.state.nq
        q, v = x[:nq], x[nq:]

        data.xout[:] = self.Fq @ q + self.Fv @ v + self.Fu @ u + self.f0
        data.r[: x.shape[0]] = x
        data.r[x.shape[0]:] = u
        data.cost = float(
            0.5 * x @ self.Q @ x
            + x @ self.N @ u
            + 0.5 * u @ self.R @ u
            + self.lx @ x
            + self.lu @ u
        )

    def calc_diff(
        self, data: DifferentialActionData, x: NDArray, u: NDArray
    ) -> None:
        x = check_vector("x", x, self.state.nx)
        u = check_vector("u", u, self.nu)

        data.Fx[:] = np.hstack([self.Fq, self.Fv])
        data.Fu[:] = self.Fu
        data.Lx[:] = self.Q @ x + self.N @ u + self.lx
        data.Lu[:] = self.R @ u + self.N.T @ x + self.lu
        data.Lxx[:] = self.Q
        data.Lxu[:] = self.N
        data.Luu[:] = self.R

    def __repr__(self) -> str:
        return f"DifferentialActionModelLQR {{nq={self.state.nq}, nu={self.nu}}}"


def _symmetric(name: str, A: NDArray, n: int) -> NDArray:
    A = np.asarray(A, dtype=float)
    if A.shape != (n, n):
        raise ValueError(
            f"Invalid argument: {name} has wrong dimension (it should be {n}x{n})"
        )
    return 0.5 * (A + A.T)
