"""Finite-difference derivatives of integrated action models."""

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray

from stagewise.integrators.base import IntegratedActionModelAbstract


@dataclass
class NumDiffDerivatives:
    """Central-difference approximations of the calc_diff outputs."""

    Fx: NDArray   # (ndx, ndx)
    Fu: NDArray   # (ndx, nu)
    Lx: NDArray   # (ndx,)
    Lu: NDArray   # (nu,)
    Lxx: NDArray  # (ndx, ndx)
    Lxu: NDArray  # (ndx, nu)
    Luu: NDArray  # (nu, nu)


def numdiff_derivatives(
    model: IntegratedActionModelAbstract,
    x: NDArray,
    p: NDArray,
    eps: float = 1e-6,
) -> NumDiffDerivatives:
    """
    Approximate the derivatives computed by model.calc_diff.

    State perturbations go through the manifold (x ⊕ ±eps e_j) and next-state
    differences are measured with diff, so Fx and Fu are tangent-space
    Jacobians. First derivatives difference calc; second derivatives
    difference the analytic gradients of calc_diff, which makes them exact
    up to O(eps^2) only on vector spaces.

    Args:
        model: Integrated action model
        x: State (nx,)
        p: Control parameters (nu,)
        eps: Perturbation size

    Returns:
        Finite-difference derivatives
    """
    state = model.state
    ndx, nu = state.ndx, model.nu
    data = model.create_data()
    x = np.asarray(x, dtype=float)
    p = np.asarray(p, dtype=float)

    model.calc(data, x, p)
    xnext0 = data.xnext.copy()

    def evaluate(x_: NDArray, p_: NDArray) -> tuple[NDArray, float, NDArray, NDArray]:
        model.calc_diff(data, x_, p_)
        return state.diff(xnext0, data.xnext), data.cost, data.Lx.copy(), data.Lu.copy()

    out = NumDiffDerivatives(
        Fx=np.zeros((ndx, ndx)),
        Fu=np.zeros((ndx, nu)),
        Lx=np.zeros(ndx),
        Lu=np.zeros(nu),
        Lxx=np.zeros((ndx, ndx)),
        Lxu=np.zeros((ndx, nu)),
        Luu=np.zeros((nu, nu)),
    )

    for j in range(ndx):
        dx = np.zeros(ndx)
        dx[j] = eps
        dxn_p, cost_p, Lx_p, _ = evaluate(state.integrate(x, dx), p)
        dxn_m, cost_m, Lx_m, _ = evaluate(state.integrate(x, -dx), p)
        out.Fx[:, j] = (dxn_p - dxn_m) / (2.0 * eps)
        out.Lx[j] = (cost_p - cost_m) / (2.0 * eps)
        out.Lxx[:, j] = (Lx_p - Lx_m) / (2.0 * eps)

    for j in range(nu):
        dp = np.zeros(nu)
        dp[j] = eps
        dxn_p, cost_p, Lx_p, Lu_p = evaluate(x, p + dp)
        dxn_m, cost_m, Lx_m, Lu_m = evaluate(x, p - dp)
        out.Fu[:, j] = (dxn_p - dxn_m) / (2.0 * eps)
        out.Lu[j] = (cost_p - cost_m) / (2.0 * eps)
        out.Lxu[:, j] = (Lx_p - Lx_m) / (2.0 * eps)
        out.Luu[:, j] = (Lu_p - Lu_m) / (2.0 * eps)

    return out
