"""Forward rollout of a chain of integrated models."""

from dataclasses import dataclass
from typing import Optional, Sequence, Union
import numpy as np
from numpy.typing import NDArray

from stagewise.integrators.base import IntegratedActionModelAbstract, IntegratedActionData
from stagewise.utils.checks import check_vector


@dataclass
class Trajectory:
    """States and stage costs of a rollout."""

    xs: NDArray                      # (N+1, nx)
    costs: NDArray                   # (N,)
    datas: list[IntegratedActionData]  # Per-node scratch data

    @property
    def N(self) -> int:
        """Number of nodes."""
        return len(self.datas)

    @property
    def total_cost(self) -> float:
        return float(np.sum(self.costs))


def rollout(
    models: Union[IntegratedActionModelAbstract, Sequence[IntegratedActionModelAbstract]],
    x0: NDArray,
    ps: NDArray,
    datas: Optional[Sequence[IntegratedActionData]] = None,
) -> Trajectory:
    """
    Chain calc over the nodes: x_{k+1} = xnext(x_k, p_k).

    Args:
        models: One model per node, or a single model used at every node
        x0: Initial state (nx,)
        ps: Control parameters, one row per node (N, nu)
        datas: Scratch data per node (created if not provided)

    Returns:
        Trajectory with N+1 states and N costs
    """
    N = len(ps)
    if isinstance(models, IntegratedActionModelAbstract):
        models = [models] * N
    if len(models) != N:
        raise ValueError(
            f"Invalid argument: expected {N} models (one per control), got {len(models)}"
        )

    if datas is None:
        datas = [model.create_data() for model in models]
    elif len(datas) != N:
        raise ValueError(
            f"Invalid argument: expected {N} data records, got {len(datas)}"
        )
    for k, (model, data) in enumerate(zip(models, datas)):
        if not model.check_data(data):
            raise ValueError(f"Invalid argument: data {k} was not created by model {k}")

    if N > 0:
        x0 = check_vector("x0", x0, models[0].state.nx)
    else:
        x0 = np.atleast_1d(np.asarray(x0, dtype=float))
    xs = np.zeros((N + 1, x0.shape[0]))
    xs[0] = x0
    costs = np.zeros(N)

    for k, (model, data) in enumerate(zip(models, datas)):
        model.calc(data, xs[k], ps[k])
        xs[k + 1] = data.xnext
        costs[k] = data.cost

    return Trajectory(xs=xs, costs=costs, datas=list(datas))
