"""State manifold protocol."""

from typing import Protocol, Union
from enum import Enum, auto
from numpy.typing import NDArray


class Jcomponent(Enum):
    """Which argument of integrate a Jacobian refers to."""
    FIRST = auto()   # w.r.t. the base point x
    SECOND = auto()  # w.r.t. the increment dx
    BOTH = auto()


class StateManifold(Protocol):
    """
    State space with a retraction.

    States x live in an nx-dimensional embedding; increments dx live in the
    ndx-dimensional tangent space. For second-order systems x = [q, v] and
    increments are laid out as [dq, dv], each block nv rows.
    """

    @property
    def nx(self) -> int:
        """Dimension of the state embedding."""
        ...

    @property
    def ndx(self) -> int:
        """Dimension of the tangent space."""
        ...

    @property
    def nq(self) -> int:
        """Dimension of the configuration."""
        ...

    @property
    def nv(self) -> int:
        """Dimension of the velocity."""
        ...

    def zero(self) -> NDArray:
        """Neutral state."""
        ...

    def rand(self) -> NDArray:
        """Random state."""
        ...

    def integrate(self, x: NDArray, dx: NDArray) -> NDArray:
        """Retraction: x' = x ⊕ dx."""
        ...

    def diff(self, x0: NDArray, x1: NDArray) -> NDArray:
        """Inverse retraction: dx = x1 ⊖ x0."""
        ...

    def Jintegrate(
        self, x: NDArray, dx: NDArray, firstsecond: Jcomponent = Jcomponent.BOTH
    ) -> Union[NDArray, tuple[NDArray, NDArray]]:
        """
        Jacobians of integrate.

        Args:
            x: Base point (nx,)
            dx: Increment (ndx,)
            firstsecond: Which Jacobian to return

        Returns:
            (ndx, ndx) Jacobian w.r.t. x or dx, or both as a tuple
        """
        ...

    def Jintegrate_transport(
        self, x: NDArray, dx: NDArray, Jin: NDArray, firstsecond: Jcomponent
    ) -> NDArray:
        """
        Apply the Jacobian selected in firstsecond to Jin.

        Equivalent to Jintegrate(x, dx, firstsecond) @ Jin without forming
        the Jacobian.

        Args:
            x: Base point (nx,)
            dx: Increment (ndx,)
            Jin: Matrix with ndx rows
            firstsecond: Jcomponent.FIRST or Jcomponent.SECOND

        Returns:
            Transported matrix, same shape as Jin
        """
        ...
