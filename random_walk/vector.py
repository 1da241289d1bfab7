"""
State Vector.

Fixed-size real vector over the seven random walk states, used for
weights, basis (feature) vectors, eligibility traces and deltas.

Values are immutable: every operation returns a new vector and the
backing float64 tensor is copied on construction.
"""

import math
from typing import Iterator, List, Sequence, Union

import torch
from torch import Tensor

from random_walk.states import NUM_STATES, StateIndexError, check_state


class DimensionMismatchError(ValueError):
    """Raised when a vector is built from other than NUM_STATES components."""
    pass


class StateVector:
    """Seven-dimensional real vector.

    Supports +, - (elementwise), @ / dot (dot product), * (scalar
    multiplication from either side), Euclidean norm and L-infinity norm.

    Args:
        components: Sequence of NUM_STATES numbers or a 1-D tensor

    Raises:
        DimensionMismatchError: If the component count is not NUM_STATES
    """

    SIZE = NUM_STATES

    __slots__ = ("data",)

    def __init__(self, components: Union[Sequence[float], Tensor]):
        if isinstance(components, Tensor):
            data = components.detach().to(torch.float64).clone()
        else:
            data = torch.tensor(list(components), dtype=torch.float64)

        if data.dim() != 1 or data.shape[0] != self.SIZE:
            raise DimensionMismatchError(
                f"StateVector requires {self.SIZE} components, got shape {tuple(data.shape)}"
            )
        self.data = data

    @classmethod
    def basis(cls, index: int) -> "StateVector":
        """Build the basis vector for a state.

        basis(0) = (1, 0, 0, 0, 0, 0, 0)
        basis(1) = (0, 1, 0, 0, 0, 0, 0)
        ...

        Args:
            index: State index in [0, 6]

        Returns:
            Vector with 1.0 at ``index`` and 0.0 elsewhere

        Raises:
            StateIndexError: If index is outside [0, 6]
        """
        check_state(index)
        data = torch.zeros(cls.SIZE, dtype=torch.float64)
        data[index] = 1.0
        return cls(data)

    @classmethod
    def zeros(cls) -> "StateVector":
        """Return the zero vector."""
        return cls(torch.zeros(cls.SIZE, dtype=torch.float64))

    def __add__(self, other: "StateVector") -> "StateVector":
        if not isinstance(other, StateVector):
            return NotImplemented
        return StateVector(self.data + other.data)

    def __sub__(self, other: "StateVector") -> "StateVector":
        if not isinstance(other, StateVector):
            return NotImplemented
        return StateVector(self.data - other.data)

    def __mul__(self, scalar: float) -> "StateVector":
        if isinstance(scalar, (StateVector, Tensor)):
            return NotImplemented
        return StateVector(self.data * float(scalar))

    def __rmul__(self, scalar: float) -> "StateVector":
        return self.__mul__(scalar)

    def __matmul__(self, other: "StateVector") -> float:
        if not isinstance(other, StateVector):
            return NotImplemented
        return self.dot(other)

    def dot(self, other: "StateVector") -> float:
        """Dot product with another vector."""
        return float(torch.dot(self.data, other.data))

    def norm(self) -> float:
        """Euclidean norm."""
        return math.sqrt(self.dot(self))

    def max_abs(self) -> float:
        """L-infinity norm (largest absolute component)."""
        return float(self.data.abs().max())

    def allclose(self, other: "StateVector", atol: float = 1e-9) -> bool:
        """Componentwise comparison within an absolute tolerance."""
        return bool(torch.allclose(self.data, other.data, rtol=0.0, atol=atol))

    def to_list(self) -> List[float]:
        return self.data.tolist()

    def __getitem__(self, index: int) -> float:
        return float(self.data[check_state(index)])

    def __len__(self) -> int:
        return self.SIZE

    def __iter__(self) -> Iterator[float]:
        return iter(self.to_list())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateVector):
            return NotImplemented
        return bool(torch.equal(self.data, other.data))

    __hash__ = None

    def __repr__(self) -> str:
        return "StateVector(" + ", ".join(f"{v:g}" for v in self.to_list()) + ")"


__all__ = ["StateVector", "DimensionMismatchError", "StateIndexError"]
