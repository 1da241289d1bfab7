"""
Random Walk States.

States are plain integer indices into the chain. Only index arithmetic and
comparison against the two terminals are ever performed on them, so no
state type is defined beyond the named constants below.
"""

from typing import List, Sequence, Tuple


class StateIndexError(IndexError):
    """Raised when a state index falls outside [0, NUM_STATES - 1]."""
    pass


class InvalidWalkError(ValueError):
    """Raised when a walk cannot be traversed.

    A walk must contain at least two states, end on a terminal, and not
    pass through a terminal before its last state.
    """
    pass


NUM_STATES = 7

# Absorbing states and their outcomes
LOW_TERMINAL = 0
HIGH_TERMINAL = 6
LOW_OUTCOME = 0.0
HIGH_OUTCOME = 1.0

START_STATE = 3

TRANSIENT_STATES = tuple(range(LOW_TERMINAL + 1, HIGH_TERMINAL))

# A walk is immutable once generated; a training set keeps walk order
Walk = Tuple[int, ...]
TrainingSet = List[Walk]


def is_terminal(state: int) -> bool:
    """Return True for the two absorbing states."""
    return state == LOW_TERMINAL or state == HIGH_TERMINAL


def check_state(state: int) -> int:
    """Validate a single state index.

    Args:
        state: Candidate state index

    Returns:
        The same index

    Raises:
        StateIndexError: If the index is outside the chain
    """
    if not 0 <= state < NUM_STATES:
        raise StateIndexError(
            f"State index {state} out of range [0, {NUM_STATES - 1}]"
        )
    return state


def terminal_outcome(state: int) -> float:
    """Outcome observed when a walk is absorbed in ``state``."""
    if state == LOW_TERMINAL:
        return LOW_OUTCOME
    if state == HIGH_TERMINAL:
        return HIGH_OUTCOME
    raise ValueError(f"State {state} is not terminal")


def validate_walk(walk: Sequence[int]) -> Walk:
    """Check that a walk can be traversed by the learner.

    Args:
        walk: Sequence of state indices

    Returns:
        The walk as a tuple

    Raises:
        InvalidWalkError: If the walk is too short or malformed
        StateIndexError: If any state is outside the chain
    """
    walk = tuple(walk)
    if len(walk) < 2:
        raise InvalidWalkError(
            f"Walk must contain at least 2 states, got {len(walk)}"
        )

    for state in walk:
        check_state(state)

    if not is_terminal(walk[-1]):
        raise InvalidWalkError(f"Walk must end on a terminal state, ends on {walk[-1]}")
    if any(is_terminal(state) for state in walk[:-1]):
        raise InvalidWalkError("Walk passes through a terminal state before its end")

    return walk
