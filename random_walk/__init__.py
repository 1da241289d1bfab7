"""
Bounded Random Walk Package.

The seven-state chain used in Sutton (1988), section 3.2:

    0 - 1 - 2 - 3 - 4 - 5 - 6

States 0 and 6 are absorbing terminals with outcomes 0 and 1. Every walk
starts at the middle state 3 and moves one step left or right with equal
probability until it is absorbed.

Key modules:
- states: State constants, walk aliases and walk validation
- vector: StateVector, the 7-dimensional real vector
- generator: RandomWalkGenerator, seeded walk and training set generation
"""

from random_walk.states import (
    NUM_STATES,
    LOW_TERMINAL,
    HIGH_TERMINAL,
    START_STATE,
    TRANSIENT_STATES,
    InvalidWalkError,
    Walk,
    TrainingSet,
    is_terminal,
    validate_walk,
)
from random_walk.vector import StateVector, DimensionMismatchError, StateIndexError
from random_walk.generator import RandomWalkGenerator

__all__ = [
    "NUM_STATES",
    "LOW_TERMINAL",
    "HIGH_TERMINAL",
    "START_STATE",
    "TRANSIENT_STATES",
    "InvalidWalkError",
    "Walk",
    "TrainingSet",
    "is_terminal",
    "validate_walk",
    "StateVector",
    "DimensionMismatchError",
    "StateIndexError",
    "RandomWalkGenerator",
]
