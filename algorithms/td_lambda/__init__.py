"""
TD(lambda) Algorithm Module with Eligibility Traces.

Temporal-difference learning of state values on the bounded random walk
(Sutton 1988). Lambda controls how far back credit for each prediction
error is assigned:
- lambda=0: TD(0), one-step bootstrapping
- lambda=1: Widrow-Hoff, equivalent to outcome-based supervised learning

Weights are trained either in batch (updates summed over a sweep and
applied at its end) or online (applied after every walk).
"""

from algorithms.td_lambda.eligibility_traces import EligibilityTrace
from algorithms.td_lambda.learner import (
    TD,
    TARGET_WEIGHTS,
    EmptyTrainingSetError,
    ErrorStats,
    TrainingResult,
    root_mean_square_error,
)

__all__ = [
    "TD",
    "TARGET_WEIGHTS",
    "EligibilityTrace",
    "EmptyTrainingSetError",
    "ErrorStats",
    "TrainingResult",
    "root_mean_square_error",
]
