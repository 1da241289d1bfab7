"""
TD(lambda) Learner.

Implements the TD(lambda) weight update of Sutton (1988), equation (4):

    delta_w_t = alpha * (P_{t+1} - P_t) * sum_{k=1..t} lambda^(t-k) * grad_w P_k

with linear predictions P = w . x over basis (one-hot) state vectors, so
the gradient of P_k is the basis vector of the state visited at step k.

Walk traversal and the per-sweep convergence loop are plain loops with
local accumulators. The eligibility traces of a walk depend only on the
walk and lambda, so they are computed once per training run and reused by
every sweep; prediction errors are the only quantities recomputed against
the current weights.
"""

import statistics
from dataclasses import dataclass
from typing import List, NamedTuple, Sequence

import torch
from torch import Tensor

from algorithms.td_lambda.eligibility_traces import EligibilityTrace
from random_walk.states import (
    HIGH_OUTCOME,
    HIGH_TERMINAL,
    LOW_OUTCOME,
    LOW_TERMINAL,
    NUM_STATES,
    TRANSIENT_STATES,
    TrainingSet,
    is_terminal,
    terminal_outcome,
    validate_walk,
)
from random_walk.vector import StateVector


class EmptyTrainingSetError(ValueError):
    """Raised when training or evaluation is given no walks to learn from."""
    pass


# Analytically correct state values for the bounded random walk
TARGET_WEIGHTS = StateVector([0.0, 1 / 6, 1 / 3, 1 / 2, 2 / 3, 5 / 6, 1.0])

_TRANSIENT_SLICE = slice(TRANSIENT_STATES[0], TRANSIENT_STATES[-1] + 1)


class ErrorStats(NamedTuple):
    """Mean and population standard deviation of per-set RMSEs."""
    mean: float
    std: float


@dataclass
class TrainingResult:
    """Result of training on one training set.

    Attributes:
        weights: Final weights vector
        sweeps: Number of sweeps performed over the training set
        converged: True if training stopped on the tolerance test
    """
    weights: StateVector
    sweeps: int
    converged: bool


@dataclass
class _WalkSteps:
    """Per-step tensors of one or more walks, in traversal order.

    Row t describes the transition from the current state to the next.

    Attributes:
        features: (T, NUM_STATES) basis vector of the current state
        next_features: (T, NUM_STATES) basis vector of the next state,
            zero when the next state is terminal
        outcomes: (T,) outcome of the next state when terminal, else 0
        traces: (T, NUM_STATES) eligibility trace after each step
    """
    features: Tensor
    next_features: Tensor
    outcomes: Tensor
    traces: Tensor

    @classmethod
    def concat(cls, steps: Sequence["_WalkSteps"]) -> "_WalkSteps":
        """Join the steps of several walks into one block."""
        return cls(
            features=torch.cat([s.features for s in steps]),
            next_features=torch.cat([s.next_features for s in steps]),
            outcomes=torch.cat([s.outcomes for s in steps]),
            traces=torch.cat([s.traces for s in steps]),
        )


def root_mean_square_error(
    weights: StateVector,
    target: StateVector = TARGET_WEIGHTS,
) -> float:
    """RMSE between weights and target over the transient states only.

    Terminal components are definitionally correct and excluded.

    Args:
        weights: Learned weights vector
        target: Reference state values

    Returns:
        Root-mean-square error over the five transient components
    """
    diff = (target.data - weights.data)[_TRANSIENT_SLICE]
    return float(torch.sqrt(torch.mean(diff * diff)))


def _check_terminal_weights(weights: StateVector) -> None:
    """Terminal weights are pinned at their outcomes."""
    if weights[LOW_TERMINAL] != LOW_OUTCOME or weights[HIGH_TERMINAL] != HIGH_OUTCOME:
        raise ValueError(
            f"Terminal weights must be ({LOW_OUTCOME}, {HIGH_OUTCOME}), got "
            f"({weights[LOW_TERMINAL]}, {weights[HIGH_TERMINAL]})"
        )


@dataclass(frozen=True)
class TD:
    """Temporal difference learner for the bounded random walk.

    Attributes:
        lambda_: Trace decay parameter in [0, 1]
        alpha: Learning rate (non-negative)
    """
    lambda_: float
    alpha: float

    def __post_init__(self):
        """Validate hyperparameters."""
        if not 0.0 <= self.lambda_ <= 1.0:
            raise ValueError(f"lambda_ must be in [0, 1], got {self.lambda_}")
        if self.alpha < 0.0:
            raise ValueError(f"alpha must be non-negative, got {self.alpha}")

    def _prepare(self, walk: Sequence[int]) -> _WalkSteps:
        """Encode a walk's transitions and run its eligibility trace.

        Args:
            walk: Walk to encode

        Returns:
            _WalkSteps for the walk
        """
        walk = validate_walk(walk)
        current, following = walk[:-1], walk[1:]
        basis = torch.eye(NUM_STATES, dtype=torch.float64)

        features = basis[list(current)]
        next_features = basis[list(following)]
        outcomes = torch.zeros(len(following), dtype=torch.float64)
        for t, state in enumerate(following):
            if is_terminal(state):
                next_features[t] = 0.0
                outcomes[t] = terminal_outcome(state)

        traces = EligibilityTrace(self.lambda_).accumulate(features)
        return _WalkSteps(features, next_features, outcomes, traces)

    def _deltas(self, steps: _WalkSteps, w: Tensor) -> Tensor:
        """Sum of per-step weight updates against fixed weights ``w``."""
        predictions = steps.features @ w
        next_predictions = steps.next_features @ w + steps.outcomes
        errors = next_predictions - predictions
        return self.alpha * (errors @ steps.traces)

    def compute_deltas(self, walk: Sequence[int], weights: StateVector) -> StateVector:
        """Compute the cumulative TD weight delta for one walk.

        Traverses the walk from its start to just before its end. At each
        step from s to s':
        - P(s) = w . basis(s); P(s') is 0 or 1 at the low or high terminal,
          else w . basis(s')
        - e' = basis(s) + lambda * e, with e starting at zero
        - contribution = alpha * (P(s') - P(s)) * e'

        See pp. 15-16 of Sutton (1988), equation (4).

        Args:
            walk: Random walk to compute the delta for
            weights: Current weights vector

        Returns:
            Accumulated delta for the weights vector

        Raises:
            InvalidWalkError: If the walk has fewer than 2 states or is malformed
            StateIndexError: If the walk contains an out-of-range state
        """
        return StateVector(self._deltas(self._prepare(walk), weights.data))

    def fit(
        self,
        training_set: TrainingSet,
        initial_weights: StateVector,
        max_iterations: int,
        tolerance: float,
        online: bool,
    ) -> TrainingResult:
        """Train on a training set, repeating sweeps until a stop condition.

        Each sweep passes over every walk of the set:
        - online: weights are updated after each walk, so later walks in the
          sweep see the updated weights
        - batch: every walk's delta is computed against the sweep-start
          weights and the sum is applied at the end of the sweep

        Training stops after ``max_iterations`` sweeps, or as soon as the
        largest absolute weight change of a sweep is strictly below
        ``tolerance``. A tolerance <= 0 disables the convergence test.

        Args:
            training_set: Walks to train on
            initial_weights: Starting weights (terminals must be 0 and 1)
            max_iterations: Maximum number of sweeps
            tolerance: Convergence threshold on the L-infinity weight change
            online: Update after every walk instead of every sweep

        Returns:
            TrainingResult with final weights and sweep count

        Raises:
            EmptyTrainingSetError: If the training set has no walks
            ValueError: If max_iterations is negative or terminal weights
                are not pinned
        """
        if len(training_set) == 0:
            raise EmptyTrainingSetError("Training set contains no walks")
        if max_iterations < 0:
            raise ValueError("max_iterations must be non-negative")
        _check_terminal_weights(initial_weights)

        walks = [self._prepare(walk) for walk in training_set]
        combined = _WalkSteps.concat(walks)

        w = initial_weights.data.clone()
        sweeps = 0
        converged = False

        while sweeps < max_iterations:
            if online:
                new_w = w
                for steps in walks:
                    new_w = new_w + self._deltas(steps, new_w)
            else:
                new_w = w + self._deltas(combined, w)
            sweeps += 1

            change = StateVector(new_w - w).max_abs()
            w = new_w
            if change < tolerance:
                converged = True
                break

        return TrainingResult(weights=StateVector(w), sweeps=sweeps, converged=converged)

    def train(
        self,
        training_set: TrainingSet,
        initial_weights: StateVector,
        max_iterations: int,
        tolerance: float,
        online: bool,
    ) -> StateVector:
        """Train on a training set and return the final weights.

        See fit() for the sweep and termination rules.
        """
        return self.fit(
            training_set, initial_weights, max_iterations, tolerance, online
        ).weights

    def get_error_over_training_sets(
        self,
        training_sets: Sequence[TrainingSet],
        initial_weights: StateVector,
        max_iterations: int,
        tolerance: float,
        online: bool,
    ) -> ErrorStats:
        """Average RMSE of the learned weights across training sets.

        Every training set is trained independently from the same initial
        weights. The RMSE of each result against TARGET_WEIGHTS is computed
        over the transient states, then averaged.

        Args:
            training_sets: Training sets to train on
            initial_weights: Starting weights for every set
            max_iterations: Maximum sweeps per set
            tolerance: Convergence threshold (<= 0 disables)
            online: Online instead of batch updates

        Returns:
            ErrorStats(mean, std) with the population standard deviation

        Raises:
            EmptyTrainingSetError: If no training sets are given
        """
        if len(training_sets) == 0:
            raise EmptyTrainingSetError("No training sets given")

        rmses: List[float] = [
            root_mean_square_error(
                self.train(training_set, initial_weights, max_iterations, tolerance, online)
            )
            for training_set in training_sets
        ]
        return ErrorStats(mean=statistics.mean(rmses), std=statistics.pstdev(rmses))
