"""Tests for the TD(lambda) learner.

Hand-computed deltas, batch and online sweeps, convergence and the
error-over-training-sets statistics.
"""

import math
from unittest.mock import patch

import pytest

from algorithms.td_lambda import (
    TD,
    TARGET_WEIGHTS,
    EmptyTrainingSetError,
    ErrorStats,
    root_mean_square_error,
)
from random_walk.states import InvalidWalkError, StateIndexError
from random_walk.vector import StateVector


def reference_deltas(walk, weights, lambda_, alpha):
    """Step-by-step delta computed with StateVector arithmetic."""
    delta = StateVector.zeros()
    trace = StateVector.zeros()
    for current, following in zip(walk, walk[1:]):
        x = StateVector.basis(current)
        prediction = weights.dot(x)
        if following == 0:
            next_prediction = 0.0
        elif following == 6:
            next_prediction = 1.0
        else:
            next_prediction = weights.dot(StateVector.basis(following))
        trace = x + lambda_ * trace
        delta = delta + (alpha * (next_prediction - prediction)) * trace
    return delta


class TestConstruction:
    """Tests for hyperparameter validation."""

    @pytest.mark.parametrize("lambda_", [-0.1, 1.1])
    def test_lambda_out_of_range(self, lambda_):
        with pytest.raises(ValueError):
            TD(lambda_, 0.1)

    def test_negative_alpha(self):
        with pytest.raises(ValueError):
            TD(0.5, -0.01)

    @pytest.mark.parametrize("lambda_", [0.0, 1.0])
    def test_boundaries_allowed(self, lambda_):
        assert TD(lambda_, 0.0).lambda_ == lambda_


class TestComputeDeltas:
    """Tests for the per-walk delta."""

    def test_widrow_hoff_right_walk(self, right_walk, half_weights):
        """lambda=1 credits every visited state with the final error."""
        delta = TD(1.0, 0.1).compute_deltas(right_walk, half_weights)
        expected = StateVector([0, 0, 0, 0.05, 0.05, 0.05, 0])
        assert delta.allclose(expected)

    def test_td0_right_walk(self, right_walk, half_weights):
        """lambda=0 only updates the state adjacent to the terminal."""
        delta = TD(0.0, 0.1).compute_deltas(right_walk, half_weights)
        expected = StateVector([0, 0, 0, 0, 0, 0.05, 0])
        assert delta.allclose(expected)

    def test_td0_left_walk(self, left_walk, half_weights):
        delta = TD(0.0, 0.1).compute_deltas(left_walk, half_weights)
        expected = StateVector([0, -0.05, 0, 0, 0, 0, 0])
        assert delta.allclose(expected)

    @pytest.mark.parametrize("lambda_", [0.0, 0.3, 0.7, 1.0])
    def test_matches_reference(self, lambda_, make_weights):
        walk = (3, 2, 3, 4, 5, 4, 5, 6)
        weights = make_weights([0.1, 0.7, 0.4, 0.9, 0.2])
        delta = TD(lambda_, 0.15).compute_deltas(walk, weights)
        assert delta.allclose(reference_deltas(walk, weights, lambda_, 0.15))

    @pytest.mark.parametrize("walk", [(3, 4, 5, 6), (3, 2, 1, 0), (5, 4, 5, 6)])
    def test_terminal_deltas_are_zero(self, walk, make_weights):
        delta = TD(0.6, 0.3).compute_deltas(walk, make_weights([0.2] * 5))
        assert delta[0] == 0.0
        assert delta[6] == 0.0

    def test_zero_alpha_gives_zero_delta(self, right_walk, half_weights):
        delta = TD(0.5, 0.0).compute_deltas(right_walk, half_weights)
        assert delta == StateVector.zeros()

    def test_single_step_to_high_terminal(self, make_weights):
        weights = make_weights([0.1, 0.2, 0.3, 0.4, 0.8])
        delta = TD(0.0, 0.5).compute_deltas((5, 6), weights)
        assert delta[5] == pytest.approx(0.5 * (1.0 - 0.8))

    @pytest.mark.parametrize("walk", [(3,), (), (3, 4, 5)])
    def test_invalid_walk(self, walk, half_weights):
        with pytest.raises(InvalidWalkError):
            TD(0.5, 0.1).compute_deltas(walk, half_weights)

    def test_out_of_range_state(self, half_weights):
        with pytest.raises(StateIndexError):
            TD(0.5, 0.1).compute_deltas((3, 8, 6), half_weights)


class TestFit:
    """Tests for sweeps over a training set."""

    @pytest.mark.parametrize("lambda_", [0.4, 1.0])
    def test_single_walk_batch_equals_online(self, lambda_, right_walk, half_weights):
        learner = TD(lambda_, 0.1)
        batch = learner.train([right_walk], half_weights, 1, -1.0, online=False)
        online = learner.train([right_walk], half_weights, 1, -1.0, online=True)
        assert batch.allclose(online)

    def test_one_sweep_applies_delta(self, right_walk, half_weights):
        learner = TD(1.0, 0.1)
        weights = learner.train([right_walk], half_weights, 1, -1.0, online=False)
        expected = half_weights + learner.compute_deltas(right_walk, half_weights)
        assert weights.allclose(expected)

    def test_batch_sums_against_sweep_start(self, right_walk, left_walk, half_weights):
        learner = TD(0.5, 0.2)
        weights = learner.train(
            [right_walk, left_walk], half_weights, 1, -1.0, online=False
        )
        expected = (
            half_weights
            + learner.compute_deltas(right_walk, half_weights)
            + learner.compute_deltas(left_walk, half_weights)
        )
        assert weights.allclose(expected)

    def test_online_applies_after_each_walk(self, right_walk, left_walk, half_weights):
        learner = TD(0.5, 0.2)
        weights = learner.train(
            [right_walk, left_walk], half_weights, 1, -1.0, online=True
        )
        after_first = half_weights + learner.compute_deltas(right_walk, half_weights)
        expected = after_first + learner.compute_deltas(left_walk, after_first)
        assert weights.allclose(expected)

    def test_converges_on_repeated_walk(self, left_walk, half_weights):
        """Repeating a walk to the low terminal drives its states to 0."""
        result = TD(0.3, 0.1).fit(
            [left_walk] * 3, half_weights, 10000, 1e-6, online=False
        )
        assert result.converged
        assert result.sweeps < 10000
        for state in (1, 2, 3):
            assert result.weights[state] == pytest.approx(0.0, abs=1e-3)

    def test_convergence_measured_by_max_abs(self, left_walk, half_weights):
        """Each sweep's change is the largest absolute weight movement."""
        with patch.object(
            StateVector, "max_abs", autospec=True, side_effect=StateVector.max_abs
        ) as max_abs:
            result = TD(0.3, 0.1).fit(
                [left_walk] * 3, half_weights, 10000, 1e-6, online=True
            )
        assert result.converged
        assert max_abs.call_count == result.sweeps
        last_change = max_abs.call_args[0][0]
        assert last_change.max_abs() < 1e-6

    @pytest.mark.parametrize("tolerance", [0.0, -1.0])
    def test_non_positive_tolerance_runs_all_sweeps(self, tolerance, right_walk, half_weights):
        result = TD(0.5, 0.1).fit([right_walk], half_weights, 7, tolerance, online=True)
        assert result.sweeps == 7
        assert not result.converged

    def test_zero_iterations_returns_initial(self, right_walk, half_weights):
        result = TD(0.5, 0.1).fit([right_walk], half_weights, 0, 1e-3, online=False)
        assert result.sweeps == 0
        assert result.weights == half_weights

    def test_does_not_mutate_initial_weights(self, right_walk, half_weights):
        before = half_weights.to_list()
        TD(0.5, 0.1).train([right_walk], half_weights, 5, -1.0, online=False)
        assert half_weights.to_list() == before

    def test_terminal_weights_stay_pinned(self, right_walk, left_walk, make_weights):
        weights = TD(0.8, 0.05).train(
            [right_walk, left_walk] * 5, make_weights([0.3] * 5), 50, -1.0, online=True
        )
        assert weights[0] == 0.0
        assert weights[6] == 1.0

    def test_empty_training_set(self, half_weights):
        with pytest.raises(EmptyTrainingSetError):
            TD(0.5, 0.1).fit([], half_weights, 10, 1e-3, online=False)

    def test_negative_iterations(self, right_walk, half_weights):
        with pytest.raises(ValueError):
            TD(0.5, 0.1).fit([right_walk], half_weights, -1, 1e-3, online=False)

    def test_unpinned_terminals(self, right_walk):
        with pytest.raises(ValueError):
            TD(0.5, 0.1).fit([right_walk], StateVector([0.5] * 7), 1, 1e-3, online=False)

    def test_invalid_walk_in_set(self, right_walk, half_weights):
        with pytest.raises(InvalidWalkError):
            TD(0.5, 0.1).fit([right_walk, (3, 4)], half_weights, 1, 1e-3, online=False)


class TestErrors:
    """Tests for RMSE and error statistics."""

    def test_rmse_of_target_is_zero(self):
        assert root_mean_square_error(TARGET_WEIGHTS) == 0.0

    def test_rmse_ignores_terminals(self):
        shifted = StateVector([5.0] + TARGET_WEIGHTS.to_list()[1:6] + [-5.0])
        assert root_mean_square_error(shifted) == 0.0

    def test_rmse_value(self, half_weights):
        targets = TARGET_WEIGHTS.to_list()[1:6]
        expected = math.sqrt(sum((t - 0.5) ** 2 for t in targets) / 5)
        assert root_mean_square_error(half_weights) == pytest.approx(expected)

    def test_target_weights(self):
        assert TARGET_WEIGHTS.allclose(
            StateVector([i / 6 for i in range(7)])
        )

    def test_error_stats_population_std(self, right_walk, left_walk, half_weights):
        learner = TD(1.0, 0.1)
        stats = learner.get_error_over_training_sets(
            [[right_walk], [left_walk]], half_weights, 1, -1.0, online=False
        )
        rmses = [
            root_mean_square_error(
                learner.train([walk], half_weights, 1, -1.0, online=False)
            )
            for walk in (right_walk, left_walk)
        ]
        mean = sum(rmses) / 2
        std = math.sqrt(sum((r - mean) ** 2 for r in rmses) / 2)

        assert isinstance(stats, ErrorStats)
        assert stats.mean == pytest.approx(mean)
        assert stats.std == pytest.approx(std)

    def test_single_set_has_zero_std(self, right_walk, half_weights):
        stats = TD(0.5, 0.1).get_error_over_training_sets(
            [[right_walk]], half_weights, 3, -1.0, online=True
        )
        assert stats.std == 0.0

    def test_no_training_sets(self, half_weights):
        with pytest.raises(EmptyTrainingSetError):
            TD(0.5, 0.1).get_error_over_training_sets(
                [], half_weights, 1, -1.0, online=False
            )

    def test_empty_training_set_error_is_value_error(self):
        assert issubclass(EmptyTrainingSetError, ValueError)

