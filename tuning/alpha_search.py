"""
Learning Rate Search.

Finds the best learning rate (alpha) for a given lambda by evaluating
every alpha of a fixed grid, as used for Figure 5 of Sutton (1988): each
lambda is plotted at the alpha that minimizes its error.

The grid is run as an Optuna study with a GridSampler, one trial per
alpha. The error standard deviation is stored as a trial user attribute
so the winning trial does not need to be re-evaluated.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import optuna
from optuna import Trial
from optuna.samplers import GridSampler

from algorithms.td_lambda.learner import TD
from random_walk.states import TrainingSet
from random_walk.vector import StateVector


@dataclass
class AlphaSearchResult:
    """Outcome of an alpha grid search for one lambda.

    Attributes:
        lambda_: Trace decay parameter searched
        best_alpha: Alpha with the lowest mean RMSE
        best_rmse: Mean RMSE at best_alpha
        best_std: RMSE standard deviation at best_alpha
        errors: Mean RMSE for every alpha of the grid
    """
    lambda_: float
    best_alpha: float
    best_rmse: float
    best_std: float
    errors: Dict[float, float] = field(default_factory=dict)


def create_objective(
    lambda_: float,
    alphas: Sequence[float],
    training_sets: Sequence[TrainingSet],
    initial_weights: StateVector,
    max_iterations: int,
    tolerance: float,
    online: bool,
):
    """Create the objective for an alpha grid study.

    Args:
        lambda_: Trace decay parameter
        alphas: Alpha grid
        training_sets: Training sets to evaluate on
        initial_weights: Starting weights for every set
        max_iterations: Maximum sweeps per set
        tolerance: Convergence threshold
        online: Online instead of batch updates

    Returns:
        Objective callable returning the mean RMSE of a trial's alpha
    """
    choices = list(alphas)

    def objective(trial: Trial) -> float:
        alpha = trial.suggest_categorical("alpha", choices)
        stats = TD(lambda_, alpha).get_error_over_training_sets(
            training_sets,
            initial_weights,
            max_iterations,
            tolerance,
            online,
        )
        trial.set_user_attr("std", stats.std)
        return stats.mean

    return objective


def find_best_alpha(
    lambda_: float,
    alphas: Sequence[float],
    training_sets: Sequence[TrainingSet],
    initial_weights: StateVector,
    max_iterations: int,
    tolerance: float,
    online: bool,
) -> AlphaSearchResult:
    """Evaluate every alpha of the grid and return the one with lowest error.

    Ties go to the alpha listed first in the grid.

    Args:
        lambda_: Trace decay parameter
        alphas: Alpha grid (non-empty, distinct values)
        training_sets: Training sets to evaluate on
        initial_weights: Starting weights for every set
        max_iterations: Maximum sweeps per set
        tolerance: Convergence threshold
        online: Online instead of batch updates

    Returns:
        AlphaSearchResult with the best alpha and the error of every alpha

    Raises:
        ValueError: If the grid is empty or has duplicates
    """
    grid: List[float] = list(alphas)
    if not grid:
        raise ValueError("alphas must not be empty")
    if len(set(grid)) != len(grid):
        raise ValueError("alphas must be distinct")

    optuna.logging.set_verbosity(optuna.logging.WARNING)

    study = optuna.create_study(
        study_name=f"alpha_search_lambda_{lambda_}",
        direction="minimize",
        sampler=GridSampler({"alpha": grid}, seed=0),
    )
    study.optimize(
        create_objective(
            lambda_, grid, training_sets, initial_weights,
            max_iterations, tolerance, online,
        ),
        n_trials=len(grid),
    )

    errors: Dict[float, float] = {}
    stds: Dict[float, float] = {}
    for trial in study.trials:
        if trial.state != optuna.trial.TrialState.COMPLETE:
            continue
        alpha = trial.params["alpha"]
        errors[alpha] = trial.value
        stds[alpha] = trial.user_attrs["std"]

    best_alpha = min(
        (alpha for alpha in grid if alpha in errors),
        key=lambda alpha: (errors[alpha], grid.index(alpha)),
    )

    return AlphaSearchResult(
        lambda_=lambda_,
        best_alpha=best_alpha,
        best_rmse=errors[best_alpha],
        best_std=stds[best_alpha],
        errors={alpha: errors[alpha] for alpha in grid if alpha in errors},
    )
