"""
Experiment Runner.

Computes the configured figures from one collection of training sets.

The training sets are generated once per run from the configured seed and
shared read-only by every figure, so figures from the same run are
computed on identical data.
"""

import time
import traceback
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import torch

from algorithms.td_lambda.learner import TD
from orchestrator.config import FigureConfig, OrchestratorConfig
from orchestrator.metrics import FigureResult, MetricsCollector
from orchestrator.observability import RowMetrics, RunObserver
from random_walk.generator import RandomWalkGenerator
from random_walk.states import (
    HIGH_OUTCOME,
    LOW_OUTCOME,
    TRANSIENT_STATES,
    TrainingSet,
)
from random_walk.vector import StateVector
from tuning.alpha_search import find_best_alpha


def constant_initial_weights(value: float) -> StateVector:
    """Initial weights with every transient state set to ``value``."""
    return StateVector([LOW_OUTCOME] + [value] * len(TRANSIENT_STATES) + [HIGH_OUTCOME])


def random_initial_weights(generator: torch.Generator) -> StateVector:
    """Initial weights with uniform [0, 1) transient states.

    Args:
        generator: Random stream to draw from

    Returns:
        Weights with terminals pinned at their outcomes
    """
    transient = torch.rand(len(TRANSIENT_STATES), generator=generator, dtype=torch.float64)
    return StateVector([LOW_OUTCOME] + transient.tolist() + [HIGH_OUTCOME])


class ExperimentRunner:
    """Runs figure experiments.

    Attributes:
        config: Orchestrator configuration
        metrics_collector: Collector for figure results
        observer: Run observer for status logging
    """

    def __init__(
        self,
        config: OrchestratorConfig,
        observer: Optional[RunObserver] = None,
    ):
        """Initialize the experiment runner.

        Args:
            config: Orchestrator configuration with figures
            observer: Optional observer (defaults to one in results_dir)
        """
        self.config = config
        self.metrics_collector = MetricsCollector(config.results_dir)
        self.observer = observer or RunObserver.for_results_dir(config.results_dir)

        # Ensure results directory exists
        Path(config.results_dir).mkdir(parents=True, exist_ok=True)

        self._training_sets: Optional[List[TrainingSet]] = None

        init_seed = config.init_seed
        if init_seed is None:
            init_seed = int(time.time() * 1000)
        self.init_seed = init_seed
        self._init_generator = torch.Generator().manual_seed(init_seed)

    @property
    def training_sets(self) -> List[TrainingSet]:
        """Training sets of this run, generated on first use."""
        if self._training_sets is None:
            generator = RandomWalkGenerator(self.config.seed)
            self._training_sets = generator.generate_training_sets(
                self.config.num_sets,
                self.config.sequences_per_set,
            )
        return self._training_sets

    def _initial_weights(self, figure: FigureConfig) -> StateVector:
        """Initial weights for one row of a figure.

        Random initial weights are drawn afresh for every call.
        """
        if figure.initial_value is None:
            return random_initial_weights(self._init_generator)
        return constant_initial_weights(figure.initial_value)

    def _report_row(
        self,
        figure: FigureConfig,
        index_name: str,
        index_value: float,
        values: Dict[str, float],
        start: float,
    ) -> None:
        self.observer.row_completed(RowMetrics(
            figure=figure.name,
            index_name=index_name,
            index_value=index_value,
            values=values,
            duration_seconds=time.time() - start,
        ))

    def _lambda_sweep(self, figure: FigureConfig, result: FigureResult) -> None:
        """Error at every lambda for the figure's single alpha.

        Rows: lambda, rmse, std
        """
        alpha = figure.alphas[0]
        result.header = ["lambda", "rmse", "std"]

        for lambda_ in figure.lambdas:
            start = time.time()
            rmse, std = TD(lambda_, alpha).get_error_over_training_sets(
                self.training_sets,
                self._initial_weights(figure),
                figure.max_iterations,
                figure.tolerance,
                figure.online,
            )
            result.rows.append([lambda_, rmse, std])
            self._report_row(figure, "lambda", lambda_, {"rmse": rmse, "std": std}, start)

    def _alpha_sweep(self, figure: FigureConfig, result: FigureResult) -> None:
        """Error at every alpha for each of the figure's lambdas.

        Rows: alpha, rmse at lambda_1, rmse at lambda_2, ...
        """
        result.header = ["alpha"] + [str(lambda_) for lambda_ in figure.lambdas]

        for alpha in figure.alphas:
            start = time.time()
            errors = []
            for lambda_ in figure.lambdas:
                stats = TD(lambda_, alpha).get_error_over_training_sets(
                    self.training_sets,
                    self._initial_weights(figure),
                    figure.max_iterations,
                    figure.tolerance,
                    figure.online,
                )
                errors.append(stats.mean)
            result.rows.append([alpha] + errors)
            self._report_row(
                figure, "alpha", alpha,
                dict(zip(result.header[1:], errors)),
                start,
            )

    def _best_alpha(self, figure: FigureConfig, result: FigureResult) -> None:
        """Error at every lambda using that lambda's best alpha.

        Rows: lambda, rmse, std
        """
        result.header = ["lambda", "rmse", "std"]

        for lambda_ in figure.lambdas:
            start = time.time()
            search = find_best_alpha(
                lambda_,
                figure.alphas,
                self.training_sets,
                self._initial_weights(figure),
                figure.max_iterations,
                figure.tolerance,
                figure.online,
            )
            result.rows.append([lambda_, search.best_rmse, search.best_std])
            result.best_alphas[str(lambda_)] = search.best_alpha
            self._report_row(
                figure, "lambda", lambda_,
                {"alpha": search.best_alpha, "rmse": search.best_rmse, "std": search.best_std},
                start,
            )

    def run_figure(self, figure: FigureConfig, index: int = 1) -> FigureResult:
        """Compute a single figure.

        Failures are captured in the returned result instead of raised.

        Args:
            figure: Figure configuration
            index: Position of the figure in the run (1-based)

        Returns:
            FigureResult with rows or error message
        """
        n_rows = len(figure.alphas) if figure.kind == "alpha_sweep" else len(figure.lambdas)
        self.observer.figure_started(figure.name, index, n_rows)

        result = FigureResult(figure_name=figure.name, kind=figure.kind, status="success")
        start_time = time.time()

        try:
            if figure.kind == "lambda_sweep":
                self._lambda_sweep(figure, result)
            elif figure.kind == "alpha_sweep":
                self._alpha_sweep(figure, result)
            else:
                self._best_alpha(figure, result)
        except Exception as e:
            result = FigureResult(
                figure_name=figure.name,
                kind=figure.kind,
                status="failed",
                error_message=f"{type(e).__name__}: {e}\n{traceback.format_exc()}",
            )

        result.duration_seconds = time.time() - start_time
        self.metrics_collector.add_result(
            result,
            csv_path=figure.get_output_path(self.config.results_path),
        )

        if result.status == "success":
            self.observer.figure_completed(figure.name, result.csv_path)
        else:
            self.observer.figure_failed(figure.name, result.error_message)

        return result

    def run_all(self, figure_names: Optional[Sequence[str]] = None) -> List[FigureResult]:
        """Compute all (or the named) figures of the configuration.

        Args:
            figure_names: Optional subset of figures to run, in config order

        Returns:
            List of FigureResults

        Raises:
            KeyError: If a requested figure is not configured
        """
        if figure_names is None:
            figures = list(self.config.figures)
        else:
            for name in figure_names:
                self.config.get_figure(name)
            figures = [fig for fig in self.config.figures if fig.name in figure_names]

        self.observer.run_started(
            total_figures=len(figures),
            seed=self.config.seed,
            num_sets=self.config.num_sets,
            sequences_per_set=self.config.sequences_per_set,
        )

        results = [
            self.run_figure(figure, index)
            for index, figure in enumerate(figures, 1)
        ]

        self.observer.run_completed()
        return results

    def get_results(self) -> List[FigureResult]:
        """Get all collected results."""
        return list(self.metrics_collector.results.values())
