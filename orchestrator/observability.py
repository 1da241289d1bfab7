"""
Observability Module for Figure Runs.

Provides logging and status tracking for figure runs, which can take a
long time when training to convergence over many training sets.

Key features:
- Status events appended to a JSONL file (can be tailed)
- Progress tracking (figures completed/failed, rows per figure)
- Summary JSON file rewritten on every change
- Error capture without stopping the run
"""

import json
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class RowMetrics:
    """Metrics for one computed figure row."""
    figure: str
    index_name: str
    index_value: float
    values: Dict[str, float]
    duration_seconds: float


class RunObserver:
    """Observability layer for figure runs.

    Attributes:
        status_file: Path to JSONL status file for real-time monitoring
        summary_file: Path to JSON summary file
        total_figures: Total number of figures in the run
    """

    def __init__(
        self,
        status_file: str = "results/run_status.jsonl",
        summary_file: str = "results/run_summary.json",
        verbose: bool = True,
    ):
        """Initialize run observer.

        Args:
            status_file: Path to status JSONL file
            summary_file: Path to summary JSON file
            verbose: Print progress to stdout
        """
        self.status_file = Path(status_file)
        self.summary_file = Path(summary_file)
        self.verbose = verbose

        self.status_file.parent.mkdir(parents=True, exist_ok=True)
        self.summary_file.parent.mkdir(parents=True, exist_ok=True)

        # State tracking
        self.total_figures = 0
        self.completed_figures = 0
        self.failed_figures = 0
        self.current_figure: Optional[str] = None
        self.current_figure_start: Optional[float] = None
        self.rows_completed = 0
        self.run_start_time: Optional[float] = None

        self.figure_durations: Dict[str, float] = {}
        self.errors: List[Dict[str, Any]] = []

    @classmethod
    def for_results_dir(cls, results_dir: str, verbose: bool = True) -> "RunObserver":
        """Create an observer writing next to a run's results."""
        results_path = Path(results_dir)
        return cls(
            status_file=str(results_path / "run_status.jsonl"),
            summary_file=str(results_path / "run_summary.json"),
            verbose=verbose,
        )

    def _log_event(self, event: Dict[str, Any]) -> None:
        """Write event to status file.

        Args:
            event: Event dictionary to log
        """
        event["ts"] = datetime.now().isoformat()
        with open(self.status_file, "a") as f:
            f.write(json.dumps(event) + "\n")

    def _print(self, message: str) -> None:
        if self.verbose:
            print(message)

    def run_started(self, total_figures: int, seed: int, num_sets: int, sequences_per_set: int) -> None:
        """Log run start.

        Args:
            total_figures: Number of figures to compute
            seed: Training data seed
            num_sets: Number of training sets
            sequences_per_set: Walks per training set
        """
        self.total_figures = total_figures
        self.completed_figures = 0
        self.failed_figures = 0
        self.run_start_time = time.time()

        self._log_event({
            "event": "run_started",
            "total_figures": total_figures,
            "seed": seed,
            "num_sets": num_sets,
            "sequences_per_set": sequences_per_set,
        })
        self._update_summary()

        self._print(f"\n{'='*60}")
        self._print("RUN STARTED")
        self._print(f"{'='*60}")
        self._print(f"Figures: {total_figures}")
        self._print(f"Training data: seed={seed}, {num_sets} sets x {sequences_per_set} walks")
        self._print(f"Status file: {self.status_file}")
        self._print(f"{'='*60}\n")

    def figure_started(self, figure_name: str, index: int, n_rows: int) -> None:
        """Log figure start.

        Args:
            figure_name: Name of figure
            index: Figure index (1-based)
            n_rows: Number of rows to compute
        """
        self.current_figure = figure_name
        self.current_figure_start = time.time()
        self.rows_completed = 0

        self._log_event({
            "event": "figure_started",
            "figure": figure_name,
            "index": index,
            "total": self.total_figures,
            "n_rows": n_rows,
        })
        self._update_summary()

        self._print(f"[{index}/{self.total_figures}] Generating {figure_name} ({n_rows} rows)")

    def row_completed(self, row: RowMetrics) -> None:
        """Log completion of one figure row.

        Args:
            row: Row metrics
        """
        self.rows_completed += 1

        self._log_event({
            "event": "row_completed",
            "figure": row.figure,
            row.index_name: row.index_value,
            "values": row.values,
            "duration_seconds": round(row.duration_seconds, 2),
        })

        values = ", ".join(f"{k}={v:.4f}" for k, v in row.values.items())
        self._print(f"  {row.index_name}={row.index_value:g}: {values} ({row.duration_seconds:.1f}s)")

    def figure_completed(self, figure_name: str, csv_path: Optional[str]) -> None:
        """Log figure completion.

        Args:
            figure_name: Figure name
            csv_path: Path of the written CSV file
        """
        self.completed_figures += 1
        duration = self._figure_duration()
        self.figure_durations[figure_name] = duration

        self._log_event({
            "event": "figure_completed",
            "figure": figure_name,
            "completed": self.completed_figures,
            "total": self.total_figures,
            "rows": self.rows_completed,
            "csv_path": csv_path,
            "duration_seconds": round(duration, 2),
        })
        self._update_summary()

        self._print(f"  Completed {figure_name} in {duration:.1f}s -> {csv_path}")

    def figure_failed(self, figure_name: str, error: str) -> None:
        """Log figure failure.

        Args:
            figure_name: Figure name
            error: Error message
        """
        self.failed_figures += 1
        self.figure_durations[figure_name] = self._figure_duration()
        self.errors.append({
            "figure": figure_name,
            "error": error,
            "ts": datetime.now().isoformat(),
        })

        self._log_event({
            "event": "figure_failed",
            "figure": figure_name,
            "error": error[:500],  # Truncate long errors
            "failed_count": self.failed_figures,
        })
        self._update_summary()

        self._print(f"  [ERROR] Figure failed: {figure_name}")
        self._print(f"  Error: {error[:200]}")

    def run_completed(self) -> None:
        """Log run completion."""
        total_duration = 0.0
        if self.run_start_time:
            total_duration = time.time() - self.run_start_time

        self._log_event({
            "event": "run_completed",
            "total_figures": self.total_figures,
            "completed": self.completed_figures,
            "failed": self.failed_figures,
            "duration_seconds": round(total_duration, 2),
        })
        self.current_figure = None
        self._update_summary()

        self._print(f"\n{'='*60}")
        self._print("RUN COMPLETED")
        self._print(f"{'='*60}")
        self._print(f"Completed: {self.completed_figures}")
        self._print(f"Failed: {self.failed_figures}")
        self._print(f"Total duration: {total_duration / 60:.1f} minutes")
        self._print(f"Summary: {self.summary_file}")
        self._print(f"{'='*60}\n")

    def _figure_duration(self) -> float:
        if self.current_figure_start is None:
            return 0.0
        return time.time() - self.current_figure_start

    def _update_summary(self) -> None:
        """Update summary JSON file."""
        with open(self.summary_file, "w") as f:
            json.dump(self.get_status(), f, indent=2)

    def get_status(self) -> Dict[str, Any]:
        """Get current run status.

        Returns:
            Status dictionary
        """
        total_duration = 0.0
        if self.run_start_time:
            total_duration = time.time() - self.run_start_time
        finished = self.completed_figures + self.failed_figures

        return {
            "last_updated": datetime.now().isoformat(),
            "status": "running" if finished < self.total_figures else "completed",
            "total_figures": self.total_figures,
            "completed_figures": self.completed_figures,
            "failed_figures": self.failed_figures,
            "remaining_figures": self.total_figures - finished,
            "progress_percent": round(finished / max(1, self.total_figures) * 100, 1),
            "current_figure": self.current_figure,
            "rows_completed": self.rows_completed,
            "figure_durations_seconds": {k: round(v, 2) for k, v in self.figure_durations.items()},
            "total_duration_seconds": round(total_duration, 2),
            "errors": self.errors[-10:],  # Last 10 errors
        }

    def get_errors(self) -> List[Dict[str, Any]]:
        """Get all recorded errors."""
        return self.errors.copy()
