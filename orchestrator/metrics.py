"""
Metrics Collection and Aggregation.

Collects and stores figure results.

Each successful figure is written as a CSV file (header row, then one row
per lambda or alpha), together with a JSON file holding the full result.
Every result, successful or not, is appended to all_results.jsonl.
"""

import csv
import json
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class FigureResult:
    """Complete result of a figure run.

    Attributes:
        figure_name: Name of the figure
        kind: Figure kind (lambda_sweep, alpha_sweep, best_alpha)
        status: "success" or "failed"
        header: CSV column names
        rows: One row of numbers per lambda (or alpha)
        best_alphas: Chosen alpha per lambda (best_alpha figures only)
        duration_seconds: Wall time spent on the figure
        error_message: Error message (if failed)
        csv_path: Path to the written CSV file (if successful)
        timestamp: When the figure completed
    """
    figure_name: str
    kind: str
    status: str
    header: List[str] = field(default_factory=list)
    rows: List[List[float]] = field(default_factory=list)
    best_alphas: Dict[str, float] = field(default_factory=dict)
    duration_seconds: float = 0.0
    error_message: Optional[str] = None
    csv_path: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def index_name(self) -> str:
        """Name of the first column (lambda or alpha)."""
        return self.header[0] if self.header else ""

    def column(self, name: str) -> List[float]:
        """Values of one column by header name.

        Raises:
            KeyError: If the column does not exist
        """
        if name not in self.header:
            raise KeyError(f"No column '{name}' in figure {self.figure_name}")
        idx = self.header.index(name)
        return [row[idx] for row in self.rows]


def write_csv(path: Path, header: List[str], rows: List[List[float]]) -> None:
    """Write a header and rows of numbers as CSV.

    Args:
        path: Output file
        header: Column names
        rows: Rows of numbers
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow([repr(float(v)) for v in row])


def read_csv(path: Path) -> Dict[str, Any]:
    """Read a figure CSV back into header and rows.

    Args:
        path: CSV file

    Returns:
        Dict with "header" and "rows"
    """
    with open(path, 'r', newline='') as f:
        reader = csv.reader(f)
        header = next(reader)
        rows = [[float(v) for v in row] for row in reader if row]
    return {"header": header, "rows": rows}


class MetricsCollector:
    """Collects figure results and saves them to files.

    Attributes:
        results_dir: Base directory for storing results
        results: Dict mapping figure names to results
    """

    def __init__(self, results_dir: str):
        """Initialize metrics collector.

        Args:
            results_dir: Base directory for storing results
        """
        self.results_dir = Path(results_dir)
        self.results: Dict[str, FigureResult] = {}

    def add_result(self, result: FigureResult, csv_path: Optional[Path] = None) -> None:
        """Add a figure result and persist it.

        Args:
            result: FigureResult to add
            csv_path: Where to write the CSV (defaults to <name>_data.csv)
        """
        if result.status == "success":
            if csv_path is None:
                csv_path = self.results_dir / f"{result.figure_name}_data.csv"
            write_csv(csv_path, result.header, result.rows)
            result.csv_path = str(csv_path)

        self.results[result.figure_name] = result
        self._save_result(result)

    def _save_result(self, result: FigureResult) -> None:
        """Save a single result to its figure directory.

        Args:
            result: Result to save
        """
        fig_dir = self.results_dir / result.figure_name
        fig_dir.mkdir(parents=True, exist_ok=True)

        metrics_file = fig_dir / "figure_metrics.json"
        with open(metrics_file, 'w') as f:
            json.dump(asdict(result), f, indent=2)

        # Append to global results JSONL
        results_file = self.results_dir / "all_results.jsonl"
        with open(results_file, 'a') as f:
            record = {
                "figure_name": result.figure_name,
                "kind": result.kind,
                "status": result.status,
                "error_message": result.error_message,
                "csv_path": result.csv_path,
                "duration_seconds": round(result.duration_seconds, 2),
                "timestamp": datetime.now().isoformat(),
            }
            f.write(json.dumps(record) + "\n")

    def get_result(self, figure_name: str) -> Optional[FigureResult]:
        """Get result for a specific figure.

        Args:
            figure_name: Name of the figure

        Returns:
            FigureResult if found, None otherwise
        """
        return self.results.get(figure_name)

    def get_successful_results(self) -> List[FigureResult]:
        """Get all successful figure results."""
        return [r for r in self.results.values() if r.status == "success"]

    def get_failed_results(self) -> List[FigureResult]:
        """Get all failed figure results."""
        return [r for r in self.results.values() if r.status == "failed"]

    def load_existing_results(self) -> None:
        """Load existing results from results directory.

        Scans for figure_metrics.json files.
        """
        if not self.results_dir.exists():
            return

        for fig_dir in sorted(self.results_dir.iterdir()):
            if not fig_dir.is_dir():
                continue

            metrics_file = fig_dir / "figure_metrics.json"
            if not metrics_file.exists():
                continue

            with open(metrics_file, 'r') as f:
                data = json.load(f)
            result = FigureResult(**data)
            self.results[result.figure_name] = result

    def summary(self) -> str:
        """Get a summary string of all results.

        Returns:
            Human-readable summary
        """
        lines = ["Metrics Summary", "=" * 40]

        successful = self.get_successful_results()
        failed = self.get_failed_results()

        lines.append(f"Total figures: {len(self.results)}")
        lines.append(f"Successful: {len(successful)}")
        lines.append(f"Failed: {len(failed)}")

        for result in successful:
            lines.append("")
            lines.append(f"{result.figure_name} ({result.kind}): {len(result.rows)} rows")
            if result.csv_path:
                lines.append(f"  CSV: {result.csv_path}")

        for result in failed:
            lines.append("")
            lines.append(f"{result.figure_name} FAILED: {result.error_message}")

        return "\n".join(lines)
