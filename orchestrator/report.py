"""
Report Generator.

Generates summary reports from figure results.

For lambda-indexed figures (lambda_sweep, best_alpha) the report
highlights the lambda with the lowest error; for alpha-indexed figures
(alpha_sweep) it lists the best alpha for every lambda column.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from orchestrator.metrics import FigureResult, MetricsCollector


REPORT_FILES = {"markdown": "report.md", "json": "report.json"}


class ReportGenerator:
    """Generates reports from figure results.

    Supports markdown and JSON output formats.

    Attributes:
        results_dir: Directory containing figure results
        metrics_collector: Collector with loaded results
    """

    def __init__(self, results_dir: str):
        """Initialize report generator.

        Args:
            results_dir: Directory containing figure results
        """
        self.results_dir = Path(results_dir)
        self.metrics_collector = MetricsCollector(results_dir)
        self.metrics_collector.load_existing_results()

    def _highlights(self, result: FigureResult) -> Dict[str, Any]:
        """Best settings of one figure.

        Args:
            result: Successful figure result

        Returns:
            Dict with the best lambda (lambda-indexed figures) or the best
            alpha per lambda (alpha-indexed figures)
        """
        if not result.rows:
            return {}

        if result.index_name == "lambda":
            best = min(result.rows, key=lambda row: row[1])
            highlight = {"best_lambda": best[0], "rmse": best[1]}
            if len(best) > 2:
                highlight["std"] = best[2]
            if result.best_alphas:
                highlight["alpha"] = result.best_alphas.get(str(best[0]))
            return highlight

        best_alphas = {}
        for col, lambda_name in enumerate(result.header[1:], 1):
            best = min(result.rows, key=lambda row: row[col])
            best_alphas[lambda_name] = {"alpha": best[0], "rmse": best[col]}
        return {"best_alpha_per_lambda": best_alphas}

    def generate_markdown(self) -> str:
        """Generate a markdown report.

        Returns:
            Markdown-formatted report string
        """
        results = list(self.metrics_collector.results.values())
        successful = self.metrics_collector.get_successful_results()

        lines = []

        # Header
        lines.append("# TD(lambda) Random Walk Report")
        lines.append("")
        lines.append(f"Generated: {datetime.now().isoformat()}")
        lines.append("")

        # Summary
        lines.append("## Summary")
        lines.append("")
        lines.append(f"- **Total Figures:** {len(results)}")
        lines.append(f"- **Successful:** {len(successful)}")
        lines.append(f"- **Failed:** {len(results) - len(successful)}")
        lines.append("")

        for result in successful:
            lines.append(f"## {result.figure_name}")
            lines.append("")
            lines.append(f"Kind: `{result.kind}`, duration {result.duration_seconds:.1f}s")
            lines.append("")

            header = list(result.header)
            if result.best_alphas:
                header.append("alpha")
            lines.append("| " + " | ".join(header) + " |")
            lines.append("|" + "|".join("---" for _ in header) + "|")
            for row in result.rows:
                cells = [f"{row[0]:g}"] + [f"{v:.4f}" for v in row[1:]]
                if result.best_alphas:
                    cells.append(f"{result.best_alphas.get(str(row[0]), float('nan')):g}")
                lines.append("| " + " | ".join(cells) + " |")
            lines.append("")

            highlight = self._highlights(result)
            if "best_lambda" in highlight:
                lines.append(
                    f"Lowest error at lambda={highlight['best_lambda']:g} "
                    f"(rmse {highlight['rmse']:.4f})"
                )
                lines.append("")
            elif "best_alpha_per_lambda" in highlight:
                lines.append("Best alpha per lambda:")
                lines.append("")
                for lambda_name, best in highlight["best_alpha_per_lambda"].items():
                    lines.append(
                        f"- lambda={lambda_name}: alpha={best['alpha']:g} "
                        f"(rmse {best['rmse']:.4f})"
                    )
                lines.append("")

            if result.csv_path:
                lines.append(f"**Data:** `{result.csv_path}`")
                lines.append("")

        # Failed figures section
        failed = self.metrics_collector.get_failed_results()
        if failed:
            lines.append("## Failed Figures")
            lines.append("")
            for result in failed:
                lines.append(f"- **{result.figure_name}**: {result.error_message}")
            lines.append("")

        return "\n".join(lines)

    def generate_json(self) -> Dict[str, Any]:
        """Generate a JSON report.

        Returns:
            Report data as dictionary
        """
        results = list(self.metrics_collector.results.values())
        successful = self.metrics_collector.get_successful_results()

        report = {
            "generated_at": datetime.now().isoformat(),
            "results_dir": str(self.results_dir),
            "summary": {
                "total_figures": len(results),
                "successful": len(successful),
                "failed": len(results) - len(successful),
            },
            "figures": {},
        }

        for result in results:
            fig_data = {
                "kind": result.kind,
                "status": result.status,
                "error_message": result.error_message,
                "csv_path": result.csv_path,
                "duration_seconds": result.duration_seconds,
                "timestamp": result.timestamp,
            }
            if result.status == "success":
                fig_data["header"] = result.header
                fig_data["rows"] = result.rows
                fig_data["highlights"] = self._highlights(result)
                if result.best_alphas:
                    fig_data["best_alphas"] = result.best_alphas

            report["figures"][result.figure_name] = fig_data

        return report

    def _render(self, fmt: str) -> str:
        if fmt == "markdown":
            return self.generate_markdown()
        return json.dumps(self.generate_json(), indent=2)

    def save_reports(
        self,
        output_dir: Optional[str] = None,
        formats: Optional[List[str]] = None,
    ) -> Dict[str, str]:
        """Write report.md and/or report.json.

        Args:
            output_dir: Directory for the reports (defaults to results_dir)
            formats: Any of "markdown", "json", "both" (default: both)

        Returns:
            Dict mapping each written format to its file path
        """
        output_path = Path(output_dir) if output_dir else self.results_dir
        output_path.mkdir(parents=True, exist_ok=True)

        requested = set(formats or ["both"])
        if "both" in requested:
            requested |= {"markdown", "json"}

        saved = {}
        for fmt, filename in REPORT_FILES.items():
            if fmt not in requested:
                continue
            path = output_path / filename
            path.write_text(self._render(fmt))
            saved[fmt] = str(path)
            print(f"Wrote {fmt} report: {path}")

        return saved
