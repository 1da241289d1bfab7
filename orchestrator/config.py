"""
Experiment Configuration.

Defines configuration dataclasses for figure experiments.

A run generates one collection of training sets from a seed and computes
each configured figure from it. Three figure kinds cover Sutton (1988):
- lambda_sweep: error per lambda at a single alpha (Figure 3)
- alpha_sweep: error per alpha for several lambdas (Figure 4)
- best_alpha: error per lambda at that lambda's best alpha (Figure 5)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml


VALID_FIGURE_KINDS = frozenset(["lambda_sweep", "alpha_sweep", "best_alpha"])

VALID_REPORT_FORMATS = frozenset(["markdown", "json", "both"])

# Training data used in the reference runs
DEFAULT_SEED = 918798907
DEFAULT_NUM_SETS = 100
DEFAULT_SEQUENCES_PER_SET = 10

SUTTON_LAMBDAS = [0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
SUTTON_FIGURE_4_LAMBDAS = [0.0, 0.3, 0.8, 1.0]
SUTTON_ALPHAS = [a / 20 for a in range(13)]


@dataclass
class FigureConfig:
    """Configuration for a single figure.

    Attributes:
        name: Unique figure identifier
        kind: lambda_sweep, alpha_sweep or best_alpha
        lambdas: Trace decay values to evaluate
        alphas: Learning rates to evaluate (exactly one for lambda_sweep)
        max_iterations: Maximum sweeps over each training set
        tolerance: Convergence threshold (<= 0 disables)
        online: Online instead of batch updates
        initial_value: Initial weight of every transient state, or None
            for random initial weights
        output_file: CSV file name (relative to results_dir)
    """
    name: str
    kind: Literal["lambda_sweep", "alpha_sweep", "best_alpha"]
    lambdas: List[float]
    alphas: List[float]
    max_iterations: int = 1
    tolerance: float = -1.0
    online: bool = True
    initial_value: Optional[float] = 0.5
    output_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.kind not in VALID_FIGURE_KINDS:
            raise ValueError(
                f"Invalid kind '{self.kind}'. "
                f"Must be one of: {sorted(VALID_FIGURE_KINDS)}"
            )
        if not self.lambdas:
            raise ValueError("lambdas must not be empty")
        if not self.alphas:
            raise ValueError("alphas must not be empty")
        if any(not 0.0 <= lam <= 1.0 for lam in self.lambdas):
            raise ValueError("lambdas must be in [0, 1]")
        if any(a < 0.0 for a in self.alphas):
            raise ValueError("alphas must be non-negative")
        if self.max_iterations < 0:
            raise ValueError("max_iterations must be non-negative")
        if self.initial_value is not None and (
            isinstance(self.initial_value, bool)
            or not isinstance(self.initial_value, (int, float))
        ):
            raise ValueError(
                f"initial_value must be a number or null, got {self.initial_value!r}"
            )
        if self.kind == "lambda_sweep" and len(self.alphas) != 1:
            raise ValueError("lambda_sweep figures take exactly one alpha")

    def get_output_path(self, results_dir: Path) -> Path:
        """Get the full CSV path for this figure.

        Args:
            results_dir: Base results directory

        Returns:
            Path of the figure's CSV file
        """
        if self.output_file:
            return results_dir / self.output_file
        return results_dir / f"{self.name}_data.csv"

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form used for YAML output."""
        fig_dict = {
            "name": self.name,
            "kind": self.kind,
            "lambdas": list(self.lambdas),
            "alphas": list(self.alphas),
            "max_iterations": self.max_iterations,
            "tolerance": self.tolerance,
            "online": self.online,
            "initial_value": self.initial_value,
        }
        if self.output_file:
            fig_dict["output_file"] = self.output_file
        return fig_dict


@dataclass
class OrchestratorConfig:
    """Configuration for a figure run.

    Attributes:
        figures: List of figure configurations
        seed: Seed of the training data
        num_sets: Number of training sets
        sequences_per_set: Walks per training set
        init_seed: Seed for random initial weights (None = time-based)
        results_dir: Base directory for all results
        report_format: Output format for reports
    """
    figures: List[FigureConfig]
    seed: int = DEFAULT_SEED
    num_sets: int = DEFAULT_NUM_SETS
    sequences_per_set: int = DEFAULT_SEQUENCES_PER_SET
    init_seed: Optional[int] = None
    results_dir: str = "results"
    report_format: Literal["markdown", "json", "both"] = "both"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.figures:
            raise ValueError("At least one figure must be defined")
        if self.num_sets <= 0:
            raise ValueError("num_sets must be positive")
        if self.sequences_per_set <= 0:
            raise ValueError("sequences_per_set must be positive")
        if self.report_format not in VALID_REPORT_FORMATS:
            raise ValueError(
                f"Invalid report_format '{self.report_format}'. "
                f"Must be one of: {sorted(VALID_REPORT_FORMATS)}"
            )

        # Check for duplicate figure names
        names = [fig.name for fig in self.figures]
        if len(names) != len(set(names)):
            raise ValueError("Figure names must be unique")

    @property
    def results_path(self) -> Path:
        """Get results directory as Path."""
        return Path(self.results_dir)

    def get_figure(self, name: str) -> FigureConfig:
        """Look up a figure by name.

        Raises:
            KeyError: If no figure has that name
        """
        for fig in self.figures:
            if fig.name == name:
                return fig
        raise KeyError(f"No figure named '{name}'")


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def load_config(config_path: str) -> OrchestratorConfig:
    """Load orchestrator configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        OrchestratorConfig with all figure definitions

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raise ValueError("Config file is empty")

    raw_figures = raw.get("figures", [])
    if not raw_figures:
        raise ValueError("No figures defined in config")

    figures = []
    for fig_dict in raw_figures:
        fig = FigureConfig(
            name=fig_dict["name"],
            kind=fig_dict["kind"],
            lambdas=[float(lam) for lam in fig_dict["lambdas"]],
            alphas=[float(a) for a in fig_dict["alphas"]],
            max_iterations=int(fig_dict.get("max_iterations", 1)),
            tolerance=float(fig_dict.get("tolerance", -1.0)),
            online=fig_dict.get("online", True),
            initial_value=_optional_float(fig_dict.get("initial_value", 0.5)),
            output_file=fig_dict.get("output_file"),
        )
        figures.append(fig)

    data = raw.get("data", {})
    orch_settings = raw.get("orchestrator", {})

    return OrchestratorConfig(
        figures=figures,
        seed=int(data.get("seed", DEFAULT_SEED)),
        num_sets=int(data.get("num_sets", DEFAULT_NUM_SETS)),
        sequences_per_set=int(data.get("sequences_per_set", DEFAULT_SEQUENCES_PER_SET)),
        init_seed=_optional_int(data.get("init_seed")),
        results_dir=orch_settings.get("results_dir", "results"),
        report_format=orch_settings.get("report_format", "both"),
    )


def save_config(config: OrchestratorConfig, config_path: str) -> None:
    """Save orchestrator configuration to YAML file.

    Args:
        config: Configuration to save
        config_path: Path to output YAML file
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    output = {
        "orchestrator": {
            "results_dir": config.results_dir,
            "report_format": config.report_format,
        },
        "data": {
            "seed": config.seed,
            "num_sets": config.num_sets,
            "sequences_per_set": config.sequences_per_set,
            "init_seed": config.init_seed,
        },
        "figures": [fig.to_dict() for fig in config.figures],
    }

    with open(path, 'w') as f:
        yaml.dump(output, f, default_flow_style=False, sort_keys=False)


def create_sutton_config(
    seed: int = DEFAULT_SEED,
    num_sets: int = DEFAULT_NUM_SETS,
    sequences_per_set: int = DEFAULT_SEQUENCES_PER_SET,
    init_seed: Optional[int] = None,
    results_dir: str = "results",
    max_iterations: int = 10000,
    tolerance: float = 0.0001,
) -> OrchestratorConfig:
    """Create the configuration for Figures 3, 4 and 5 of Sutton (1988).

    - figure3: repeated batch presentation until convergence, alpha 0.02,
      random initial weights
    - figure4: single online pass, every alpha for lambda 0, 0.3, 0.8, 1
    - figure5: single online pass, every lambda at its best alpha

    Args:
        seed: Training data seed
        num_sets: Number of training sets
        sequences_per_set: Walks per training set
        init_seed: Seed for the random initial weights of figure3
        results_dir: Results directory
        max_iterations: Sweep cap for figure3
        tolerance: Convergence threshold for figure3

    Returns:
        OrchestratorConfig with the three figures
    """
    figures = [
        FigureConfig(
            name="figure3",
            kind="lambda_sweep",
            lambdas=list(SUTTON_LAMBDAS),
            alphas=[0.02],
            max_iterations=max_iterations,
            tolerance=tolerance,
            online=False,
            initial_value=None,
            output_file="figure3_data.csv",
        ),
        FigureConfig(
            name="figure4",
            kind="alpha_sweep",
            lambdas=list(SUTTON_FIGURE_4_LAMBDAS),
            alphas=list(SUTTON_ALPHAS),
            max_iterations=1,
            tolerance=-1.0,
            online=True,
            initial_value=0.5,
            output_file="figure4_data.csv",
        ),
        FigureConfig(
            name="figure5",
            kind="best_alpha",
            lambdas=list(SUTTON_LAMBDAS),
            alphas=list(SUTTON_ALPHAS),
            max_iterations=1,
            tolerance=-1.0,
            online=True,
            initial_value=0.5,
            output_file="figure5_data.csv",
        ),
    ]

    return OrchestratorConfig(
        figures=figures,
        seed=seed,
        num_sets=num_sets,
        sequences_per_set=sequences_per_set,
        init_seed=init_seed,
        results_dir=results_dir,
        report_format="both",
    )
