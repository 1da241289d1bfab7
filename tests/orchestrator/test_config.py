"""Tests for orchestrator config module.

Tests FigureConfig, OrchestratorConfig, and YAML loading/saving.
"""

import pytest
import tempfile
from pathlib import Path

import yaml

from orchestrator.config import (
    DEFAULT_NUM_SETS,
    DEFAULT_SEED,
    DEFAULT_SEQUENCES_PER_SET,
    SUTTON_ALPHAS,
    SUTTON_LAMBDAS,
    FigureConfig,
    OrchestratorConfig,
    create_sutton_config,
    load_config,
    save_config,
)


def make_figure(**overrides):
    params = dict(name="fig", kind="alpha_sweep", lambdas=[0.0, 1.0], alphas=[0.1, 0.2])
    params.update(overrides)
    return FigureConfig(**params)


class TestFigureConfig:
    """Tests for FigureConfig dataclass."""

    def test_defaults(self):
        fig = make_figure()
        assert fig.max_iterations == 1
        assert fig.tolerance == -1.0
        assert fig.online is True
        assert fig.initial_value == 0.5
        assert fig.output_file is None

    def test_invalid_kind(self):
        with pytest.raises(ValueError, match="Invalid kind"):
            make_figure(kind="figure6")

    def test_empty_lambdas(self):
        with pytest.raises(ValueError):
            make_figure(lambdas=[])

    def test_empty_alphas(self):
        with pytest.raises(ValueError):
            make_figure(alphas=[])

    def test_lambda_out_of_range(self):
        with pytest.raises(ValueError):
            make_figure(lambdas=[0.5, 1.5])

    def test_negative_alpha(self):
        with pytest.raises(ValueError):
            make_figure(alphas=[-0.1])

    def test_negative_max_iterations(self):
        with pytest.raises(ValueError):
            make_figure(max_iterations=-1)

    @pytest.mark.parametrize("value", ["0.5", True, [0.5]])
    def test_non_numeric_initial_value(self, value):
        with pytest.raises(ValueError, match="initial_value"):
            make_figure(initial_value=value)

    @pytest.mark.parametrize("value", [None, 0, 0.25])
    def test_numeric_or_null_initial_value(self, value):
        assert make_figure(initial_value=value).initial_value == value

    def test_lambda_sweep_needs_single_alpha(self):
        with pytest.raises(ValueError, match="exactly one alpha"):
            make_figure(kind="lambda_sweep")
        assert make_figure(kind="lambda_sweep", alphas=[0.02]).alphas == [0.02]

    def test_output_path_default(self):
        fig = make_figure(name="figure4")
        assert fig.get_output_path(Path("out")) == Path("out") / "figure4_data.csv"

    def test_output_path_override(self):
        fig = make_figure(output_file="custom.csv")
        assert fig.get_output_path(Path("out")) == Path("out") / "custom.csv"


class TestOrchestratorConfig:
    """Tests for OrchestratorConfig dataclass."""

    def test_defaults(self):
        config = OrchestratorConfig(figures=[make_figure()])
        assert config.seed == DEFAULT_SEED
        assert config.num_sets == DEFAULT_NUM_SETS
        assert config.sequences_per_set == DEFAULT_SEQUENCES_PER_SET
        assert config.init_seed is None
        assert config.results_dir == "results"
        assert config.report_format == "both"

    def test_no_figures(self):
        with pytest.raises(ValueError, match="At least one figure"):
            OrchestratorConfig(figures=[])

    @pytest.mark.parametrize("field_name", ["num_sets", "sequences_per_set"])
    def test_non_positive_counts(self, field_name):
        with pytest.raises(ValueError):
            OrchestratorConfig(figures=[make_figure()], **{field_name: 0})

    def test_invalid_report_format(self):
        with pytest.raises(ValueError, match="report_format"):
            OrchestratorConfig(figures=[make_figure()], report_format="html")

    def test_duplicate_names(self):
        with pytest.raises(ValueError, match="unique"):
            OrchestratorConfig(figures=[make_figure(), make_figure()])

    def test_get_figure(self):
        fig = make_figure(name="figure4")
        config = OrchestratorConfig(figures=[fig])
        assert config.get_figure("figure4") is fig
        with pytest.raises(KeyError):
            config.get_figure("missing")

    def test_results_path(self):
        config = OrchestratorConfig(figures=[make_figure()], results_dir="some/dir")
        assert config.results_path == Path("some/dir")


class TestLoadSaveConfig:
    """Tests for YAML loading and saving."""

    def test_round_trip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            original = OrchestratorConfig(
                figures=[
                    make_figure(name="a", initial_value=None, output_file="a.csv"),
                    make_figure(name="b", kind="lambda_sweep", alphas=[0.02],
                                max_iterations=50, tolerance=1e-3, online=False),
                ],
                seed=7,
                num_sets=3,
                sequences_per_set=4,
                init_seed=11,
                results_dir="out",
                report_format="json",
            )
            save_config(original, str(path))
            loaded = load_config(str(path))

            assert loaded.seed == 7
            assert loaded.num_sets == 3
            assert loaded.sequences_per_set == 4
            assert loaded.init_seed == 11
            assert loaded.results_dir == "out"
            assert loaded.report_format == "json"
            assert loaded.figures == original.figures

    def test_minimal_yaml_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(yaml.dump({
                "figures": [
                    {"name": "f", "kind": "best_alpha", "lambdas": [0, 1], "alphas": [0.1]},
                ],
            }))
            config = load_config(str(path))

            assert config.seed == DEFAULT_SEED
            fig = config.figures[0]
            assert fig.lambdas == [0.0, 1.0]
            assert all(isinstance(lam, float) for lam in fig.lambdas)
            assert fig.tolerance == -1.0

    def test_exponent_numbers_load_as_floats(self):
        """PyYAML reads 5e-1 and 1e-4 as strings; they are converted on load."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(
                "data:\n"
                "  seed: 42\n"
                "  init_seed: 7\n"
                "figures:\n"
                "- name: f\n"
                "  kind: lambda_sweep\n"
                "  lambdas: [0, 1]\n"
                "  alphas: [2e-2]\n"
                "  max_iterations: 20\n"
                "  tolerance: 1e-4\n"
                "  initial_value: 5e-1\n"
            )
            config = load_config(str(path))

            fig = config.figures[0]
            assert fig.initial_value == 0.5
            assert isinstance(fig.initial_value, float)
            assert fig.alphas == [0.02]
            assert fig.tolerance == 0.0001
            assert config.seed == 42
            assert config.init_seed == 7

    def test_null_initial_value_means_random(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(
                "figures:\n"
                "- name: f\n"
                "  kind: alpha_sweep\n"
                "  lambdas: [0]\n"
                "  alphas: [0.1]\n"
                "  initial_value: null\n"
            )
            assert load_config(str(path)).figures[0].initial_value is None

    @pytest.mark.parametrize("field_line", [
        "  initial_value: half\n",
        "  max_iterations: many\n",
    ])
    def test_non_numeric_figure_values_rejected(self, field_line):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(
                "figures:\n"
                "- name: f\n"
                "  kind: alpha_sweep\n"
                "  lambdas: [0]\n"
                "  alphas: [0.1]\n"
                + field_line
            )
            with pytest.raises(ValueError):
                load_config(str(path))

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/config.yaml")

    def test_empty_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "empty.yaml"
            path.write_text("")
            with pytest.raises(ValueError, match="empty"):
                load_config(str(path))

    def test_no_figures(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(yaml.dump({"data": {"seed": 1}}))
            with pytest.raises(ValueError, match="No figures"):
                load_config(str(path))

    def test_shipped_config_loads(self):
        path = Path(__file__).resolve().parents[2] / "configs" / "sutton1988.yaml"
        config = load_config(str(path))
        assert [fig.name for fig in config.figures] == ["figure3", "figure4", "figure5"]


class TestSuttonConfig:
    """Tests for create_sutton_config."""

    def test_three_figures(self):
        config = create_sutton_config()
        kinds = {fig.name: fig.kind for fig in config.figures}
        assert kinds == {
            "figure3": "lambda_sweep",
            "figure4": "alpha_sweep",
            "figure5": "best_alpha",
        }

    def test_figure3_settings(self):
        fig = create_sutton_config().get_figure("figure3")
        assert fig.lambdas == SUTTON_LAMBDAS
        assert fig.alphas == [0.02]
        assert fig.online is False
        assert fig.initial_value is None
        assert fig.max_iterations == 10000
        assert fig.tolerance == 0.0001

    def test_figure4_settings(self):
        fig = create_sutton_config().get_figure("figure4")
        assert fig.lambdas == [0.0, 0.3, 0.8, 1.0]
        assert fig.alphas == SUTTON_ALPHAS
        assert fig.alphas[0] == 0.0
        assert fig.alphas[-1] == pytest.approx(0.6)
        assert fig.online is True
        assert fig.max_iterations == 1
        assert fig.initial_value == 0.5

    def test_overrides(self):
        config = create_sutton_config(seed=5, num_sets=2, sequences_per_set=3, results_dir="r")
        assert (config.seed, config.num_sets, config.sequences_per_set) == (5, 2, 3)
        assert config.results_dir == "r"
