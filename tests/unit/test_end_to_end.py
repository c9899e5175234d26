import json
from pathlib import Path

import pandas as pd
import pytest

from application import build_prediction_table, prepare_dataset, render_report
from application.constants import FIGURES_DIRNAME
from application.report import build_report_text
from infrastructure.config.models import RunConfig


@pytest.fixture
def results(xor_analysis):
    return xor_analysis[1]


def test_prepare_dataset_labels_and_drops_sales(small_run_config: RunConfig, make_raw_frame) -> None:
    raw = make_raw_frame(n=50, seed=2)
    raw.to_csv(small_run_config.data_file_path, index=False)

    df = prepare_dataset(small_run_config)

    assert "sales" not in df.columns
    assert (df["sales_class"] == "high").sum() == (raw["Sales"] > 8.0).sum()


def test_forest_beats_linear_model_on_interaction_signal(results) -> None:
    assert results.bootstrap.model_b == "random_forest"
    assert results.bootstrap.lower > 0.0
    assert results.delong.difference > 0.0
    assert results.delong.p_value < 0.05
    assert results.paired.mean_difference > 0.0
    assert results.final.selected == "random_forest"


def test_results_cover_every_evaluation_step(results, small_run_config: RunConfig) -> None:
    assert len(results.split.train) == 300
    assert len(results.holdout.predictions) == 2 * len(results.split.test)
    assert len(results.cv.fold_metrics) == small_run_config.stats.cv_folds * 2
    assert len(results.repeated_cv.fold_metrics) == (
        small_run_config.stats.cv_folds * small_run_config.stats.cv_repeats * 2
    )
    assert results.bootstrap.n_valid + results.bootstrap.n_skipped == small_run_config.stats.n_boot
    assert results.significance()["technique"].nunique() == 3
    assert set(results.final.importance) == {"logistic_regression", "random_forest"}


def test_metrics_are_json_serializable(results) -> None:
    payload = json.loads(json.dumps(results.to_metrics(), default=str))

    assert payload["bootstrap"]["n_boot"] == 30
    assert payload["final_fit"]["selected"] == "random_forest"


def test_render_report_writes_markdown_and_figures(results, small_run_config: RunConfig, tmp_path: Path) -> None:
    run_dir = tmp_path / "run"

    report = render_report(small_run_config, results, run_dir)

    text = report.read_text(encoding="utf-8")
    assert text.startswith(f"# {small_run_config.report.title}")
    assert "## DeLong's test" in text
    assert "## Summary of significance tests" in text
    assert len(list((run_dir / FIGURES_DIRNAME).glob("*.png"))) == 5


def test_render_report_without_plots(results, small_run_config: RunConfig, tmp_path: Path) -> None:
    cfg = small_run_config.model_copy(update={"report": small_run_config.report.model_copy(update={"make_plots": False})})

    report = render_report(cfg, results, tmp_path)

    assert report.exists()
    assert not (tmp_path / FIGURES_DIRNAME).exists()
    assert "![" not in report.read_text(encoding="utf-8")


def test_prediction_table_has_complementary_probabilities(labelled_frame: pd.DataFrame) -> None:
    scores = {"m": pd.Series(range(len(labelled_frame))).div(len(labelled_frame)).to_numpy()}

    table = build_prediction_table(labelled_frame, scores, threshold=0.5)

    assert list(table.columns) == ["row_id", "model", "truth", ".pred_high", ".pred_low", ".pred_class"]
    assert ((table[".pred_high"] + table[".pred_low"]) - 1.0).abs().max() < 1e-12
    assert (table[".pred_class"] == "high").sum() == (table[".pred_high"] >= 0.5).sum()


def test_final_model_interval_label_follows_configured_alpha(
    results, small_run_config: RunConfig, tmp_path: Path
) -> None:
    cfg = small_run_config.model_copy(update={"stats": small_run_config.stats.model_copy(update={"alpha": 0.1})})

    text = build_report_text(cfg, results, {}, tmp_path)

    assert "90% bootstrap CI" in text
    assert "95% bootstrap CI" not in text
