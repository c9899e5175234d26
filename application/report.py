"""Render the comparison report: figures plus a markdown document."""

import logging
from datetime import datetime
from pathlib import Path

import pandas as pd

from application.constants import (
    BOOTSTRAP_FIGURE,
    CLASS_BALANCE_FIGURE,
    CV_BOXPLOT_FIGURE,
    FIGURES_DIRNAME,
    IMPORTANCE_FIGURE,
    REPORT_FILENAME,
    ROC_FIGURE,
)
from application.evaluation import AnalysisResults
from domain.evaluation import cv_summary_table
from infrastructure.config.models import RunConfig
from infrastructure.reporting import (
    plot_bootstrap_differences,
    plot_class_balance,
    plot_cv_auc_boxplot,
    plot_feature_importance,
    plot_roc_curves,
)

logger = logging.getLogger(__name__)


def render_figures(cfg: RunConfig, results: AnalysisResults, figures_dir: Path) -> dict[str, Path]:
    """Save every report figure and return figure key -> path."""
    dpi = cfg.report.dpi
    auc_by_model = {name: m["roc_auc"] for name, m in results.holdout.metrics.items()}
    return {
        "class_balance": plot_class_balance(results.balance, figures_dir / CLASS_BALANCE_FIGURE, dpi),
        "roc": plot_roc_curves(results.holdout.roc, auc_by_model, figures_dir / ROC_FIGURE, dpi),
        "bootstrap": plot_bootstrap_differences(results.bootstrap, figures_dir / BOOTSTRAP_FIGURE, dpi),
        "cv_boxplot": plot_cv_auc_boxplot(results.repeated_cv.fold_metrics, figures_dir / CV_BOXPLOT_FIGURE, dpi),
        "importance": plot_feature_importance(results.final.importance, figures_dir / IMPORTANCE_FIGURE, dpi),
    }


def _table(df: pd.DataFrame) -> str:
    return "```\n" + df.to_string(index=False) + "\n```"


def _figure(figures: dict[str, Path], key: str, caption: str, run_dir: Path) -> list[str]:
    if key not in figures:
        return []
    return [f"![{caption}]({figures[key].relative_to(run_dir).as_posix()})", ""]


def build_report_text(
    cfg: RunConfig,
    results: AnalysisResults,
    figures: dict[str, Path],
    run_dir: Path,
) -> str:
    """
    Assemble the markdown report in analysis order.

    Sections: data, holdout evaluation, cross-validation, bootstrap, DeLong,
    repeated cross-validation, summary of significance tests, final model.
    """
    ref = results.reference.name
    comp = results.comparison.name
    boot = results.bootstrap
    delong = results.delong
    paired = results.paired
    final = results.final

    lines: list[str] = [
        f"# {cfg.report.title}",
        "",
        f"_Generated {datetime.now().strftime('%Y-%m-%d %H:%M')} from `{cfg.data_file_path}`._",
        "",
        "## Data",
        "",
        f"Stores with sales above {cfg.outcome_threshold:g} (thousand units) are labelled `high`, "
        "the rest `low`; the sales figure itself is removed before modelling.",
        "",
        _table(results.data_summary),
        "",
        _table(results.balance),
        "",
        *_figure(figures, "class_balance", "Class balance", run_dir),
        f"Training/testing split: {len(results.split.train)} / {len(results.split.test)} rows "
        f"(prop = {results.split.prop:g}, stratified = {results.split.stratified}).",
        "",
        "## Holdout evaluation",
        "",
        _table(results.holdout.table()),
        "",
        *_figure(figures, "roc", "ROC curves", run_dir),
        f"## {results.cv.folds}-fold cross-validation",
        "",
        _table(cv_summary_table(results.cv)),
        "",
        "## Bootstrap",
        "",
        f"{boot.n_boot} bootstrap resamples of the training set "
        f"(assessment: {'out-of-bag rows' if boot.assessment == 'oob' else 'the test set'}). "
        f"AUC({comp}) - AUC({ref}): median {boot.median:.4f}, "
        f"{boot.confidence:.0%} percentile interval [{boot.lower:.4f}, {boot.upper:.4f}]"
        f"{'' if boot.n_skipped == 0 else f'; {boot.n_skipped} resample(s) skipped {boot.skip_reasons}'}.",
        "",
        *_figure(figures, "bootstrap", "Bootstrap AUC differences", run_dir),
        "## DeLong's test",
        "",
        f"On the test set: AUC({ref}) = {delong.auc_a:.4f}, AUC({comp}) = {delong.auc_b:.4f}, "
        f"difference {delong.difference:.4f} (SE {delong.std_error:.4f}), "
        f"z = {delong.z:.3f}, p = {delong.p_value:.4g}.",
        "",
        f"## Repeated cross-validation ({results.repeated_cv.repeats} x {results.repeated_cv.folds} folds)",
        "",
        _table(cv_summary_table(results.repeated_cv)),
        "",
        f"Paired t-test on {paired.n_pairs} per-fold differences"
        f"{' (Nadeau-Bengio corrected)' if paired.correction == 'nadeau_bengio' else ''}: "
        f"mean {paired.mean_difference:.4f}, t = {paired.t_statistic:.3f} (df = {paired.df}), "
        f"p = {paired.p_value:.4g}.",
        "",
        *_figure(figures, "cv_boxplot", "Cross-validation AUC", run_dir),
        "## Summary of significance tests",
        "",
        _table(results.significance()),
        "",
        "## Final model",
        "",
        f"Selected by repeated cross-validation: `{final.selected}`. Test-set AUC {final.metrics['roc_auc']:.4f} "
        f"({1 - cfg.stats.alpha:.0%} bootstrap CI "
        f"[{final.metrics['roc_auc_ci'][0]:.4f}, {final.metrics['roc_auc_ci'][1]:.4f}]), "
        f"accuracy {final.metrics['accuracy']:.4f}.",
        "",
        _table(final.confusion.reset_index(names="truth")),
        "",
        *_figure(figures, "importance", "Variable importance", run_dir),
    ]
    return "\n".join(lines).rstrip() + "\n"


def render_report(cfg: RunConfig, results: AnalysisResults, run_dir: Path) -> Path:
    """
    Write figures (when enabled) and the markdown report into run_dir.

    Returns:
        Path to the rendered report
    """
    figures: dict[str, Path] = {}
    if cfg.report.make_plots:
        figures = render_figures(cfg, results, run_dir / FIGURES_DIRNAME)
        logger.info("Saved %d figures to %s", len(figures), run_dir / FIGURES_DIRNAME)

    out_path = run_dir / REPORT_FILENAME
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(build_report_text(cfg, results, figures, run_dir), encoding="utf-8")
    logger.info("Saved report to %s", out_path)
    return out_path
