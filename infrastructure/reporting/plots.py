"""Figures for the comparison report."""

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from domain.evaluation.bootstrap import BootstrapResult  # noqa: E402
from domain.schemas import OUTCOME_COL  # noqa: E402

logger = logging.getLogger(__name__)


def _save(fig: plt.Figure, path: Path, dpi: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logger.debug("Saved figure %s", path)
    return path


def plot_class_balance(balance: pd.DataFrame, path: Path, dpi: int = 120) -> Path:
    """Bar chart of outcome class counts, annotated with proportions."""
    fig, ax = plt.subplots(figsize=(5, 4))
    bars = ax.bar(balance[OUTCOME_COL].astype(str), balance["n"], color=["#1b9e77", "#d95f02"])
    for bar, prop in zip(bars, balance["prop"], strict=False):
        ax.annotate(
            f"{prop:.0%}",
            (bar.get_x() + bar.get_width() / 2, bar.get_height()),
            ha="center",
            va="bottom",
        )
    ax.set_xlabel("Sales class")
    ax.set_ylabel("Stores")
    ax.set_title("Class balance")
    return _save(fig, path, dpi)


def plot_roc_curves(
    roc_by_model: dict[str, pd.DataFrame],
    auc_by_model: dict[str, float],
    path: Path,
    dpi: int = 120,
) -> Path:
    """Overlay ROC curves of each model on the test set."""
    fig, ax = plt.subplots(figsize=(5, 5))
    for name, roc in roc_by_model.items():
        ax.plot(roc["fpr"], roc["tpr"], label=f"{name} (AUC = {auc_by_model[name]:.3f})")
    ax.plot([0, 1], [0, 1], linestyle="--", color="grey", linewidth=1)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_xlabel("1 - specificity")
    ax.set_ylabel("Sensitivity")
    ax.set_title("ROC curves (test set)")
    ax.legend(loc="lower right")
    return _save(fig, path, dpi)


def plot_bootstrap_differences(result: BootstrapResult, path: Path, dpi: int = 120) -> Path:
    """Histogram of bootstrap AUC differences with the percentile interval marked."""
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.hist(result.differences, bins=30, color="#7570b3", edgecolor="white")
    for value, style in ((result.lower, "--"), (result.median, "-"), (result.upper, "--")):
        ax.axvline(value, color="black", linestyle=style, linewidth=1)
    ax.axvline(0.0, color="red", linewidth=1)
    ax.set_xlabel(f"AUC({result.model_b}) - AUC({result.model_a})")
    ax.set_ylabel("Repetitions")
    ax.set_title(f"Bootstrap AUC difference ({result.confidence:.0%} interval, R = {result.n_valid})")
    return _save(fig, path, dpi)


def plot_cv_auc_boxplot(fold_metrics: pd.DataFrame, path: Path, dpi: int = 120) -> Path:
    """Boxplot of per-fold AUC for each model."""
    models = list(dict.fromkeys(fold_metrics["model"]))
    data = [fold_metrics.loc[fold_metrics["model"] == m, "auc"].dropna().to_numpy() for m in models]

    fig, ax = plt.subplots(figsize=(5, 4))
    ax.boxplot(data)
    ax.set_xticks(range(1, len(models) + 1), models)
    ax.set_ylabel("ROC AUC")
    ax.set_title("Cross-validation AUC per fold")
    return _save(fig, path, dpi)


def plot_feature_importance(importance_by_model: dict[str, pd.DataFrame], path: Path, dpi: int = 120) -> Path:
    """Horizontal bar charts of variable importance, one panel per model."""
    n = len(importance_by_model)
    fig, axes = plt.subplots(1, n, figsize=(5 * n, 4), squeeze=False)
    for ax, (name, imp) in zip(axes[0], importance_by_model.items(), strict=False):
        ordered = imp.sort_values("importance")
        ax.barh(ordered["feature"], ordered["importance"], color="#66a61e")
        ax.set_title(name)
        ax.set_xlabel("Importance")
    return _save(fig, path, dpi)
