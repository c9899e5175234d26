"""Report figures rendered with matplotlib (Agg backend, PNG files)."""

from infrastructure.reporting.plots import (
    plot_bootstrap_differences,
    plot_class_balance,
    plot_cv_auc_boxplot,
    plot_feature_importance,
    plot_roc_curves,
)

__all__ = [
    "plot_class_balance",
    "plot_roc_curves",
    "plot_bootstrap_differences",
    "plot_cv_auc_boxplot",
    "plot_feature_importance",
]
