"""Comparison tables assembled from evaluation results."""

import pandas as pd

from domain.evaluation.bootstrap import BootstrapResult
from domain.evaluation.cross_validation import CrossValidationResult, PairedTestResult
from domain.evaluation.delong import DeLongResult

_HOLDOUT_COLUMNS = ["roc_auc", "accuracy", "balanced_accuracy", "sensitivity", "specificity", "cohen_kappa"]


def holdout_comparison_table(metrics_by_model: dict[str, dict]) -> pd.DataFrame:
    """
    One row per model with its holdout metrics.

    Args:
        metrics_by_model: Model name -> metrics dict from compute_classification_metrics

    Returns:
        DataFrame with a 'model' column, the metric columns and the AUC CI bounds
    """
    rows: list[dict[str, object]] = []
    for name, metrics in metrics_by_model.items():
        row: dict[str, object] = {"model": name}
        for col in _HOLDOUT_COLUMNS:
            row[col] = round(float(metrics[col]), 4)
        row["roc_auc_ci_low"] = round(float(metrics["roc_auc_ci"][0]), 4)
        row["roc_auc_ci_high"] = round(float(metrics["roc_auc_ci"][1]), 4)
        rows.append(row)
    return pd.DataFrame(rows)


def cv_summary_table(cv_result: CrossValidationResult) -> pd.DataFrame:
    """Mean AUC and standard error per model, rounded for display."""
    out = cv_result.summary()
    out["mean"] = out["mean"].round(4)
    out["std_err"] = out["std_err"].round(4)
    out.insert(1, "metric", "roc_auc")
    return out


def significance_table(
    bootstrap: BootstrapResult | None,
    delong: DeLongResult | None,
    paired: PairedTestResult | None,
) -> pd.DataFrame:
    """
    One row per technique: estimated AUC difference, interval and p-value.

    Columns:
      - technique, estimate, ci_low, ci_high, p_value, excludes_zero
    """
    rows: list[dict[str, object]] = []

    if bootstrap is not None:
        rows.append(
            {
                "technique": f"bootstrap ({bootstrap.assessment}, R={bootstrap.n_valid})",
                "estimate": bootstrap.median,
                "ci_low": bootstrap.lower,
                "ci_high": bootstrap.upper,
                "p_value": float("nan"),
            }
        )
    if delong is not None:
        rows.append(
            {
                "technique": "DeLong",
                "estimate": delong.difference,
                "ci_low": delong.ci_lower,
                "ci_high": delong.ci_upper,
                "p_value": delong.p_value,
            }
        )
    if paired is not None:
        label = "paired t-test" if paired.correction == "none" else "corrected paired t-test"
        rows.append(
            {
                "technique": f"{label} (k={paired.n_pairs})",
                "estimate": paired.mean_difference,
                "ci_low": paired.ci_lower,
                "ci_high": paired.ci_upper,
                "p_value": paired.p_value,
            }
        )

    out = pd.DataFrame(rows, columns=["technique", "estimate", "ci_low", "ci_high", "p_value"])
    out["excludes_zero"] = (out["ci_low"] > 0) | (out["ci_high"] < 0)
    return out.round({"estimate": 4, "ci_low": 4, "ci_high": 4, "p_value": 6})
