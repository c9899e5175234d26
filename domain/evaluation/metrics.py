"""Threshold and ranking metrics for one model on one evaluation set."""

import warnings

import numpy as np
import pandas as pd
from sklearn.exceptions import UndefinedMetricWarning
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    cohen_kappa_score,
    confusion_matrix,
    roc_curve,
)

from domain.evaluation.auc import rank_auc
from domain.evaluation.bootstrap import bootstrap_ci
from domain.schemas import CLASS_LEVELS
from infrastructure.config.models import StatsConfig


def compute_classification_metrics(
    y_true: np.ndarray,
    y_prob: np.ndarray,
    stats_cfg: StatsConfig,
    threshold: float = 0.5,
) -> tuple[dict, pd.DataFrame]:
    """
    Compute AUC (with a bootstrap CI), threshold metrics and the confusion matrix.

    Args:
        y_true: Binary labels (1 = 'high')
        y_prob: Predicted probability of 'high'
        stats_cfg: Statistics configuration (seed, metric_ci_n_boot, alpha)
        threshold: Probability cut-off for the predicted class

    Returns:
        Tuple of (metrics dict, confusion_matrix DataFrame with rows=truth, cols=prediction)
    """
    y_true = np.asarray(y_true).astype(int).reshape(-1)
    y_prob = np.asarray(y_prob, dtype=float).reshape(-1)
    y_pred = (y_prob >= threshold).astype(int)

    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=UndefinedMetricWarning)

        # positive class first, matching CLASS_LEVELS ('high', 'low')
        cm = confusion_matrix(y_true, y_pred, labels=[1, 0])
        cm_df = pd.DataFrame(
            cm,
            index=[f"true_{label}" for label in CLASS_LEVELS],
            columns=[f"pred_{label}" for label in CLASS_LEVELS],
        )

        accuracy = accuracy_score(y_true, y_pred)
        balanced_acc = balanced_accuracy_score(y_true, y_pred)
        kappa = cohen_kappa_score(y_true, y_pred, labels=[1, 0])

    tp, fn = int(cm[0, 0]), int(cm[0, 1])
    fp, tn = int(cm[1, 0]), int(cm[1, 1])
    sensitivity = tp / max(tp + fn, 1)
    specificity = tn / max(tn + fp, 1)

    auc = rank_auc(y_true, y_prob)
    auc_ci_low, auc_ci_high = bootstrap_ci(
        y_true=y_true,
        y_score=y_prob,
        stat_fn=rank_auc,
        n_boot=stats_cfg.metric_ci_n_boot,
        alpha=stats_cfg.alpha,
        seed=stats_cfg.seed,
    )

    metrics = {
        "n": int(y_true.size),
        "threshold": threshold,
        "roc_auc": auc,
        "roc_auc_ci": [auc_ci_low, auc_ci_high],
        "accuracy": float(accuracy),
        "balanced_accuracy": float(balanced_acc),
        "sensitivity": sensitivity,
        "specificity": specificity,
        "cohen_kappa": float(kappa),
        "confusion_matrix": cm.tolist(),
    }
    return metrics, cm_df


def roc_points(y_true: np.ndarray, y_prob: np.ndarray) -> pd.DataFrame:
    """ROC curve as a table of (threshold, fpr, tpr) with the positive class coded 1."""
    fpr, tpr, thresholds = roc_curve(np.asarray(y_true).astype(int), np.asarray(y_prob, dtype=float), pos_label=1)
    return pd.DataFrame({"threshold": thresholds, "fpr": fpr, "tpr": tpr})
