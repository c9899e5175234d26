"""
Evaluation metrics and statistical comparison of two classifiers.

Provides:
- Rank-based AUC
- Bootstrap distribution of the AUC difference with a percentile interval
- DeLong's test for correlated AUCs
- (Repeated) cross-validation with a paired t-test
- Holdout classification metrics and comparison tables

All functions are pure (depend only on numpy, pandas, scipy, sklearn, joblib).
"""

from domain.evaluation.auc import rank_auc
from domain.evaluation.bootstrap import BootstrapResult, bootstrap_auc_difference, bootstrap_ci
from domain.evaluation.cross_validation import (
    CrossValidationResult,
    PairedTestResult,
    cross_validate_auc,
    paired_t_test,
)
from domain.evaluation.delong import DeLongResult, delong_test
from domain.evaluation.metrics import compute_classification_metrics, roc_points
from domain.evaluation.tables import cv_summary_table, holdout_comparison_table, significance_table

__all__ = [
    "rank_auc",
    "bootstrap_auc_difference",
    "bootstrap_ci",
    "BootstrapResult",
    "delong_test",
    "DeLongResult",
    "cross_validate_auc",
    "paired_t_test",
    "CrossValidationResult",
    "PairedTestResult",
    "compute_classification_metrics",
    "roc_points",
    "holdout_comparison_table",
    "cv_summary_table",
    "significance_table",
]
