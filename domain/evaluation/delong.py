"""
DeLong's test for two correlated ROC curves.

Placement values are computed with the midrank algorithm of Sun & Xu (2014), which
gives the same covariance estimate as DeLong, DeLong & Clarke-Pearson (1988).
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.stats import norm, rankdata

from domain.errors import TestPreconditionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeLongResult:
    """Outcome of a paired DeLong test; the difference is AUC(b) - AUC(a)."""

    model_a: str
    model_b: str
    auc_a: float
    auc_b: float
    difference: float
    covariance: np.ndarray
    std_error: float
    z: float
    p_value: float
    ci_lower: float
    ci_upper: float
    alpha: float
    n_positive: int
    n_negative: int

    def summary(self) -> dict[str, object]:
        return {
            "model_a": self.model_a,
            "model_b": self.model_b,
            "auc_a": self.auc_a,
            "auc_b": self.auc_b,
            "difference": self.difference,
            "covariance": self.covariance.tolist(),
            "std_error": self.std_error,
            "z": self.z,
            "p_value": self.p_value,
            "ci_lower": self.ci_lower,
            "ci_upper": self.ci_upper,
            "alpha": self.alpha,
            "n_positive": self.n_positive,
            "n_negative": self.n_negative,
        }


def _structural_components(y: np.ndarray, scores: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Return (aucs, v10, v01) for k score vectors stacked in a (k, n) array.

    v10[r, i] is the placement value of positive i for model r, v01[r, j] that of negative j.
    """
    pos = y == 1
    m = int(pos.sum())
    n = int((~pos).sum())

    pos_scores = scores[:, pos]
    neg_scores = scores[:, ~pos]

    tx = np.vstack([rankdata(row, method="average") for row in pos_scores])
    ty = np.vstack([rankdata(row, method="average") for row in neg_scores])
    tz = np.vstack([rankdata(row, method="average") for row in np.hstack([pos_scores, neg_scores])])

    aucs = tz[:, :m].sum(axis=1) / m / n - (m + 1.0) / 2.0 / n
    v10 = (tz[:, :m] - tx) / n
    v01 = 1.0 - (tz[:, m:] - ty) / m
    return aucs, v10, v01


def _check_preconditions(y: np.ndarray, scores_a: np.ndarray, scores_b: np.ndarray) -> None:
    if scores_a.shape != scores_b.shape or scores_a.shape != y.shape:
        raise TestPreconditionError(
            "DeLong's test compares correlated ROC curves: both models must be scored on the same "
            f"subjects (labels={y.shape[0]}, scores_a={scores_a.shape[0]}, scores_b={scores_b.shape[0]})"
        )
    if not np.isin(y, [0, 1]).all():
        raise TestPreconditionError("DeLong's test requires binary labels coded 0/1")
    n_pos = int((y == 1).sum())
    n_neg = int((y == 0).sum())
    if n_pos < 2 or n_neg < 2:
        raise TestPreconditionError(
            f"DeLong's test needs at least two observations per class (positives={n_pos}, negatives={n_neg})"
        )
    if not (np.isfinite(scores_a).all() and np.isfinite(scores_b).all()):
        raise TestPreconditionError("DeLong's test received non-finite scores")


def delong_test(
    y_true: np.ndarray,
    scores_a: np.ndarray,
    scores_b: np.ndarray,
    alpha: float = 0.05,
    model_a: str = "a",
    model_b: str = "b",
) -> DeLongResult:
    """
    Two-sided test of H0: AUC(a) == AUC(b) for two models scored on the same subjects.

    Args:
        y_true: Binary labels (1 = positive class), aligned with both score vectors
        scores_a: Positive-class scores of the reference model
        scores_b: Positive-class scores of the comparison model
        alpha: Significance level for the confidence interval of the difference
        model_a: Display name of the reference model
        model_b: Display name of the comparison model

    Returns:
        DeLongResult with the 2x2 AUC covariance, z statistic and p-value

    Raises:
        TestPreconditionError: If the inputs are not paired, not binary, or too small
    """
    y = np.asarray(y_true).reshape(-1)
    a = np.asarray(scores_a, dtype=float).reshape(-1)
    b = np.asarray(scores_b, dtype=float).reshape(-1)
    _check_preconditions(y, a, b)

    aucs, v10, v01 = _structural_components(y, np.vstack([a, b]))
    m = v10.shape[1]
    n = v01.shape[1]
    cov = np.cov(v10) / m + np.cov(v01) / n

    diff = float(aucs[1] - aucs[0])
    var = float(cov[0, 0] + cov[1, 1] - 2.0 * cov[0, 1])

    if var <= 0.0:
        logger.warning("DeLong: variance of the AUC difference is zero (identical rankings); reporting p=1")
        se = 0.0
        z = 0.0
        p_value = 1.0
    else:
        se = float(np.sqrt(var))
        z = diff / se
        p_value = float(2.0 * norm.sf(abs(z)))

    z_crit = float(norm.ppf(1.0 - alpha / 2.0))
    return DeLongResult(
        model_a=model_a,
        model_b=model_b,
        auc_a=float(aucs[0]),
        auc_b=float(aucs[1]),
        difference=diff,
        covariance=cov,
        std_error=se,
        z=float(z),
        p_value=p_value,
        ci_lower=diff - z_crit * se,
        ci_upper=diff + z_crit * se,
        alpha=alpha,
        n_positive=m,
        n_negative=n,
    )
