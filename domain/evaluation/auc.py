"""Rank-based (Mann-Whitney) estimate of the area under the ROC curve."""

import numpy as np
from scipy.stats import rankdata

from domain.errors import DegenerateSampleError


def rank_auc(y_true: np.ndarray, scores: np.ndarray) -> float:
    """
    AUC as P(score of a random positive > score of a random negative).

    Tied positive/negative pairs contribute 0.5 (midranks).

    Args:
        y_true: Binary labels (1 = positive class)
        scores: Predicted probability (or any score) of the positive class

    Returns:
        AUC in [0, 1]

    Raises:
        DegenerateSampleError: If y_true does not contain both classes
        ValueError: If the inputs have different lengths
    """
    y = np.asarray(y_true).reshape(-1)
    s = np.asarray(scores, dtype=float).reshape(-1)
    if y.shape != s.shape:
        raise ValueError(f"y_true and scores must have the same length, got {y.shape[0]} and {s.shape[0]}")

    pos = y == 1
    n_pos = int(pos.sum())
    n_neg = int(y.size - n_pos)
    if n_pos == 0 or n_neg == 0:
        raise DegenerateSampleError(
            f"Degenerate sample: AUC needs both classes (positives={n_pos}, negatives={n_neg})"
        )

    ranks = rankdata(s, method="average")
    u_stat = ranks[pos].sum() - n_pos * (n_pos + 1) / 2.0
    return float(u_stat / (n_pos * n_neg))
