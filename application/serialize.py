"""Prediction tables and artifact serialization utilities."""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from application.constants import (
    MODEL_COL,
    PRED_CLASS_COL,
    PRED_HIGH_COL,
    PRED_LOW_COL,
    ROW_ID_COL,
    TRUTH_COL,
)
from domain.schemas import CLASS_LEVELS, NEGATIVE_CLASS, OUTCOME_COL, POSITIVE_CLASS
from infrastructure.io import write_json

logger = logging.getLogger(__name__)


def build_prediction_table(
    test_df: pd.DataFrame,
    scores_by_model: dict[str, np.ndarray],
    threshold: float = 0.5,
) -> pd.DataFrame:
    """
    Long prediction table: one row per (test record, model).

    Columns: row_id, model, truth, .pred_high, .pred_low, .pred_class
    """
    frames: list[pd.DataFrame] = []
    for name, scores in scores_by_model.items():
        scores = np.asarray(scores, dtype=float)
        if scores.shape[0] != len(test_df):
            raise ValueError(f"Model '{name}' has {scores.shape[0]} scores for {len(test_df)} test rows")
        frames.append(
            pd.DataFrame(
                {
                    ROW_ID_COL: test_df.index.to_numpy(),
                    MODEL_COL: name,
                    TRUTH_COL: test_df[OUTCOME_COL].astype(str).to_numpy(),
                    PRED_HIGH_COL: scores,
                    PRED_LOW_COL: 1.0 - scores,
                    PRED_CLASS_COL: np.where(scores >= threshold, POSITIVE_CLASS, NEGATIVE_CLASS),
                }
            )
        )
    out = pd.concat(frames, ignore_index=True)
    out[TRUTH_COL] = pd.Categorical(out[TRUTH_COL], categories=CLASS_LEVELS)
    out[PRED_CLASS_COL] = pd.Categorical(out[PRED_CLASS_COL], categories=CLASS_LEVELS)
    return out


def save_table(df: pd.DataFrame, path: Path) -> Path:
    """Write a DataFrame as CSV without the index."""
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info("Saved %s (%d rows)", path, len(df))
    return path


def save_metrics(metrics: dict, path: Path) -> Path:
    """Write the metrics dict as JSON."""
    write_json(path, metrics)
    logger.info("Saved metrics to %s", path)
    return path
