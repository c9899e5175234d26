"""Reference bootstrap interval for the shipped dataset and configuration."""

import logging

import pandas as pd

from application.evaluation import run_bootstrap_comparison
from application.preparation import make_model_specs, split_for_run
from domain.schemas import OUTCOME_COL, POSITIVE_CLASS
from infrastructure.config.models import RunConfig

logger = logging.getLogger(__name__)


def reference_summary(cfg: RunConfig, df: pd.DataFrame) -> dict[str, object]:
    """
    Split, run the configured bootstrap comparison and summarise it.

    The result is what gets stored as the reference run and what a later run on the
    same data, seed and repetition count is compared against.

    Args:
        cfg: RunConfig (seed, n_boot and assessment are taken from cfg.stats)
        df: Labelled store frame

    Returns:
        JSON-friendly dict with data shape, split sizes and the interval bounds
    """
    split = split_for_run(cfg, df)
    reference, comparison = make_model_specs(cfg)
    boot = run_bootstrap_comparison(cfg, split, reference, comparison)

    n_high = int((df[OUTCOME_COL] == POSITIVE_CLASS).sum())
    summary = {
        "seed": cfg.stats.seed,
        "n_boot": boot.n_boot,
        "confidence": boot.confidence,
        "assessment": boot.assessment,
        "model_a": boot.model_a,
        "model_b": boot.model_b,
        "n_rows": int(len(df)),
        "n_high": n_high,
        "n_low": int(len(df)) - n_high,
        "n_train": int(len(split.train)),
        "n_test": int(len(split.test)),
        "n_valid": boot.n_valid,
        "n_skipped": boot.n_skipped,
        "lower": boot.lower,
        "median": boot.median,
        "upper": boot.upper,
        "excludes_zero": boot.excludes_zero,
    }
    logger.info("Reference interval: [%.4f, %.4f] (median %.4f)", boot.lower, boot.upper, boot.median)
    return summary
