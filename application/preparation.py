"""Dataset preparation and model specification workflow."""

import hashlib
import logging

import pandas as pd

from domain.data import DataSplit, derive_outcome, split_dataset, validate_records
from domain.modeling import ModelSpec
from infrastructure.config.models import ModelSpecConfig, RunConfig
from infrastructure.io import read_table
from infrastructure.utils import derive_seed

logger = logging.getLogger(__name__)


def prepare_dataset(cfg: RunConfig) -> pd.DataFrame:
    """
    Load the dataset file, validate every record and derive the binary outcome.

    Returns:
        Labelled frame (typed feature columns + 'sales_class'; the sales figure is dropped)
    """
    logger.info("Loading dataset from %s...", cfg.data_file_path)
    raw = read_table(cfg.data_file_path)
    logger.info("Dataset loaded: %d rows, %d columns", raw.shape[0], raw.shape[1])

    records = validate_records(raw)
    labelled = derive_outcome(records, threshold=cfg.outcome_threshold)
    logger.info("Derived outcome with threshold Sales > %.2f", cfg.outcome_threshold)
    return labelled


def split_for_run(cfg: RunConfig, df: pd.DataFrame) -> DataSplit:
    """Train/test split with the run's split settings and a step-specific seed."""
    split = split_dataset(
        df,
        prop=cfg.split.prop,
        stratify=cfg.split.stratify,
        seed=derive_seed(cfg.stats.seed, "split"),
    )
    logger.info(
        "Split: %d training / %d testing rows (prop=%.2f, stratified=%s)",
        len(split.train),
        len(split.test),
        split.prop,
        split.stratified,
    )
    return split


def _to_spec(block: ModelSpecConfig) -> ModelSpec:
    return ModelSpec(name=block.name, family=block.family, params=block.estimator_params())


def make_model_specs(cfg: RunConfig) -> tuple[ModelSpec, ModelSpec]:
    """Return (reference, comparison) model specifications; differences are comparison - reference."""
    reference = _to_spec(cfg.models.reference)
    comparison = _to_spec(cfg.models.comparison)
    logger.info("Model specs: reference=%s %s", reference.name, reference.params)
    logger.info("Model specs: comparison=%s %s", comparison.name, comparison.params)
    return reference, comparison


def data_fingerprint(cfg: RunConfig, df: pd.DataFrame) -> dict[str, object]:
    """Describe the input file and the prepared frame for the run directory."""
    digest = hashlib.sha256(cfg.data_file_path.read_bytes()).hexdigest() if cfg.data_file_path.exists() else None
    return {
        "data_file": str(cfg.data_file_path),
        "sha256": digest,
        "rows": int(len(df)),
        "columns": list(df.columns),
        "outcome_threshold": cfg.outcome_threshold,
    }
