"""
Configuration management: models, loading, and validation.

Handles:
- RunConfig: Main experiment configuration
- Model blocks: family + hyperparameters bound through a registry
- Environment variable overrides (AUC_REPORT_*)

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import load_run_config, parse_model_block
from infrastructure.config.models import (
    PARAM_MODEL_BY_FAMILY,
    LogisticRegressionParams,
    ModelsConfig,
    ModelSpecConfig,
    RandomForestParams,
    ReportConfig,
    RunConfig,
    SplitConfig,
    StatsConfig,
)

__all__ = [
    # Main config (most commonly used)
    "RunConfig",
    "load_run_config",
    # Sections
    "SplitConfig",
    "StatsConfig",
    "ReportConfig",
    "ModelsConfig",
    # Model blocks
    "ModelSpecConfig",
    "LogisticRegressionParams",
    "RandomForestParams",
    "PARAM_MODEL_BY_FAMILY",
    "parse_model_block",
]
