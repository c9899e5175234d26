"""Configuration loading from YAML files and environment overrides."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from domain.modeling.specs import ModelFamily
from infrastructure.config.models import (
    PARAM_MODEL_BY_FAMILY,
    ModelsConfig,
    ModelSpecConfig,
    ReportConfig,
    RunConfig,
    SplitConfig,
    StatsConfig,
)
from infrastructure.constants import DATA_DIR, DATA_FILE, ENV_PREFIX

logger = logging.getLogger(__name__)

# env suffix -> (section, key); section None means a top-level experiment key
_ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "SEED": ("stats", "seed"),
    "N_JOBS": ("stats", "n_jobs"),
    "N_BOOT": ("stats", "n_boot"),
    "DATA_FILE": (None, "data_file"),
    "OUTPUT_ROOT": (None, "output_root"),
}


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def _apply_env_overrides(exp: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Overlay AUC_REPORT_* environment variables on the parsed experiment dict.

    Values are kept as strings; pydantic coerces them when the config is built.
    """
    env = os.environ if environ is None else environ
    out = dict(exp)
    for suffix, (section, key) in _ENV_OVERRIDES.items():
        value = env.get(f"{ENV_PREFIX}{suffix}")
        if value is None or not value.strip():
            continue
        if section is None:
            out[key] = value.strip()
        else:
            block = dict(out.get(section) or {})
            block[key] = value.strip()
            out[section] = block
        logger.debug("Config override from environment: %s%s=%s", ENV_PREFIX, suffix, value.strip())
    return out


def parse_model_block(block: dict[str, Any], default_name: str) -> ModelSpecConfig:
    """
    Bind one models.<role> mapping to a ModelSpecConfig using the family registry.

    Raises:
        ValueError: If the family is unknown or has no params model registered
    """
    if not isinstance(block, dict):
        raise ValueError(f"Model block '{default_name}' must be a mapping, got {type(block)}")
    if "family" not in block:
        raise ValueError(f"Model block '{default_name}' missing required key: family")

    try:
        family = ModelFamily(str(block["family"]).strip().lower())
    except ValueError as e:
        known = [f.value for f in ModelFamily]
        raise ValueError(f"Unknown model family {block['family']!r} in '{default_name}'. Known: {known}") from e

    param_model_cls = PARAM_MODEL_BY_FAMILY.get(family)
    if param_model_cls is None:
        raise ValueError(f"No param model registered for model family: {family.value}")

    params = param_model_cls(**(block.get("params") or {}))
    return ModelSpecConfig(name=str(block.get("name") or family.value), family=family, params=params)


def load_run_config(experiment_path: Path, environ: dict[str, str] | None = None) -> RunConfig:
    """
    Load experiment.yaml, apply environment overrides and build a validated RunConfig.

    Args:
        experiment_path: Path to experiment.yaml
        environ: Environment mapping (defaults to os.environ)

    Returns:
        RunConfig with resolved paths and bound model params
    """
    exp = _apply_env_overrides(_load_yaml(experiment_path), environ)

    data_dir = Path(exp.get("data_dir", str(DATA_DIR)))
    data_file = exp.get("data_file") or DATA_FILE

    models_raw = exp.get("models") or {}
    if not isinstance(models_raw, dict):
        raise ValueError(f"'models' must be a mapping in {experiment_path}")
    models = ModelsConfig(
        **{
            role: parse_model_block(block, default_name=role)
            for role, block in models_raw.items()
            if role in ("reference", "comparison")
        }
    )
    unknown_roles = set(models_raw) - {"reference", "comparison"}
    if unknown_roles:
        raise ValueError(f"Unknown model role(s) {sorted(unknown_roles)}; expected 'reference' and 'comparison'")

    kwargs: dict[str, Any] = {}
    if "outcome_threshold" in exp:
        kwargs["outcome_threshold"] = exp["outcome_threshold"]
    if exp.get("output_root"):
        kwargs["output_root"] = Path(exp["output_root"])

    cfg = RunConfig(
        data_file_path=data_dir / data_file,
        split=SplitConfig(**(exp.get("split") or {})),
        models=models,
        stats=StatsConfig(**(exp.get("stats") or {})),
        report=ReportConfig(**(exp.get("report") or {})),
        **kwargs,
    )

    return cfg
