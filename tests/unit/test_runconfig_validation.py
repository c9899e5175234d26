from pathlib import Path

import pytest
from pydantic import ValidationError

from domain.modeling import ModelFamily
from infrastructure.config import load_run_config
from infrastructure.config.models import (
    LogisticRegressionParams,
    ModelsConfig,
    ModelSpecConfig,
    RandomForestParams,
    RunConfig,
)

EXPERIMENT_YAML = """
data_dir: data
data_file: stores.csv
outcome_threshold: 8
split:
  prop: 0.7
models:
  reference:
    name: glm
    family: logistic_regression
    params:
      C: 100
  comparison:
    family: random_forest
    params:
      n_estimators: 50
      max_features: sqrt
stats:
  seed: 7
  n_boot: 100
  bootstrap_assessment: holdout
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "experiment.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_loader_binds_model_params_by_family(tmp_path: Path) -> None:
    cfg = load_run_config(_write(tmp_path, EXPERIMENT_YAML), environ={})

    assert cfg.data_file_path == Path("data") / "stores.csv"
    assert cfg.split.prop == 0.7
    assert cfg.models.reference.name == "glm"
    assert isinstance(cfg.models.reference.params, LogisticRegressionParams)
    assert cfg.models.reference.params.C == 100
    assert cfg.models.comparison.name == "random_forest"
    assert isinstance(cfg.models.comparison.params, RandomForestParams)
    assert cfg.models.comparison.estimator_params()["n_estimators"] == 50
    assert cfg.stats.bootstrap_assessment == "holdout"
    assert cfg.stats.confidence == pytest.approx(0.95)


def test_environment_overrides_take_precedence(tmp_path: Path) -> None:
    env = {
        "AUC_REPORT_SEED": "123",
        "AUC_REPORT_N_JOBS": "-1",
        "AUC_REPORT_DATA_FILE": "other.xlsx",
        "AUC_REPORT_N_BOOT": " ",
    }

    cfg = load_run_config(_write(tmp_path, EXPERIMENT_YAML), environ=env)

    assert cfg.stats.seed == 123
    assert cfg.stats.n_jobs == -1
    assert cfg.stats.n_boot == 100
    assert cfg.data_file_path == Path("data") / "other.xlsx"


def test_empty_experiment_file_uses_defaults(tmp_path: Path) -> None:
    cfg = load_run_config(_write(tmp_path, ""), environ={})

    assert cfg.outcome_threshold == 8.0
    assert cfg.split.stratify is True
    assert cfg.models.reference.family is ModelFamily.LOGISTIC_REGRESSION
    assert cfg.models.comparison.family is ModelFamily.RANDOM_FOREST
    assert cfg.stats.n_boot == 500
    assert cfg.stats.bootstrap_assessment == "oob"


def test_unknown_family_is_rejected(tmp_path: Path) -> None:
    text = "models:\n  reference:\n    family: svm\n"

    with pytest.raises(ValueError, match="Unknown model family"):
        load_run_config(_write(tmp_path, text), environ={})


def test_unknown_model_role_is_rejected(tmp_path: Path) -> None:
    text = "models:\n  challenger:\n    family: random_forest\n"

    with pytest.raises(ValueError, match="challenger"):
        load_run_config(_write(tmp_path, text), environ={})


def test_params_of_another_family_are_rejected() -> None:
    with pytest.raises(ValidationError, match="RandomForestParams"):
        RunConfig(
            models=ModelsConfig(
                comparison=ModelSpecConfig(
                    name="forest",
                    family=ModelFamily.RANDOM_FOREST,
                    params=LogisticRegressionParams(),
                ),
            ),
        )


def test_model_names_must_differ() -> None:
    with pytest.raises(ValidationError, match="distinct names"):
        RunConfig(
            models=ModelsConfig(
                comparison=ModelSpecConfig(
                    name="logistic_regression",
                    family=ModelFamily.RANDOM_FOREST,
                    params=RandomForestParams(),
                ),
            ),
        )


def test_unknown_hyperparameter_is_rejected(tmp_path: Path) -> None:
    text = "models:\n  comparison:\n    family: random_forest\n    params:\n      trees: 10\n"

    with pytest.raises(ValidationError):
        load_run_config(_write(tmp_path, text), environ={})
