"""Configuration models (Pydantic classes)."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from domain.modeling.specs import ModelFamily
from infrastructure.constants import DATA_DIR, DATA_FILE


class LogisticRegressionParams(BaseModel):
    """Logistic regression hyperparameters (scikit-learn names)."""

    model_config = ConfigDict(extra="forbid")

    # large C approximates the unpenalized GLM fit
    C: float = Field(default=1e4, gt=0)
    max_iter: int = Field(default=1000, ge=1)
    solver: str = "lbfgs"


class RandomForestParams(BaseModel):
    """Random forest hyperparameters (scikit-learn names)."""

    model_config = ConfigDict(extra="forbid")

    n_estimators: int = Field(default=500, ge=1)
    max_features: int | float | str | None = "sqrt"
    min_samples_leaf: int = Field(default=1, ge=1)
    max_depth: int | None = None
    n_jobs: int | None = 1


# Model family -> params config model
# Add future families here
PARAM_MODEL_BY_FAMILY: dict[ModelFamily, type[BaseModel]] = {
    ModelFamily.LOGISTIC_REGRESSION: LogisticRegressionParams,
    ModelFamily.RANDOM_FOREST: RandomForestParams,
}


class ModelSpecConfig(BaseModel):
    """One model block of experiment.yaml with family-specific params bound by the loader."""

    name: str
    family: ModelFamily
    params: LogisticRegressionParams | RandomForestParams

    def estimator_params(self) -> dict[str, Any]:
        return self.params.model_dump()


def _default_reference() -> ModelSpecConfig:
    return ModelSpecConfig(
        name="logistic_regression",
        family=ModelFamily.LOGISTIC_REGRESSION,
        params=LogisticRegressionParams(),
    )


def _default_comparison() -> ModelSpecConfig:
    return ModelSpecConfig(
        name="random_forest",
        family=ModelFamily.RANDOM_FOREST,
        params=RandomForestParams(),
    )


class ModelsConfig(BaseModel):
    """
    The two models under comparison.

    Differences are always reported as comparison - reference.
    """

    reference: ModelSpecConfig = Field(default_factory=_default_reference)
    comparison: ModelSpecConfig = Field(default_factory=_default_comparison)


class SplitConfig(BaseModel):
    """Train/test split settings."""

    prop: float = Field(default=0.75, gt=0, lt=1, description="Fraction of rows used for training.")
    stratify: bool = True


class StatsConfig(BaseModel):
    """
    Configuration for resampling and significance testing.

    Defaults match the reference analysis.
    """

    seed: int = 42
    alpha: float = Field(default=0.05, gt=0, lt=1)
    n_boot: int = Field(default=500, ge=1, description="Bootstrap repetitions for the AUC difference.")
    bootstrap_assessment: Literal["oob", "holdout"] = "oob"
    metric_ci_n_boot: int = Field(default=2000, ge=1, description="Resamples for per-model holdout AUC CIs.")
    cv_folds: int = Field(default=10, ge=2)
    cv_repeats: int = Field(default=5, ge=1)
    cv_correction: Literal["none", "nadeau_bengio"] = "none"
    n_jobs: int = Field(default=1, description="joblib workers for resampling (-1 = all cores).")

    @property
    def confidence(self) -> float:
        return 1.0 - self.alpha


class ReportConfig(BaseModel):
    """Rendered report settings."""

    title: str = "Comparing logistic regression and random forest AUC"
    make_plots: bool = True
    dpi: int = Field(default=120, ge=50)
    classification_threshold: float = Field(default=0.5, gt=0, lt=1)


class RunConfig(BaseModel):
    """
    Runtime configuration.
    - Loaded from experiment.yaml
    - Validated and enriched by configuration loader
    - Consumed by the evaluation workflows and the report renderer
    """

    data_file_path: Path = Field(
        default_factory=lambda: DATA_DIR / DATA_FILE,
        description="Path to the store dataset file (Excel or CSV).",
    )
    outcome_threshold: float = Field(
        default=8.0,
        description="Stores with Sales strictly above this value are labelled 'high'.",
    )

    split: SplitConfig = Field(default_factory=SplitConfig)
    models: ModelsConfig = Field(default_factory=ModelsConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    output_root: Path = Field(default_factory=lambda: Path("outputs"))

    @model_validator(mode="after")
    def _validate(self) -> "RunConfig":
        if self.models.reference.name == self.models.comparison.name:
            raise ValueError(
                f"models.reference and models.comparison need distinct names, both are '{self.models.reference.name}'"
            )

        for block in (self.models.reference, self.models.comparison):
            expected = PARAM_MODEL_BY_FAMILY[block.family]
            if not isinstance(block.params, expected):
                raise ValueError(
                    f"Model '{block.name}' ({block.family.value}) needs {expected.__name__}, "
                    f"got {type(block.params).__name__}"
                )

        return self
