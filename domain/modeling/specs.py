"""Immutable model specifications and their scikit-learn pipelines."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from domain.schemas import CATEGORICAL_FEATURES, NUMERIC_FEATURES, SHELVE_LOC_LEVELS, YES_NO_LEVELS


class ModelFamily(str, Enum):
    """Supported estimator families."""

    LOGISTIC_REGRESSION = "logistic_regression"
    RANDOM_FOREST = "random_forest"


# Family -> scikit-learn estimator class
# Add future families here
ESTIMATOR_BY_FAMILY: dict[ModelFamily, type[Any]] = {
    ModelFamily.LOGISTIC_REGRESSION: LogisticRegression,
    ModelFamily.RANDOM_FOREST: RandomForestClassifier,
}

# Level order for each categorical feature, matching CATEGORICAL_FEATURES
_CATEGORY_LEVELS = [SHELVE_LOC_LEVELS, YES_NO_LEVELS, YES_NO_LEVELS]


class ModelSpec(BaseModel):
    """Declarative estimator description: family, hyperparameters, engine and mode."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name used in tables and plots.")
    family: ModelFamily
    params: dict[str, Any] = Field(default_factory=dict, description="Estimator hyperparameters.")
    engine: Literal["sklearn"] = "sklearn"
    mode: Literal["classification"] = "classification"


def _make_preprocessor(family: ModelFamily) -> ColumnTransformer:
    """
    One-hot encode categorical fields and scale numeric fields.

    Logistic regression gets reference-level (drop first) dummies so the design
    matrix has full rank; tree ensembles keep every level.
    """
    linear = family is ModelFamily.LOGISTIC_REGRESSION
    return ColumnTransformer(
        [
            ("num", StandardScaler(), NUMERIC_FEATURES),
            (
                "cat",
                OneHotEncoder(
                    categories=_CATEGORY_LEVELS,
                    drop="first" if linear else None,
                    sparse_output=False,
                ),
                CATEGORICAL_FEATURES,
            ),
        ]
    )


def build_estimator(spec: ModelSpec, random_state: int | None = None) -> Pipeline:
    """
    Build an unfitted pipeline for a model specification.

    Args:
        spec: Model specification
        random_state: Seed forwarded to the estimator (ignored by deterministic solvers)

    Returns:
        Pipeline with 'pre' (ColumnTransformer) and 'model' steps
    """
    estimator_cls = ESTIMATOR_BY_FAMILY.get(spec.family)
    if estimator_cls is None:
        raise ValueError(f"No estimator registered for model family: {spec.family.value}")

    estimator = estimator_cls(**spec.params, random_state=random_state)
    return Pipeline([("pre", _make_preprocessor(spec.family)), ("model", estimator)])
