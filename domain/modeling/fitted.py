"""Fitting model specifications and scoring new records."""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.pipeline import Pipeline

from domain.data.labeling import outcome_indicator
from domain.errors import DegenerateSampleError, SchemaMismatchError
from domain.modeling.specs import ModelFamily, ModelSpec, build_estimator
from domain.schemas import FEATURE_COLUMNS, OUTCOME_COL

logger = logging.getLogger(__name__)

# Exceptions an estimator may raise on an unlucky resample (solver breakdown, overflow).
# DegenerateSampleError and SchemaMismatchError are ValueErrors too; callers handle them first.
ESTIMATOR_FAILURES: tuple[type[Exception], ...] = (ValueError, FloatingPointError, np.linalg.LinAlgError)


def _check_features(frame: pd.DataFrame, required: tuple[str, ...]) -> None:
    missing = [c for c in required if c not in frame.columns]
    if missing:
        raise SchemaMismatchError(f"Input is missing feature columns {missing}; got {list(frame.columns)}")


@dataclass(frozen=True)
class FittedModel:
    """A pipeline trained on one specific training subset."""

    spec: ModelSpec
    pipeline: Pipeline
    feature_columns: tuple[str, ...]
    n_train: int

    @property
    def name(self) -> str:
        return self.spec.name

    def predict_proba(self, frame: pd.DataFrame) -> np.ndarray:
        """Return the predicted probability of the positive ('high') class for each row."""
        _check_features(frame, self.feature_columns)
        proba = self.pipeline.predict_proba(frame[list(self.feature_columns)])
        positive_idx = list(self.pipeline.classes_).index(1)
        return proba[:, positive_idx]


def fit_model(spec: ModelSpec, frame: pd.DataFrame, random_state: int | None = None) -> FittedModel:
    """
    Fit a model specification on a labelled frame.

    Raises:
        DegenerateSampleError: If the frame holds a single outcome class
        SchemaMismatchError: If feature or outcome columns are missing
    """
    _check_features(frame, tuple(FEATURE_COLUMNS))
    if OUTCOME_COL not in frame.columns:
        raise SchemaMismatchError(f"Training frame is missing outcome column '{OUTCOME_COL}'")

    y = outcome_indicator(frame)
    if y.nunique() < 2:
        raise DegenerateSampleError(
            f"Degenerate sample: cannot fit '{spec.name}' on {len(frame)} rows with a single outcome class"
        )

    pipeline = build_estimator(spec, random_state=random_state)
    pipeline.fit(frame[FEATURE_COLUMNS], y)
    return FittedModel(spec=spec, pipeline=pipeline, feature_columns=tuple(FEATURE_COLUMNS), n_train=len(frame))


def feature_importance(fitted: FittedModel) -> pd.DataFrame:
    """
    Variable importance of a fitted model, sorted from most to least important.

    Random forests report impurity-based importance; logistic regression reports the
    absolute coefficient on the standardized design matrix (sign kept separately).
    """
    names = [n.split("__", 1)[-1] for n in fitted.pipeline.named_steps["pre"].get_feature_names_out()]
    estimator = fitted.pipeline.named_steps["model"]

    if fitted.spec.family is ModelFamily.RANDOM_FOREST:
        values = np.asarray(estimator.feature_importances_, dtype=float)
        sign = np.ones_like(values)
    else:
        coef = np.asarray(estimator.coef_, dtype=float).reshape(-1)
        values = np.abs(coef)
        sign = np.sign(coef)

    out = pd.DataFrame({"feature": names, "importance": values, "sign": sign.astype(int)})
    return out.sort_values("importance", ascending=False).reset_index(drop=True)
