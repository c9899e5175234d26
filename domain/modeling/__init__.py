"""
Model specifications and fitted models.

A ModelSpec is an immutable description of an estimator; fit_model binds it to
training data and returns a FittedModel that scores new store records.
"""

from domain.modeling.fitted import ESTIMATOR_FAILURES, FittedModel, feature_importance, fit_model
from domain.modeling.specs import ModelFamily, ModelSpec, build_estimator

__all__ = [
    "ModelFamily",
    "ModelSpec",
    "build_estimator",
    "FittedModel",
    "fit_model",
    "feature_importance",
    "ESTIMATOR_FAILURES",
]
