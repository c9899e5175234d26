import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from domain.errors import DegenerateSampleError, SchemaMismatchError
from domain.modeling import ModelFamily, ModelSpec, build_estimator, feature_importance, fit_model


def test_model_spec_is_immutable(lr_spec: ModelSpec) -> None:
    assert lr_spec.engine == "sklearn"
    assert lr_spec.mode == "classification"
    with pytest.raises(ValidationError):
        lr_spec.name = "other"


def test_build_estimator_returns_preprocessing_pipeline(rf_spec: ModelSpec) -> None:
    pipe = build_estimator(rf_spec, random_state=7)

    assert list(pipe.named_steps) == ["pre", "model"]
    assert pipe.named_steps["model"].random_state == 7
    assert pipe.named_steps["model"].n_estimators == 25


def test_fitted_model_returns_probabilities(labelled_frame: pd.DataFrame, lr_spec: ModelSpec) -> None:
    fitted = fit_model(lr_spec, labelled_frame, random_state=0)

    proba = fitted.predict_proba(labelled_frame)

    assert proba.shape == (len(labelled_frame),)
    assert ((proba >= 0) & (proba <= 1)).all()
    assert fitted.n_train == len(labelled_frame)


def test_single_class_frame_is_degenerate(labelled_frame: pd.DataFrame, rf_spec: ModelSpec) -> None:
    only_low = labelled_frame[labelled_frame["sales_class"] == "low"]

    with pytest.raises(DegenerateSampleError):
        fit_model(rf_spec, only_low)


def test_prediction_input_must_match_schema(labelled_frame: pd.DataFrame, lr_spec: ModelSpec) -> None:
    fitted = fit_model(lr_spec, labelled_frame, random_state=0)

    with pytest.raises(SchemaMismatchError, match="price"):
        fitted.predict_proba(labelled_frame.drop(columns=["price"]))


@pytest.mark.parametrize(
    ("family", "params", "n_features"),
    [
        (ModelFamily.LOGISTIC_REGRESSION, {"max_iter": 1000}, 11),
        (ModelFamily.RANDOM_FOREST, {"n_estimators": 10}, 14),
    ],
)
def test_feature_importance_covers_encoded_features(
    labelled_frame: pd.DataFrame,
    family: ModelFamily,
    params: dict,
    n_features: int,
) -> None:
    spec = ModelSpec(name=family.value, family=family, params=params)
    importance = feature_importance(fit_model(spec, labelled_frame, random_state=0))

    assert len(importance) == n_features
    assert list(importance.columns) == ["feature", "importance", "sign"]
    assert np.all(np.diff(importance["importance"].to_numpy()) <= 0)
    assert "price" in set(importance["feature"])
