import importlib
import itertools
import logging

import numpy as np
import pandas as pd
import pytest

from domain.data import split_dataset
from domain.evaluation import bootstrap_auc_difference, bootstrap_ci, rank_auc
from domain.modeling import ModelFamily, ModelSpec


def _small_rf() -> ModelSpec:
    return ModelSpec(
        name="small_forest",
        family=ModelFamily.RANDOM_FOREST,
        params={"n_estimators": 10, "max_depth": 3, "n_jobs": 1},
    )


def test_difference_count_and_percentile_order(labelled_frame: pd.DataFrame, lr_spec, rf_spec) -> None:
    res = bootstrap_auc_difference(labelled_frame, lr_spec, rf_spec, n_boot=12, seed=4)

    assert res.differences.size == res.n_boot - res.n_skipped
    assert res.n_valid == res.differences.size
    assert res.lower <= res.median <= res.upper
    np.testing.assert_allclose(res.differences, res.auc_b - res.auc_a)
    assert ((res.auc_a >= 0) & (res.auc_a <= 1)).all()
    assert list(res.to_frame().columns) == ["auc_logistic_regression", "auc_random_forest", "difference"]


def test_same_seed_reproduces_identical_differences(labelled_frame: pd.DataFrame, lr_spec, rf_spec) -> None:
    first = bootstrap_auc_difference(labelled_frame, lr_spec, rf_spec, n_boot=8, seed=9)
    second = bootstrap_auc_difference(labelled_frame, lr_spec, rf_spec, n_boot=8, seed=9)

    assert np.array_equal(first.differences, second.differences)
    assert (first.lower, first.median, first.upper) == (second.lower, second.median, second.upper)


def test_results_do_not_depend_on_worker_count(labelled_frame: pd.DataFrame, lr_spec, rf_spec) -> None:
    serial = bootstrap_auc_difference(labelled_frame, lr_spec, rf_spec, n_boot=6, seed=2, n_jobs=1)
    parallel = bootstrap_auc_difference(labelled_frame, lr_spec, rf_spec, n_boot=6, seed=2, n_jobs=2)

    assert np.array_equal(serial.differences, parallel.differences)


def test_degenerate_repetitions_are_skipped_and_counted(make_frame, lr_spec) -> None:
    frame = make_frame(n=60, seed=5)
    # two positives: a repetition is usable only when exactly one of them is drawn
    positives = frame.index[frame["sales_class"] == "high"][:2]
    negatives = frame.index[frame["sales_class"] == "low"][:8]
    tiny = frame.loc[positives.append(negatives)]

    res = bootstrap_auc_difference(tiny, lr_spec, _small_rf(), n_boot=40, seed=0)

    assert res.n_skipped > 0
    assert res.n_valid > 0
    assert res.n_valid + res.n_skipped == 40
    assert sum(res.skip_reasons.values()) == res.n_skipped
    assert set(res.skip_reasons) <= {"degenerate_analysis", "degenerate_assessment", "empty_assessment"}


def test_all_degenerate_repetitions_raise(make_frame, lr_spec) -> None:
    frame = make_frame(n=60, seed=5)
    positive = frame.index[frame["sales_class"] == "high"][:1]
    negatives = frame.index[frame["sales_class"] == "low"][:7]
    tiny = frame.loc[positive.append(negatives)]

    with pytest.raises(ValueError, match="degenerate"):
        bootstrap_auc_difference(tiny, lr_spec, _small_rf(), n_boot=5, seed=0)


@pytest.mark.parametrize("n_boot", [0, -3, 2.5, True])
def test_invalid_repetition_count_is_rejected(labelled_frame: pd.DataFrame, lr_spec, rf_spec, n_boot) -> None:
    with pytest.raises(ValueError, match="n_boot"):
        bootstrap_auc_difference(labelled_frame, lr_spec, rf_spec, n_boot=n_boot)


def test_holdout_assessment_requires_a_frame(labelled_frame: pd.DataFrame, lr_spec, rf_spec) -> None:
    with pytest.raises(ValueError, match="holdout"):
        bootstrap_auc_difference(labelled_frame, lr_spec, rf_spec, n_boot=3, assessment="holdout")


def test_holdout_assessment_scores_the_fixed_test_set(labelled_frame: pd.DataFrame, lr_spec) -> None:
    split = split_dataset(labelled_frame, prop=0.75, stratify=True, seed=1)

    res = bootstrap_auc_difference(
        split.train, lr_spec, _small_rf(), n_boot=6, seed=1, assessment="holdout", holdout=split.test
    )

    assert res.assessment == "holdout"
    assert res.n_skipped == 0
    assert res.n_valid == 6


def test_more_repetitions_stabilise_the_median(make_frame, lr_spec) -> None:
    frame = make_frame(n=120, seed=8)
    spec_b = _small_rf()

    def medians(n_boot: int) -> np.ndarray:
        return np.array(
            [bootstrap_auc_difference(frame, lr_spec, spec_b, n_boot=n_boot, seed=s).median for s in range(6)]
        )

    assert np.std(medians(128)) < np.std(medians(8))


def test_xor_signal_gives_interval_above_zero(xor_frame: pd.DataFrame, lr_spec, rf_spec) -> None:
    res = bootstrap_auc_difference(xor_frame, lr_spec, rf_spec, n_boot=20, seed=3)

    assert res.lower > 0.0
    assert res.excludes_zero


def test_bootstrap_ci_brackets_the_point_estimate() -> None:
    rng = np.random.default_rng(0)
    y = rng.integers(0, 2, size=200)
    s = rng.random(200) + 0.6 * y

    lower, upper = bootstrap_ci(y, s, rank_auc, n_boot=300, alpha=0.05, seed=0)

    assert lower < rank_auc(y, s) < upper


def test_bootstrap_ci_is_nan_when_every_resample_is_degenerate() -> None:
    lower, upper = bootstrap_ci(np.ones(4, dtype=int), np.linspace(0, 1, 4), rank_auc, n_boot=10, alpha=0.05, seed=0)

    assert np.isnan(lower) and np.isnan(upper)


def _fit_failing_on_call(monkeypatch: pytest.MonkeyPatch, module_name: str, failing_call: int) -> None:
    module = importlib.import_module(module_name)
    real_fit = module.fit_model
    calls = itertools.count(1)

    def flaky_fit(spec, frame, random_state=None):
        if next(calls) == failing_call:
            raise FloatingPointError("overflow encountered in exp")
        return real_fit(spec, frame, random_state=random_state)

    monkeypatch.setattr(module, "fit_model", flaky_fit)


def test_failed_fit_is_skipped_and_counted(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture, labelled_frame: pd.DataFrame, lr_spec
) -> None:
    _fit_failing_on_call(monkeypatch, "domain.evaluation.bootstrap", failing_call=3)

    with caplog.at_level(logging.WARNING, logger="domain.evaluation.bootstrap"):
        res = bootstrap_auc_difference(labelled_frame, lr_spec, _small_rf(), n_boot=5, seed=6, n_jobs=1)

    assert res.n_valid + res.n_skipped == 5
    assert res.skip_reasons.get("fit_failed") == 1
    assert "FloatingPointError" in caplog.text
