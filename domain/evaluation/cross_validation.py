"""(Repeated) k-fold cross-validation of AUC and paired significance tests on the folds."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy import stats
from sklearn.model_selection import RepeatedKFold, RepeatedStratifiedKFold

from domain.data.labeling import outcome_indicator
from domain.errors import DegenerateSampleError, SchemaMismatchError, TestPreconditionError
from domain.evaluation.auc import rank_auc
from domain.modeling import ESTIMATOR_FAILURES, ModelSpec, fit_model
from domain.schemas import OUTCOME_COL

logger = logging.getLogger(__name__)

FOLD_KEYS = ["repeat", "fold"]
Correction = Literal["none", "nadeau_bengio"]


@dataclass(frozen=True)
class CrossValidationResult:
    """Per-fold AUC for each model; one row per (repeat, fold, model)."""

    folds: int
    repeats: int
    stratified: bool
    fold_metrics: pd.DataFrame
    n_analysis: int
    n_assessment: int

    @property
    def models(self) -> list[str]:
        return list(dict.fromkeys(self.fold_metrics["model"]))

    def summary(self) -> pd.DataFrame:
        """Mean AUC, number of folds and standard error per model."""
        grouped = self.fold_metrics.dropna(subset=["auc"]).groupby("model", sort=False)["auc"]
        out = grouped.agg(mean="mean", n="count", std="std").reset_index()
        out["std_err"] = out["std"] / np.sqrt(out["n"])
        return out.drop(columns=["std"])

    def aligned_aucs(self, model_a: str, model_b: str) -> pd.DataFrame:
        """Per-fold AUCs of two models side by side, keyed by (repeat, fold)."""
        wide = self.fold_metrics.pivot(index=FOLD_KEYS, columns="model", values="auc")
        for name in (model_a, model_b):
            if name not in wide.columns:
                raise KeyError(f"Model '{name}' not found in cross-validation results: {list(wide.columns)}")
        return wide[[model_a, model_b]]


def _evaluate_fold(
    repeat: int,
    fold: int,
    train: pd.DataFrame,
    analysis_idx: np.ndarray,
    assessment_idx: np.ndarray,
    specs: Sequence[ModelSpec],
    random_state: int,
) -> tuple[list[dict[str, object]], list[str]]:
    """
    Score every specification on one fold.

    Returns the per-model rows and the skip messages; logging is left to the parent
    process, since this may run in a joblib worker.
    """
    analysis = train.iloc[analysis_idx]
    assess = train.iloc[assessment_idx]
    y_assess = outcome_indicator(assess).to_numpy()

    rows: list[dict[str, object]] = []
    skips: list[str] = []
    for spec in specs:
        auc = float("nan")
        reason = None
        try:
            fitted = fit_model(spec, analysis, random_state=random_state)
            auc = rank_auc(y_assess, fitted.predict_proba(assess))
        except DegenerateSampleError as e:
            reason = "degenerate"
            skips.append(f"CV repeat {repeat} fold {fold} model {spec.name} skipped ({reason}): {e}")
        except SchemaMismatchError:
            raise
        except ESTIMATOR_FAILURES as e:
            reason = "fit_failed"
            skips.append(
                f"CV repeat {repeat} fold {fold} model {spec.name} skipped ({reason}): {type(e).__name__}: {e}"
            )
        rows.append({"repeat": repeat, "fold": fold, "model": spec.name, "auc": auc, "skip_reason": reason})
    return rows, skips


def cross_validate_auc(
    train: pd.DataFrame,
    specs: Sequence[ModelSpec],
    folds: int = 10,
    repeats: int = 1,
    stratify: bool = True,
    seed: int = 42,
    n_jobs: int = 1,
) -> CrossValidationResult:
    """
    Fit every specification on each analysis fold and record its assessment-fold AUC.

    The fold assignment depends only on seed, so two calls with the same seed see the
    same folds and their per-fold AUCs are paired.

    Args:
        train: Labelled training frame
        specs: Model specifications to evaluate (names must be unique)
        folds: Number of folds per repeat (>= 2)
        repeats: Number of independent fold assignments
        stratify: Preserve class proportions within each fold
        seed: Seed for the fold assignment and the estimators
        n_jobs: Worker count for joblib, one task per fold

    Returns:
        CrossValidationResult (folds whose assessment set is single-class, or whose fit
        failed, get NaN AUC and a skip_reason)
    """
    if folds < 2:
        raise ValueError(f"folds must be >= 2, got {folds}")
    if repeats < 1:
        raise ValueError(f"repeats must be >= 1, got {repeats}")
    names = [s.name for s in specs]
    if len(set(names)) != len(names):
        raise ValueError(f"Model names must be unique, got {names}")

    if stratify:
        splitter = RepeatedStratifiedKFold(n_splits=folds, n_repeats=repeats, random_state=seed)
        plan = list(splitter.split(train, train[OUTCOME_COL]))
    else:
        splitter = RepeatedKFold(n_splits=folds, n_repeats=repeats, random_state=seed)
        plan = list(splitter.split(train))

    logger.info(
        "Cross-validation: %d fold(s) x %d repeat(s), stratified=%s, models=%s",
        folds,
        repeats,
        stratify,
        names,
    )

    per_fold = Parallel(n_jobs=n_jobs)(
        delayed(_evaluate_fold)(i // folds + 1, i % folds + 1, train, a_idx, b_idx, specs, seed)
        for i, (a_idx, b_idx) in enumerate(plan)
    )
    fold_metrics = pd.DataFrame([row for rows, _ in per_fold for row in rows])
    skips = [msg for _, fold_skips in per_fold for msg in fold_skips]
    for msg in skips:
        logger.warning("%s", msg)
    if skips:
        logger.warning("Cross-validation: %d of %d fold fits skipped", len(skips), len(fold_metrics))

    return CrossValidationResult(
        folds=folds,
        repeats=repeats,
        stratified=stratify,
        fold_metrics=fold_metrics,
        n_analysis=len(plan[0][0]),
        n_assessment=len(plan[0][1]),
    )


@dataclass(frozen=True)
class PairedTestResult:
    """Paired t-test on per-fold AUC differences (model_b - model_a)."""

    model_a: str
    model_b: str
    n_pairs: int
    mean_difference: float
    std_difference: float
    t_statistic: float
    df: int
    p_value: float
    ci_lower: float
    ci_upper: float
    alpha: float
    correction: Correction

    def summary(self) -> dict[str, object]:
        return {
            "model_a": self.model_a,
            "model_b": self.model_b,
            "n_pairs": self.n_pairs,
            "mean_difference": self.mean_difference,
            "std_difference": self.std_difference,
            "t_statistic": self.t_statistic,
            "df": self.df,
            "p_value": self.p_value,
            "ci_lower": self.ci_lower,
            "ci_upper": self.ci_upper,
            "alpha": self.alpha,
            "correction": self.correction,
        }


def paired_t_test(
    cv_result: CrossValidationResult,
    model_a: str,
    model_b: str,
    alpha: float = 0.05,
    correction: Correction = "none",
) -> PairedTestResult:
    """
    Paired t-test of the per-fold AUC differences.

    With correction='nadeau_bengio' the variance of the mean difference is inflated by
    (1/k + n_assessment/n_analysis), accounting for the overlap between training folds.

    Raises:
        TestPreconditionError: If the folds of the two models are not aligned
    """
    if correction not in ("none", "nadeau_bengio"):
        raise ValueError(f"Unknown correction: {correction!r}")

    wide = cv_result.aligned_aucs(model_a, model_b)
    if wide.isna().any().any():
        missing = wide[wide.isna().any(axis=1)].index.tolist()
        raise TestPreconditionError(
            f"Paired t-test needs an AUC for both models on every fold; unaligned folds: {missing}"
        )
    if len(wide) < 2:
        raise TestPreconditionError(f"Paired t-test needs at least two folds, got {len(wide)}")

    a = wide[model_a].to_numpy(dtype=float)
    b = wide[model_b].to_numpy(dtype=float)
    d = b - a
    k = d.size
    dof = k - 1
    mean = float(d.mean())
    sd = float(d.std(ddof=1))

    if sd == 0.0:
        # constant differences across folds
        se = 0.0
        t_stat = 0.0 if mean == 0.0 else float(np.copysign(np.inf, mean))
        p_value = 1.0 if mean == 0.0 else 0.0
    elif correction == "none":
        res = stats.ttest_rel(b, a)
        t_stat = float(res.statistic)
        p_value = float(res.pvalue)
        se = sd / np.sqrt(k)
    else:
        ratio = cv_result.n_assessment / cv_result.n_analysis
        se = float(np.sqrt((1.0 / k + ratio) * sd**2))
        t_stat = mean / se
        p_value = float(2.0 * stats.t.sf(abs(t_stat), dof))

    t_crit = float(stats.t.ppf(1.0 - alpha / 2.0, dof))
    return PairedTestResult(
        model_a=model_a,
        model_b=model_b,
        n_pairs=k,
        mean_difference=mean,
        std_difference=sd,
        t_statistic=t_stat,
        df=dof,
        p_value=p_value,
        ci_lower=mean - t_crit * se,
        ci_upper=mean + t_crit * se,
        alpha=alpha,
        correction=correction,
    )
