"""Bootstrap estimation of AUC differences and percentile confidence intervals."""

import logging
import warnings
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.exceptions import UndefinedMetricWarning

from domain.data.labeling import outcome_indicator
from domain.errors import DegenerateSampleError, SchemaMismatchError
from domain.evaluation.auc import rank_auc
from domain.modeling import ESTIMATOR_FAILURES, ModelSpec, fit_model

logger = logging.getLogger(__name__)

AssessmentMode = Literal["oob", "holdout"]

_MAX_SEED = 2**31 - 1

# skip reasons caused by the estimator rather than by the resample
_FAILURE_REASONS = ("fit_failed", "predict_failed")


@dataclass(frozen=True)
class _Repetition:
    index: int
    auc_a: float = float("nan")
    auc_b: float = float("nan")
    skip_reason: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.skip_reason is None


@dataclass(frozen=True)
class BootstrapResult:
    """Empirical distribution of AUC(model_b) - AUC(model_a) over bootstrap repetitions."""

    model_a: str
    model_b: str
    n_boot: int
    confidence: float
    assessment: AssessmentMode
    differences: np.ndarray
    auc_a: np.ndarray
    auc_b: np.ndarray
    lower: float
    median: float
    upper: float
    n_skipped: int
    skip_reasons: dict[str, int] = field(default_factory=dict)

    @property
    def n_valid(self) -> int:
        return int(self.differences.size)

    @property
    def excludes_zero(self) -> bool:
        return self.lower > 0.0 or self.upper < 0.0

    def to_frame(self) -> pd.DataFrame:
        """Per-repetition AUCs and differences for the valid repetitions."""
        return pd.DataFrame(
            {
                f"auc_{self.model_a}": self.auc_a,
                f"auc_{self.model_b}": self.auc_b,
                "difference": self.differences,
            }
        )

    def summary(self) -> dict[str, object]:
        return {
            "model_a": self.model_a,
            "model_b": self.model_b,
            "n_boot": self.n_boot,
            "n_valid": self.n_valid,
            "n_skipped": self.n_skipped,
            "skip_reasons": dict(self.skip_reasons),
            "assessment": self.assessment,
            "confidence": self.confidence,
            "mean_difference": float(np.mean(self.differences)),
            "ci_lower": self.lower,
            "ci_median": self.median,
            "ci_upper": self.upper,
            "excludes_zero": self.excludes_zero,
        }


def _skipped(index: int, reason: str, exc: Exception) -> _Repetition:
    return _Repetition(index=index, skip_reason=reason, detail=f"{type(exc).__name__}: {exc}")


def _run_repetition(
    index: int,
    seed_seq: np.random.SeedSequence,
    train: pd.DataFrame,
    spec_a: ModelSpec,
    spec_b: ModelSpec,
    assessment: AssessmentMode,
    holdout: pd.DataFrame | None,
) -> _Repetition:
    """
    Resample, fit both models and score them.

    Single-class samples and estimator failures become a skip reason; the parent
    process logs them, since this may run in a joblib worker.
    """
    rng = np.random.default_rng(seed_seq)
    n = len(train)
    drawn = rng.integers(0, n, size=n)
    model_seed = int(rng.integers(0, _MAX_SEED))

    analysis = train.iloc[drawn]
    if assessment == "oob":
        oob_mask = np.ones(n, dtype=bool)
        oob_mask[drawn] = False
        assess = train.iloc[np.flatnonzero(oob_mask)]
    else:
        assess = holdout

    if assess is None or len(assess) == 0:
        return _Repetition(index=index, skip_reason="empty_assessment")

    try:
        fitted_a = fit_model(spec_a, analysis, random_state=model_seed)
        fitted_b = fit_model(spec_b, analysis, random_state=model_seed)
    except DegenerateSampleError as e:
        return _skipped(index, "degenerate_analysis", e)
    except SchemaMismatchError:
        raise
    except ESTIMATOR_FAILURES as e:
        return _skipped(index, "fit_failed", e)

    y_assess = outcome_indicator(assess).to_numpy()
    try:
        auc_a = rank_auc(y_assess, fitted_a.predict_proba(assess))
        auc_b = rank_auc(y_assess, fitted_b.predict_proba(assess))
    except DegenerateSampleError as e:
        return _skipped(index, "degenerate_assessment", e)
    except SchemaMismatchError:
        raise
    except ESTIMATOR_FAILURES as e:
        return _skipped(index, "predict_failed", e)

    return _Repetition(index=index, auc_a=auc_a, auc_b=auc_b)


def bootstrap_auc_difference(
    train: pd.DataFrame,
    spec_a: ModelSpec,
    spec_b: ModelSpec,
    n_boot: int,
    confidence: float = 0.95,
    seed: int = 42,
    assessment: AssessmentMode = "oob",
    holdout: pd.DataFrame | None = None,
    n_jobs: int = 1,
) -> BootstrapResult:
    """
    Bootstrap distribution of AUC(spec_b) - AUC(spec_a) with a percentile interval.

    Each repetition draws len(train) rows with replacement, fits both specifications
    on that analysis sample and scores them on the assessment sample: the out-of-bag
    rows (assessment="oob") or a fixed holdout frame (assessment="holdout").
    Every repetition gets its own child seed spawned from SeedSequence(seed), so the
    output does not depend on n_jobs or on evaluation order.

    Args:
        train: Labelled training frame
        spec_a: Reference model specification
        spec_b: Comparison model specification
        n_boot: Number of repetitions (positive integer)
        confidence: Interval coverage, e.g. 0.95 for the 2.5th/97.5th percentiles
        seed: Root random seed
        assessment: 'oob' or 'holdout'
        holdout: Assessment frame, required when assessment='holdout'
        n_jobs: Worker count for joblib (1 runs in-process)

    Returns:
        BootstrapResult; repetitions with a single-class sample or a failed fit are
        skipped and counted by reason

    Raises:
        ValueError: On invalid arguments or when no repetition is usable
        SchemaMismatchError: If the frames do not carry the model features
    """
    if isinstance(n_boot, bool) or not isinstance(n_boot, (int, np.integer)) or n_boot < 1:
        raise ValueError(f"n_boot must be a positive integer, got {n_boot!r}")
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    if assessment not in ("oob", "holdout"):
        raise ValueError(f"assessment must be 'oob' or 'holdout', got {assessment!r}")
    if assessment == "holdout" and holdout is None:
        raise ValueError("assessment='holdout' requires a holdout frame")

    children = np.random.SeedSequence(seed).spawn(int(n_boot))
    logger.info(
        "Bootstrap: %d repetitions (%s vs %s, assessment=%s, n_jobs=%d)",
        n_boot,
        spec_b.name,
        spec_a.name,
        assessment,
        n_jobs,
    )

    reps: list[_Repetition] = Parallel(n_jobs=n_jobs)(
        delayed(_run_repetition)(i, child, train, spec_a, spec_b, assessment, holdout)
        for i, child in enumerate(children)
    )
    reps.sort(key=lambda r: r.index)

    valid = [r for r in reps if r.ok]
    skipped = [r for r in reps if not r.ok]
    for rep in skipped:
        level = logging.WARNING if rep.skip_reason in _FAILURE_REASONS else logging.DEBUG
        logger.log(level, "Bootstrap repetition %d skipped (%s): %s", rep.index, rep.skip_reason, rep.detail or "-")
    skip_reasons = Counter(r.skip_reason for r in skipped)
    n_skipped = len(skipped)
    if n_skipped:
        logger.warning("Bootstrap: skipped %d/%d repetitions %s", n_skipped, n_boot, dict(skip_reasons))
    if not valid:
        raise ValueError(
            f"All {n_boot} bootstrap repetitions were degenerate or failed; no AUC difference could be estimated"
        )

    auc_a = np.array([r.auc_a for r in valid], dtype=float)
    auc_b = np.array([r.auc_b for r in valid], dtype=float)
    diffs = auc_b - auc_a

    tail = 100.0 * (1.0 - confidence) / 2.0
    lower, median, upper = np.percentile(diffs, [tail, 50.0, 100.0 - tail], method="linear")

    return BootstrapResult(
        model_a=spec_a.name,
        model_b=spec_b.name,
        n_boot=int(n_boot),
        confidence=confidence,
        assessment=assessment,
        differences=diffs,
        auc_a=auc_a,
        auc_b=auc_b,
        lower=float(lower),
        median=float(median),
        upper=float(upper),
        n_skipped=n_skipped,
        skip_reasons=dict(skip_reasons),
    )


def bootstrap_ci(
    y_true: np.ndarray,
    y_score: np.ndarray,
    stat_fn: Callable[[np.ndarray, np.ndarray], float],
    n_boot: int,
    alpha: float,
    seed: int,
) -> tuple[float, float]:
    """
    Non-parametric bootstrap CI for a prediction metric on a fixed evaluation set.

    Args:
        y_true: True labels
        y_score: Predicted scores or labels
        stat_fn: Function that computes a metric from (y_true, y_score)
        n_boot: Number of bootstrap samples
        alpha: Significance level (e.g., 0.05 for 95% CI)
        seed: Random seed for reproducibility

    Returns:
        Tuple of (lower, upper) confidence interval bounds
    """
    rng = np.random.default_rng(seed)
    n = len(y_true)
    idx = np.arange(n)
    stats: list[float] = []

    for _ in range(n_boot):
        sample_idx = rng.choice(idx, size=n, replace=True)
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=UndefinedMetricWarning)
            try:
                stats.append(stat_fn(y_true[sample_idx], y_score[sample_idx]))
            except DegenerateSampleError:
                continue

    if not stats:
        return float("nan"), float("nan")

    lower = float(np.percentile(stats, 100 * (alpha / 2)))
    upper = float(np.percentile(stats, 100 * (1 - alpha / 2)))
    return lower, upper
