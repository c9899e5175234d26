"""Evaluation workflows and summary logging."""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from application.constants import (
    STEP_BOOTSTRAP,
    STEP_CV,
    STEP_DATA,
    STEP_DELONG,
    STEP_FINAL,
    STEP_HOLDOUT,
    STEP_REPEATED_CV,
)
from application.preparation import split_for_run
from application.serialize import build_prediction_table
from domain.data import DataSplit, class_balance, describe_dataset, outcome_indicator
from domain.evaluation import (
    BootstrapResult,
    CrossValidationResult,
    DeLongResult,
    PairedTestResult,
    bootstrap_auc_difference,
    compute_classification_metrics,
    cross_validate_auc,
    cv_summary_table,
    delong_test,
    holdout_comparison_table,
    paired_t_test,
    roc_points,
    significance_table,
)
from domain.modeling import FittedModel, ModelSpec, feature_importance, fit_model
from infrastructure.config.models import RunConfig
from infrastructure.observability import log_step
from infrastructure.utils import derive_seed

logger = logging.getLogger(__name__)


@dataclass
class HoldoutEvaluation:
    """Both models fitted on the training set and scored once on the test set."""

    y_test: np.ndarray
    fitted: dict[str, FittedModel]
    scores: dict[str, np.ndarray]
    metrics: dict[str, dict]
    confusion: dict[str, pd.DataFrame]
    roc: dict[str, pd.DataFrame]
    predictions: pd.DataFrame

    def table(self) -> pd.DataFrame:
        return holdout_comparison_table(self.metrics)


@dataclass
class FinalFit:
    """Model selected by cross-validated AUC, refit on the full training set."""

    selected: str
    selection: pd.DataFrame
    metrics: dict
    confusion: pd.DataFrame
    importance: dict[str, pd.DataFrame]
    predictions: pd.DataFrame


@dataclass
class AnalysisResults:
    """Everything the report needs, in the order the analysis produces it."""

    data_summary: pd.DataFrame
    balance: pd.DataFrame
    split: DataSplit
    reference: ModelSpec
    comparison: ModelSpec
    holdout: HoldoutEvaluation
    cv: CrossValidationResult
    bootstrap: BootstrapResult
    delong: DeLongResult
    repeated_cv: CrossValidationResult
    paired: PairedTestResult
    final: FinalFit

    def significance(self) -> pd.DataFrame:
        return significance_table(self.bootstrap, self.delong, self.paired)

    def to_metrics(self) -> dict:
        """JSON-friendly nested dict of every numeric result."""
        return {
            STEP_DATA: {
                "n_rows": int(self.split.n_total),
                "n_train": int(len(self.split.train)),
                "n_test": int(len(self.split.test)),
                "class_balance": self.balance.to_dict(orient="records"),
            },
            STEP_HOLDOUT: self.holdout.metrics,
            STEP_CV: self.cv.summary().to_dict(orient="records"),
            STEP_BOOTSTRAP: self.bootstrap.summary(),
            STEP_DELONG: self.delong.summary(),
            STEP_REPEATED_CV: {
                "summary": self.repeated_cv.summary().to_dict(orient="records"),
                "paired_t_test": self.paired.summary(),
            },
            STEP_FINAL: {
                "selected": self.final.selected,
                "metrics": self.final.metrics,
                "importance": {k: v.to_dict(orient="records") for k, v in self.final.importance.items()},
            },
            "significance": self.significance().to_dict(orient="records"),
        }


def run_holdout_evaluation(cfg: RunConfig, split: DataSplit, specs: list[ModelSpec]) -> HoldoutEvaluation:
    """
    Fit each specification on the training set and evaluate it once on the test set.

    Args:
        cfg: RunConfig instance
        split: Train/test split
        specs: Model specifications (reference first)

    Returns:
        HoldoutEvaluation with metrics, confusion matrices, ROC points and predictions
    """
    seed = derive_seed(cfg.stats.seed, STEP_HOLDOUT)
    threshold = cfg.report.classification_threshold
    y_test = outcome_indicator(split.test).to_numpy()

    fitted: dict[str, FittedModel] = {}
    scores: dict[str, np.ndarray] = {}
    metrics: dict[str, dict] = {}
    confusion: dict[str, pd.DataFrame] = {}
    roc: dict[str, pd.DataFrame] = {}

    for spec in specs:
        model = fit_model(spec, split.train, random_state=seed)
        prob = model.predict_proba(split.test)
        m, cm_df = compute_classification_metrics(y_test, prob, cfg.stats, threshold=threshold)

        fitted[spec.name] = model
        scores[spec.name] = prob
        metrics[spec.name] = m
        confusion[spec.name] = cm_df
        roc[spec.name] = roc_points(y_test, prob)
        logger.info("Holdout %s: AUC=%.4f accuracy=%.4f", spec.name, m["roc_auc"], m["accuracy"])

    return HoldoutEvaluation(
        y_test=y_test,
        fitted=fitted,
        scores=scores,
        metrics=metrics,
        confusion=confusion,
        roc=roc,
        predictions=build_prediction_table(split.test, scores, threshold=threshold),
    )


def run_cross_validation(cfg: RunConfig, split: DataSplit, specs: list[ModelSpec]) -> CrossValidationResult:
    """Single k-fold cross-validation of every specification on the training set."""
    result = cross_validate_auc(
        split.train,
        specs,
        folds=cfg.stats.cv_folds,
        repeats=1,
        stratify=cfg.split.stratify,
        seed=derive_seed(cfg.stats.seed, STEP_CV),
        n_jobs=cfg.stats.n_jobs,
    )
    for row in result.summary().itertuples(index=False):
        logger.info("CV %s: mean AUC=%.4f (n=%d, std_err=%.4f)", row.model, row.mean, row.n, row.std_err)
    return result


def run_bootstrap_comparison(
    cfg: RunConfig,
    split: DataSplit,
    reference: ModelSpec,
    comparison: ModelSpec,
) -> BootstrapResult:
    """Bootstrap distribution of AUC(comparison) - AUC(reference) on the training set."""
    result = bootstrap_auc_difference(
        split.train,
        reference,
        comparison,
        n_boot=cfg.stats.n_boot,
        confidence=cfg.stats.confidence,
        seed=derive_seed(cfg.stats.seed, STEP_BOOTSTRAP),
        assessment=cfg.stats.bootstrap_assessment,
        holdout=split.test if cfg.stats.bootstrap_assessment == "holdout" else None,
        n_jobs=cfg.stats.n_jobs,
    )
    logger.info(
        "Bootstrap %s - %s: median=%.4f, %.0f%% CI [%.4f, %.4f] (valid=%d, skipped=%d)",
        comparison.name,
        reference.name,
        result.median,
        100 * result.confidence,
        result.lower,
        result.upper,
        result.n_valid,
        result.n_skipped,
    )
    return result


def run_delong_comparison(
    cfg: RunConfig,
    holdout: HoldoutEvaluation,
    reference: ModelSpec,
    comparison: ModelSpec,
) -> DeLongResult:
    """DeLong's test on the holdout predictions of both models (same test subjects)."""
    result = delong_test(
        holdout.y_test,
        holdout.scores[reference.name],
        holdout.scores[comparison.name],
        alpha=cfg.stats.alpha,
        model_a=reference.name,
        model_b=comparison.name,
    )
    logger.info(
        "DeLong %s - %s: diff=%.4f z=%.3f p=%.4g",
        comparison.name,
        reference.name,
        result.difference,
        result.z,
        result.p_value,
    )
    return result


def run_repeated_cv_comparison(
    cfg: RunConfig,
    split: DataSplit,
    reference: ModelSpec,
    comparison: ModelSpec,
) -> tuple[CrossValidationResult, PairedTestResult]:
    """Repeated stratified cross-validation followed by a paired t-test on the fold AUCs."""
    cv_result = cross_validate_auc(
        split.train,
        [reference, comparison],
        folds=cfg.stats.cv_folds,
        repeats=cfg.stats.cv_repeats,
        stratify=cfg.split.stratify,
        seed=derive_seed(cfg.stats.seed, STEP_REPEATED_CV),
        n_jobs=cfg.stats.n_jobs,
    )
    paired = paired_t_test(
        cv_result,
        reference.name,
        comparison.name,
        alpha=cfg.stats.alpha,
        correction=cfg.stats.cv_correction,
    )
    logger.info(
        "Paired t-test %s - %s: mean diff=%.4f t=%.3f df=%d p=%.4g (correction=%s)",
        comparison.name,
        reference.name,
        paired.mean_difference,
        paired.t_statistic,
        paired.df,
        paired.p_value,
        paired.correction,
    )
    return cv_result, paired


def run_final_fit(
    cfg: RunConfig,
    split: DataSplit,
    specs: list[ModelSpec],
    cv_result: CrossValidationResult,
) -> FinalFit:
    """
    Pick the model with the best cross-validated mean AUC, refit on the training set
    and report its test-set metrics; variable importance is reported for every model.
    """
    selection = cv_result.summary().sort_values("mean", ascending=False).reset_index(drop=True)
    selected = str(selection.loc[0, "model"])
    logger.info("Final fit: selected %s by cross-validated AUC", selected)

    seed = derive_seed(cfg.stats.seed, STEP_FINAL)
    threshold = cfg.report.classification_threshold
    y_test = outcome_indicator(split.test).to_numpy()

    importance: dict[str, pd.DataFrame] = {}
    chosen: FittedModel | None = None
    for spec in specs:
        model = fit_model(spec, split.train, random_state=seed)
        importance[spec.name] = feature_importance(model)
        if spec.name == selected:
            chosen = model

    if chosen is None:
        raise KeyError(f"Selected model '{selected}' is not one of {[s.name for s in specs]}")

    prob = chosen.predict_proba(split.test)
    metrics, cm_df = compute_classification_metrics(y_test, prob, cfg.stats, threshold=threshold)
    logger.info("Final fit %s: test AUC=%.4f accuracy=%.4f", selected, metrics["roc_auc"], metrics["accuracy"])

    return FinalFit(
        selected=selected,
        selection=selection,
        metrics=metrics,
        confusion=cm_df,
        importance=importance,
        predictions=build_prediction_table(split.test, {selected: prob}, threshold=threshold),
    )


def run_analysis(cfg: RunConfig, df: pd.DataFrame, specs: tuple[ModelSpec, ModelSpec]) -> AnalysisResults:
    """
    Run every evaluation step in report order on a labelled dataset.

    Args:
        cfg: RunConfig instance
        df: Labelled store frame (output of prepare_dataset)
        specs: (reference, comparison) model specifications

    Returns:
        AnalysisResults consumed by the serializers and the report renderer
    """
    reference, comparison = specs
    both = [reference, comparison]

    with log_step(STEP_DATA):
        data_summary = describe_dataset(df)
        balance = class_balance(df)
        logger.info("Class balance: %s", balance.to_dict(orient="records"))
        split = split_for_run(cfg, df)

    with log_step(STEP_HOLDOUT):
        holdout = run_holdout_evaluation(cfg, split, both)

    with log_step(STEP_CV):
        cv = run_cross_validation(cfg, split, both)

    with log_step(STEP_BOOTSTRAP):
        boot = run_bootstrap_comparison(cfg, split, reference, comparison)

    with log_step(STEP_DELONG):
        delong = run_delong_comparison(cfg, holdout, reference, comparison)

    with log_step(STEP_REPEATED_CV):
        repeated_cv, paired = run_repeated_cv_comparison(cfg, split, reference, comparison)

    with log_step(STEP_FINAL):
        final = run_final_fit(cfg, split, both, repeated_cv)

    return AnalysisResults(
        data_summary=data_summary,
        balance=balance,
        split=split,
        reference=reference,
        comparison=comparison,
        holdout=holdout,
        cv=cv,
        bootstrap=boot,
        delong=delong,
        repeated_cv=repeated_cv,
        paired=paired,
        final=final,
    )


def log_evaluation_summary(results: AnalysisResults) -> None:
    """
    Log a concise, human-readable evaluation summary.

    Args:
        results: Output of run_analysis
    """
    logger.info("=== Evaluation Summary ===")
    logger.info("Holdout comparison:\n%s", results.holdout.table().to_string(index=False))
    for name, cm_df in results.holdout.confusion.items():
        logger.debug("Confusion matrix %s (rows=true, cols=pred):\n%s", name, cm_df)

    logger.info("Cross-validation (%d folds):\n%s", results.cv.folds, cv_summary_table(results.cv).to_string(index=False))

    boot = results.bootstrap
    logger.info(
        "Bootstrap AUC difference (%s - %s): %.4f (%.0f%% CI [%.4f, %.4f]) %s",
        boot.model_b,
        boot.model_a,
        boot.median,
        100 * boot.confidence,
        boot.lower,
        boot.upper,
        "excludes 0" if boot.excludes_zero else "includes 0",
    )
    if boot.n_skipped:
        logger.info("Bootstrap skipped repetitions: %d %s", boot.n_skipped, boot.skip_reasons)

    logger.info(
        "DeLong: AUC %s=%.4f, %s=%.4f, z=%.3f, p=%.4g",
        results.delong.model_a,
        results.delong.auc_a,
        results.delong.model_b,
        results.delong.auc_b,
        results.delong.z,
        results.delong.p_value,
    )
    logger.info(
        "Paired t-test over %d folds: mean diff=%.4f, p=%.4g",
        results.paired.n_pairs,
        results.paired.mean_difference,
        results.paired.p_value,
    )
    logger.info("--- Significance ---\n%s", results.significance().to_string(index=False))
    logger.info(
        "Final model: %s (test AUC=%.4f)",
        results.final.selected,
        results.final.metrics["roc_auc"],
    )
