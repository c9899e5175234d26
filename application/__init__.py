"""
Application layer: Use cases and workflow orchestration.

This layer coordinates between domain logic and infrastructure, running the
evaluation steps of the report in order and writing its artifacts.
"""

from application.evaluation import (
    AnalysisResults,
    log_evaluation_summary,
    run_analysis,
    run_bootstrap_comparison,
    run_cross_validation,
    run_delong_comparison,
    run_final_fit,
    run_holdout_evaluation,
    run_repeated_cv_comparison,
)
from application.preparation import data_fingerprint, make_model_specs, prepare_dataset, split_for_run
from application.reference import reference_summary
from application.report import render_report
from application.serialize import build_prediction_table, save_metrics, save_table

__all__ = [
    # Main workflows
    "prepare_dataset",
    "split_for_run",
    "make_model_specs",
    "run_analysis",
    "run_holdout_evaluation",
    "run_cross_validation",
    "run_bootstrap_comparison",
    "run_delong_comparison",
    "run_repeated_cv_comparison",
    "run_final_fit",
    "log_evaluation_summary",
    "AnalysisResults",
    # Artifacts
    "build_prediction_table",
    "save_table",
    "save_metrics",
    "data_fingerprint",
    "render_report",
    "reference_summary",
]
