"""
CLI entrypoint for the AUC comparison report.

This script performs the following steps:
- loads .env, configs/experiment.yaml
- creates a per-run output folder under outputs/
- loads and validates the store dataset, derives the high/low sales outcome
- runs every evaluation step (holdout, cross-validation, bootstrap, DeLong,
  repeated cross-validation with a paired t-test, final fit)
- saves metrics, prediction and resampling tables
- renders the markdown report with figures
- logs a human-readable summary of results
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from application import (
    data_fingerprint,
    log_evaluation_summary,
    make_model_specs,
    prepare_dataset,
    render_report,
    run_analysis,
    save_metrics,
    save_table,
)
from application.constants import (
    BOOTSTRAP_FILENAME,
    CONFIG_SNAPSHOT_FILENAME,
    CV_FOLDS_FILENAME,
    DATA_FINGERPRINT_FILENAME,
    DATA_SUMMARY_FILENAME,
    LOG_FILENAME,
    METRICS_FILENAME,
    PREDICTIONS_FILENAME,
    REPEATED_CV_FOLDS_FILENAME,
)
from infrastructure.config import load_run_config
from infrastructure.constants import EXPERIMENT_FILE
from infrastructure.io import ensure_exists, write_json
from infrastructure.observability import configure_logging, get_log_context, make_run_tag, set_log_context
from infrastructure.utils import set_seed

logger = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Compare logistic regression and random forest AUC")
    p.add_argument(
        "--experiment",
        type=str,
        default=str(EXPERIMENT_FILE),
        help="Path to experiment.yaml (default: configs/experiment.yaml)",
    )
    p.add_argument(
        "--env",
        type=str,
        default=".env",
        help="Path to .env file with AUC_REPORT_* overrides (default: .env, optional)",
    )
    p.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip figure rendering (report tables only).",
    )
    p.add_argument(
        "--console-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level",
    )
    p.add_argument(
        "--file-level",
        type=str,
        default="DEBUG",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="File log level",
    )
    return p.parse_args()


def main() -> None:
    args = _parse_args()

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)

    experiment_path = Path(args.experiment)
    ensure_exists(experiment_path, "experiment.yaml")

    cfg = load_run_config(experiment_path)
    ensure_exists(cfg.data_file_path, "store dataset (download it with: python tools/carseats_data.py fetch)")
    if args.no_plots:
        cfg.report.make_plots = False
    set_seed(cfg.stats.seed)

    # ---- Per-run output folder ----
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_id = (
        f"{ts}_"
        f"{cfg.models.reference.name}_vs_{cfg.models.comparison.name}_"
        f"seed{cfg.stats.seed}_"
        f"boot{cfg.stats.n_boot}{cfg.stats.bootstrap_assessment}_"
        f"cv{cfg.stats.cv_repeats}x{cfg.stats.cv_folds}"
    )
    run_dir = cfg.output_root / run_id
    run_dir.mkdir(parents=True, exist_ok=True)

    log_path = run_dir / LOG_FILENAME
    configure_logging(
        log_file=log_path,
        console_level=getattr(logging, args.console_level),
        file_level=getattr(logging, args.file_level),
    )
    set_log_context(run_id_full=run_id)

    logger.info("Starting run: run_id=%s (run_tag=%s)", run_id, make_run_tag(run_id))
    logger.info("Run output directory: %s", run_dir)

    write_json(
        run_dir / CONFIG_SNAPSHOT_FILENAME,
        {"run": get_log_context(), "config": cfg.model_dump(mode="json")},
    )

    df = prepare_dataset(cfg)
    write_json(run_dir / DATA_FINGERPRINT_FILENAME, data_fingerprint(cfg, df))

    specs = make_model_specs(cfg)
    results = run_analysis(cfg, df, specs)

    # Artifacts
    save_table(results.data_summary, run_dir / DATA_SUMMARY_FILENAME)
    save_table(results.holdout.predictions, run_dir / PREDICTIONS_FILENAME)
    save_table(results.cv.fold_metrics, run_dir / CV_FOLDS_FILENAME)
    save_table(results.repeated_cv.fold_metrics, run_dir / REPEATED_CV_FOLDS_FILENAME)
    save_table(results.bootstrap.to_frame(), run_dir / BOOTSTRAP_FILENAME)
    metrics_path = save_metrics(results.to_metrics(), run_dir / METRICS_FILENAME)

    report_path = render_report(cfg, results, run_dir)

    # Human-readable summary
    log_evaluation_summary(results)

    logger.info("--- Artifacts ---")
    logger.info("Metrics JSON: %s", metrics_path)
    logger.info("Report: %s", report_path)
    logger.info("Detailed log: %s", log_path)


if __name__ == "__main__":
    main()
