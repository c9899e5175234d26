"""Application-level constants."""

# Prediction table columns
ROW_ID_COL = "row_id"
TRUTH_COL = "truth"
MODEL_COL = "model"
PRED_CLASS_COL = ".pred_class"
PRED_HIGH_COL = ".pred_high"
PRED_LOW_COL = ".pred_low"

# Evaluation step names (log context and metrics.json keys)
STEP_DATA = "data"
STEP_HOLDOUT = "holdout"
STEP_CV = "cross_validation"
STEP_BOOTSTRAP = "bootstrap"
STEP_DELONG = "delong"
STEP_REPEATED_CV = "repeated_cv"
STEP_FINAL = "final_fit"

# Output filenames
METRICS_FILENAME = "metrics.json"
PREDICTIONS_FILENAME = "test_predictions.csv"
CV_FOLDS_FILENAME = "cv_fold_metrics.csv"
REPEATED_CV_FOLDS_FILENAME = "repeated_cv_fold_metrics.csv"
BOOTSTRAP_FILENAME = "bootstrap_differences.csv"
DATA_SUMMARY_FILENAME = "data_summary.csv"
CONFIG_SNAPSHOT_FILENAME = "config.resolved.json"
DATA_FINGERPRINT_FILENAME = "data_fingerprint.json"
REPORT_FILENAME = "report.md"

# Figures
FIGURES_DIRNAME = "figures"
CLASS_BALANCE_FIGURE = "class_balance.png"
ROC_FIGURE = "roc_curves.png"
BOOTSTRAP_FIGURE = "bootstrap_differences.png"
CV_BOXPLOT_FIGURE = "cv_auc_boxplot.png"
IMPORTANCE_FIGURE = "feature_importance.png"

LOG_FILENAME = "run.log"
