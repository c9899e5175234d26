from pathlib import Path

# Repo-root conventional directories/files (overrideable via experiment.yaml)
CONFIG_DIR = Path("configs")
EXPERIMENT_FILE = CONFIG_DIR / "experiment.yaml"

DATA_DIR = Path("dataset")
DATA_FILE = "carseats.csv"

# Environment variable overrides applied on top of experiment.yaml
ENV_PREFIX = "AUC_REPORT_"
