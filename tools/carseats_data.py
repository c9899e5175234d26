"""
Fetch the car-seat sales dataset and record the reference bootstrap interval.

Run from the repository root with the project installed (pip install -e .):

    python tools/carseats_data.py fetch
    python tools/carseats_data.py record-reference

`fetch` downloads the public ISLR Carseats table, validates it and writes the
source columns to dataset/carseats.csv. `record-reference` runs the configured
bootstrap comparison on that file and stores the interval bounds that
tests/unit/test_carseats_reference.py checks later runs against.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from application import prepare_dataset, reference_summary
from domain.data import class_balance, validate_records
from domain.schemas import SOURCE_COLUMNS
from infrastructure.config import load_run_config
from infrastructure.constants import DATA_DIR, DATA_FILE, EXPERIMENT_FILE
from infrastructure.io import fetch_csv, write_json
from infrastructure.observability import configure_logging

logger = logging.getLogger(__name__)

CARSEATS_URL = "https://vincentarelbundock.github.io/Rdatasets/csv/ISLR/Carseats.csv"
CARSEATS_ROWS = 400
REFERENCE_FILE = Path("tests") / "data" / "carseats_reference.json"


# download, validate and store the source columns only (drops R row names)
def fetch(url: str, dest: Path, force: bool) -> None:
    if dest.exists() and not force:
        raise SystemExit(f"Dataset already exists: {dest} (use --force to overwrite)")

    raw = fetch_csv(url)
    records = validate_records(raw)
    if len(records) != CARSEATS_ROWS:
        raise SystemExit(f"Expected {CARSEATS_ROWS} stores, downloaded {len(records)}")

    dest.parent.mkdir(parents=True, exist_ok=True)
    raw[SOURCE_COLUMNS].to_csv(dest, index=False)
    logger.info("Saved %d stores to %s", len(records), dest)


# run the configured bootstrap on the dataset and store the interval bounds
def record_reference(experiment: Path, dest: Path) -> None:
    cfg = load_run_config(experiment, environ={})
    df = prepare_dataset(cfg)
    logger.info("Class balance: %s", class_balance(df).to_dict(orient="records"))

    summary = reference_summary(cfg, df)
    write_json(dest, summary)
    logger.info("Saved reference interval to %s", dest)


def main() -> None:
    p = argparse.ArgumentParser(description="Car-seat dataset and reference interval helper")
    sub = p.add_subparsers(dest="command", required=True)

    f = sub.add_parser("fetch", help="Download and validate the Carseats table")
    f.add_argument("--url", default=CARSEATS_URL)
    f.add_argument("--dest", type=Path, default=DATA_DIR / DATA_FILE)
    f.add_argument("--force", action="store_true", help="Overwrite an existing dataset file")

    r = sub.add_parser("record-reference", help="Store the seeded bootstrap interval as the test reference")
    r.add_argument("--experiment", type=Path, default=EXPERIMENT_FILE)
    r.add_argument("--dest", type=Path, default=REFERENCE_FILE)

    args = p.parse_args()
    configure_logging()

    if args.command == "fetch":
        fetch(args.url, args.dest, args.force)
    else:
        record_reference(args.experiment, args.dest)


if __name__ == "__main__":
    main()
