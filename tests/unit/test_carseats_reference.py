import json
from pathlib import Path

import pytest

from application import prepare_dataset, reference_summary, split_for_run
from domain.schemas import OUTCOME_COL
from infrastructure.config import load_run_config
from infrastructure.config.models import RunConfig

ROOT = Path(__file__).resolve().parents[2]
DATA_PATH = ROOT / "dataset" / "carseats.csv"
REFERENCE_PATH = ROOT / "tests" / "data" / "carseats_reference.json"

# bound drift allowed across scikit-learn releases
REFERENCE_TOLERANCE = 0.01

pytestmark = pytest.mark.skipif(
    not DATA_PATH.exists(),
    reason="dataset/carseats.csv missing; download it with: python tools/carseats_data.py fetch",
)


@pytest.fixture(scope="module")
def carseats_cfg() -> RunConfig:
    cfg = load_run_config(ROOT / "configs" / "experiment.yaml", environ={})
    return cfg.model_copy(update={"data_file_path": DATA_PATH})


@pytest.fixture(scope="module")
def carseats_summary(carseats_cfg: RunConfig) -> dict[str, object]:
    return reference_summary(carseats_cfg, prepare_dataset(carseats_cfg))


def test_carseats_has_400_stores_split_59_41(carseats_cfg: RunConfig) -> None:
    df = prepare_dataset(carseats_cfg)

    counts = df[OUTCOME_COL].value_counts()
    assert len(df) == 400
    assert counts["low"] == 236
    assert counts["high"] == 164

    split = split_for_run(carseats_cfg, df)
    assert (len(split.train), len(split.test)) == (300, 100)


@pytest.mark.slow
def test_configured_bootstrap_interval_excludes_zero(carseats_cfg: RunConfig, carseats_summary) -> None:
    assert carseats_summary["n_boot"] == carseats_cfg.stats.n_boot
    assert carseats_summary["confidence"] == pytest.approx(0.95)
    assert carseats_summary["lower"] <= carseats_summary["median"] <= carseats_summary["upper"]
    assert carseats_summary["excludes_zero"]


@pytest.mark.slow
@pytest.mark.skipif(
    not REFERENCE_PATH.exists(),
    reason="no stored reference; record it with: python tools/carseats_data.py record-reference",
)
def test_configured_bootstrap_interval_matches_stored_reference(carseats_summary) -> None:
    reference = json.loads(REFERENCE_PATH.read_text(encoding="utf-8"))

    assert carseats_summary["seed"] == reference["seed"]
    assert carseats_summary["n_boot"] == reference["n_boot"]
    assert carseats_summary["n_valid"] == reference["n_valid"]
    for key in ("lower", "median", "upper"):
        assert carseats_summary[key] == pytest.approx(reference[key], abs=REFERENCE_TOLERANCE)
