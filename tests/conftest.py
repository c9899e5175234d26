from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from application import make_model_specs, prepare_dataset, run_analysis
from domain.data import derive_outcome, validate_records
from domain.modeling import ModelFamily, ModelSpec
from infrastructure.config.models import (
    LogisticRegressionParams,
    ModelsConfig,
    ModelSpecConfig,
    RandomForestParams,
    ReportConfig,
    RunConfig,
    SplitConfig,
    StatsConfig,
)


def make_store_frame(n: int = 400, seed: int = 0, signal: str = "linear") -> pd.DataFrame:
    """
    Synthetic dataset with the source column names of the car-seat sales file.

    signal='linear': sales driven additively by price, advertising and shelf location.
    signal='xor': sales high exactly when (price above 115) XOR (age above 53), which a
    forest can learn and a linear model cannot.
    """
    rng = np.random.default_rng(seed)
    comp_price = rng.integers(77, 176, size=n).astype(float)
    income = rng.integers(21, 121, size=n).astype(float)
    advertising = rng.integers(0, 30, size=n).astype(float)
    population = rng.integers(10, 510, size=n).astype(float)
    price = rng.integers(70, 161, size=n).astype(float)
    shelve_loc = rng.choice(["Bad", "Medium", "Good"], size=n, p=[0.25, 0.5, 0.25])
    age = rng.integers(25, 81, size=n).astype(float)
    education = rng.integers(10, 19, size=n).astype(float)
    urban = rng.choice(["Yes", "No"], size=n, p=[0.7, 0.3])
    us = rng.choice(["Yes", "No"], size=n, p=[0.65, 0.35])

    if signal == "xor":
        s = np.where((price > 115) ^ (age > 53), 1.0, -1.0)
        sales = 8.0 + 3.0 * s + rng.normal(0.0, 0.5, size=n)
    else:
        shelf = np.select([shelve_loc == "Good", shelve_loc == "Bad"], [2.5, -2.0], 0.0)
        sales = (
            7.5
            + 0.09 * (comp_price - 125)
            - 0.095 * (price - 115)
            + 0.12 * advertising
            - 0.045 * (age - 53)
            + shelf
            + rng.normal(0.0, 1.0, size=n)
        )

    return pd.DataFrame(
        {
            "Sales": np.round(sales, 2),
            "CompPrice": comp_price,
            "Income": income,
            "Advertising": advertising,
            "Population": population,
            "Price": price,
            "ShelveLoc": shelve_loc,
            "Age": age,
            "Education": education,
            "Urban": urban,
            "US": us,
        }
    )


def make_labelled_frame(n: int = 400, seed: int = 0, signal: str = "linear") -> pd.DataFrame:
    return derive_outcome(validate_records(make_store_frame(n, seed, signal)), threshold=8.0)


@pytest.fixture
def raw_frame() -> pd.DataFrame:
    return make_store_frame(n=200, seed=1)


@pytest.fixture
def labelled_frame() -> pd.DataFrame:
    return make_labelled_frame(n=200, seed=1)


@pytest.fixture
def xor_frame() -> pd.DataFrame:
    return make_labelled_frame(n=400, seed=7, signal="xor")


@pytest.fixture
def lr_spec() -> ModelSpec:
    return ModelSpec(
        name="logistic_regression",
        family=ModelFamily.LOGISTIC_REGRESSION,
        params={"C": 1e4, "max_iter": 1000},
    )


@pytest.fixture
def rf_spec() -> ModelSpec:
    return ModelSpec(
        name="random_forest",
        family=ModelFamily.RANDOM_FOREST,
        params={"n_estimators": 25, "min_samples_leaf": 1, "n_jobs": 1},
    )


def build_small_run_config(root: Path) -> RunConfig:
    """Fast settings: few trees, few resamples, 5-fold cross-validation."""
    return RunConfig(
        data_file_path=root / "stores.csv",
        split=SplitConfig(prop=0.75, stratify=True),
        models=ModelsConfig(
            reference=ModelSpecConfig(
                name="logistic_regression",
                family=ModelFamily.LOGISTIC_REGRESSION,
                params=LogisticRegressionParams(),
            ),
            comparison=ModelSpecConfig(
                name="random_forest",
                family=ModelFamily.RANDOM_FOREST,
                params=RandomForestParams(n_estimators=25),
            ),
        ),
        stats=StatsConfig(
            seed=11,
            n_boot=30,
            metric_ci_n_boot=50,
            cv_folds=5,
            cv_repeats=2,
            n_jobs=1,
        ),
        report=ReportConfig(dpi=50),
        output_root=root / "outputs",
    )


@pytest.fixture
def small_run_config(tmp_path: Path) -> RunConfig:
    return build_small_run_config(tmp_path)


@pytest.fixture
def make_frame():
    """Factory for labelled synthetic frames: make_frame(n, seed, signal)."""
    return make_labelled_frame


@pytest.fixture
def make_raw_frame():
    """Factory for unvalidated frames with source column names: make_raw_frame(n, seed, signal)."""
    return make_store_frame


@pytest.fixture(scope="session")
def xor_analysis(tmp_path_factory):
    """(config, results) of one full analysis on an interaction-driven dataset, shared across tests."""
    cfg = build_small_run_config(tmp_path_factory.mktemp("xor_run"))
    make_store_frame(n=400, seed=7, signal="xor").to_csv(cfg.data_file_path, index=False)
    df = prepare_dataset(cfg)
    return cfg, run_analysis(cfg, df, make_model_specs(cfg))
