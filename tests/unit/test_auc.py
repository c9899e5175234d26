import numpy as np
import pytest
from sklearn.metrics import roc_auc_score

from domain.errors import DegenerateSampleError
from domain.evaluation import rank_auc


def test_perfect_and_reversed_ranking() -> None:
    y = np.array([0, 0, 1, 1])
    s = np.array([0.1, 0.2, 0.8, 0.9])

    assert rank_auc(y, s) == 1.0
    assert rank_auc(y, -s) == 0.0


def test_ties_count_one_half() -> None:
    y = np.array([0, 1, 0, 1])
    s = np.full(4, 0.3)

    assert rank_auc(y, s) == 0.5


def test_matches_sklearn_with_ties() -> None:
    rng = np.random.default_rng(0)
    y = rng.integers(0, 2, size=300)
    s = np.round(rng.random(300) + 0.3 * y, 1)

    assert rank_auc(y, s) == pytest.approx(roc_auc_score(y, s))


def test_complemented_labels_give_one_minus_auc() -> None:
    rng = np.random.default_rng(1)
    y = rng.integers(0, 2, size=200)
    s = rng.random(200) + 0.5 * y

    auc = rank_auc(y, s)
    assert 0.0 <= auc <= 1.0
    assert rank_auc(1 - y, s) == pytest.approx(1.0 - auc)


def test_uninformative_scores_are_near_one_half() -> None:
    rng = np.random.default_rng(2)
    y = rng.integers(0, 2, size=20_000)
    s = rng.random(20_000)

    assert rank_auc(y, s) == pytest.approx(0.5, abs=0.02)


def test_single_class_is_degenerate() -> None:
    with pytest.raises(DegenerateSampleError):
        rank_auc(np.ones(5, dtype=int), np.linspace(0, 1, 5))


def test_length_mismatch_is_rejected() -> None:
    with pytest.raises(ValueError, match="same length"):
        rank_auc(np.array([0, 1, 1]), np.array([0.2, 0.4]))
