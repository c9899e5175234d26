"""Train/test partitioning of the store dataset."""

from dataclasses import dataclass

import pandas as pd
from sklearn.model_selection import train_test_split

from domain.schemas import OUTCOME_COL


@dataclass(frozen=True)
class DataSplit:
    """Disjoint training and testing subsets whose union is the source frame."""

    train: pd.DataFrame
    test: pd.DataFrame
    prop: float
    stratified: bool

    def __post_init__(self) -> None:
        overlap = self.train.index.intersection(self.test.index)
        if len(overlap) > 0:
            raise ValueError(f"Training and testing subsets overlap on {len(overlap)} row(s)")

    @property
    def n_total(self) -> int:
        return len(self.train) + len(self.test)


def split_dataset(df: pd.DataFrame, prop: float, stratify: bool, seed: int) -> DataSplit:
    """
    Split df into training (prop) and testing (1 - prop) subsets.

    Args:
        df: Labelled store frame (must contain OUTCOME_COL when stratify=True)
        prop: Fraction of rows assigned to training, in (0, 1)
        stratify: Preserve outcome class proportions across both subsets
        seed: Random seed for the row assignment

    Returns:
        DataSplit with the original row index preserved in both subsets
    """
    if not 0.0 < prop < 1.0:
        raise ValueError(f"prop must be in (0, 1), got {prop}")
    if stratify and OUTCOME_COL not in df.columns:
        raise KeyError(f"Cannot stratify: column '{OUTCOME_COL}' not found")

    train, test = train_test_split(
        df,
        train_size=prop,
        random_state=seed,
        shuffle=True,
        stratify=df[OUTCOME_COL] if stratify else None,
    )
    split = DataSplit(train=train, test=test, prop=prop, stratified=stratify)

    if not df.index.sort_values().equals(split.train.index.append(split.test.index).sort_values()):
        raise ValueError("Training and testing subsets do not cover the full dataset")
    return split
