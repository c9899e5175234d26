"""Binary outcome derivation from the continuous sales figure."""

import pandas as pd

from domain.schemas import CLASS_LEVELS, NEGATIVE_CLASS, OUTCOME_COL, POSITIVE_CLASS, SALES_COL


def derive_outcome(df: pd.DataFrame, threshold: float, source_col: str = SALES_COL) -> pd.DataFrame:
    """
    Label each store 'high' when sales exceed the threshold (strictly), else 'low'.

    The continuous source column is dropped so it cannot leak into the models.

    Args:
        df: Validated store frame
        threshold: Sales cut-off (8.0 for the reference analysis)
        source_col: Continuous column to threshold

    Returns:
        Copy of df with OUTCOME_COL (categorical: high, low) in place of source_col
    """
    if source_col not in df.columns:
        raise KeyError(f"Outcome source column '{source_col}' not found in dataset columns: {list(df.columns)}")

    out = df.copy()
    labels = (out[source_col] > threshold).map({True: POSITIVE_CLASS, False: NEGATIVE_CLASS})
    out[OUTCOME_COL] = pd.Categorical(labels, categories=CLASS_LEVELS)
    return out.drop(columns=[source_col])


def outcome_indicator(df: pd.DataFrame) -> pd.Series:
    """Return 1 for the positive class and 0 otherwise."""
    return (df[OUTCOME_COL] == POSITIVE_CLASS).astype(int)
