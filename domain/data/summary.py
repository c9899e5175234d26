"""Descriptive statistics for the store dataset."""

import pandas as pd

from domain.schemas import OUTCOME_COL

_QUANTILES = [0.0, 0.25, 0.5, 0.75, 1.0]


def describe_dataset(df: pd.DataFrame) -> pd.DataFrame:
    """
    Build a per-column summary table.

    Numeric columns report missing count, mean, standard deviation and quantiles;
    categorical columns report missing count, number of levels and the level counts.

    Args:
        df: Store frame (validated, with or without the outcome column)

    Returns:
        DataFrame with one row per column
    """
    rows: list[dict[str, object]] = []
    for col in df.columns:
        s = df[col]
        row: dict[str, object] = {
            "variable": col,
            "type": "numeric" if pd.api.types.is_numeric_dtype(s) else "categorical",
            "n_missing": int(s.isna().sum()),
        }
        if row["type"] == "numeric":
            qs = s.quantile(_QUANTILES).tolist()
            row.update(
                {
                    "mean": round(float(s.mean()), 3),
                    "sd": round(float(s.std()), 3),
                    "p0": qs[0],
                    "p25": qs[1],
                    "p50": qs[2],
                    "p75": qs[3],
                    "p100": qs[4],
                }
            )
        else:
            counts = s.astype(str).value_counts()
            row.update(
                {
                    "n_unique": int(counts.size),
                    "top_counts": ", ".join(f"{k}: {v}" for k, v in counts.items()),
                }
            )
        rows.append(row)

    return pd.DataFrame(rows)


def class_balance(df: pd.DataFrame) -> pd.DataFrame:
    """Count and proportion of each outcome class."""
    if OUTCOME_COL not in df.columns:
        raise KeyError(f"Column '{OUTCOME_COL}' not found; derive the outcome first.")

    counts = df[OUTCOME_COL].value_counts(sort=False)
    out = pd.DataFrame({OUTCOME_COL: counts.index.astype(str), "n": counts.to_numpy()})
    out["prop"] = (out["n"] / out["n"].sum()).round(4)
    return out
