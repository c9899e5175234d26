"""Validate raw tabular rows against the StoreRecord schema."""

import logging

import pandas as pd
from pydantic import TypeAdapter, ValidationError

from domain.errors import SchemaMismatchError
from domain.schemas import StoreRecord

logger = logging.getLogger(__name__)

_RECORDS_ADAPTER = TypeAdapter(list[StoreRecord])

# Number of pydantic error entries echoed in the exception message
_MAX_REPORTED_ERRORS = 5


def _missing_columns(df: pd.DataFrame) -> list[str]:
    """Return source columns absent under both their alias and their field name."""
    missing: list[str] = []
    for name, field in StoreRecord.model_fields.items():
        if field.alias not in df.columns and name not in df.columns:
            missing.append(field.alias or name)
    return missing


def validate_records(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate every row once and return a frame with typed, snake_case columns.

    Args:
        df: Raw dataset as read from disk (source column names such as 'CompPrice')

    Returns:
        DataFrame with one column per StoreRecord field, preserving the input index

    Raises:
        SchemaMismatchError: If required columns are missing or any row fails validation
    """
    missing = _missing_columns(df)
    if missing:
        raise SchemaMismatchError(f"Dataset is missing required columns: {missing}. Found: {list(df.columns)}")

    # object dtype turns numpy scalars into plain Python values; NaN becomes None and is rejected
    raw = df.astype(object).where(df.notna(), None)
    try:
        records = _RECORDS_ADAPTER.validate_python(raw.to_dict(orient="records"))
    except ValidationError as e:
        details = "; ".join(
            f"row {err['loc'][0]} field {err['loc'][-1]!r}: {err['msg']}" for err in e.errors()[:_MAX_REPORTED_ERRORS]
        )
        raise SchemaMismatchError(f"{e.error_count()} invalid value(s) in dataset: {details}") from e

    out = pd.DataFrame([r.model_dump() for r in records], index=df.index)
    logger.debug("Validated %d store records (%d columns)", len(out), out.shape[1])
    return out
