"""
Dataset preparation: record validation, outcome derivation, splitting and description.

All functions in this package are pure (no file I/O); loading happens in infrastructure.io.
"""

from domain.data.labeling import derive_outcome, outcome_indicator
from domain.data.records import validate_records
from domain.data.split import DataSplit, split_dataset
from domain.data.summary import class_balance, describe_dataset

__all__ = [
    "validate_records",
    "derive_outcome",
    "outcome_indicator",
    "DataSplit",
    "split_dataset",
    "describe_dataset",
    "class_balance",
]
