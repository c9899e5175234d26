"""
Domain layer: Business logic with minimal external dependencies.

Contains:
- schemas: Pydantic store record and outcome constants
- data: Record validation, outcome derivation, splitting, description
- modeling: Model specifications and fitted models
- evaluation: AUC, resampling and significance tests
"""

from domain.errors import DegenerateSampleError, SchemaMismatchError, TestPreconditionError
from domain.schemas import StoreRecord

__all__ = [
    "StoreRecord",
    "DegenerateSampleError",
    "SchemaMismatchError",
    "TestPreconditionError",
]
