"""Pydantic model for one store record of the car-seat sales dataset."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

OUTCOME_COL = "sales_class"
SALES_COL = "sales"
POSITIVE_CLASS = "high"
NEGATIVE_CLASS = "low"
CLASS_LEVELS = [POSITIVE_CLASS, NEGATIVE_CLASS]

NUMERIC_FEATURES = [
    "comp_price",
    "income",
    "advertising",
    "population",
    "price",
    "age",
    "education",
]
CATEGORICAL_FEATURES = ["shelve_loc", "urban", "us"]
FEATURE_COLUMNS = NUMERIC_FEATURES + CATEGORICAL_FEATURES

SHELVE_LOC_LEVELS = ["Bad", "Medium", "Good"]
YES_NO_LEVELS = ["No", "Yes"]


class StoreRecord(BaseModel):
    """Single store observation, keyed by the column names of the source file."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore", allow_inf_nan=False)

    sales: float = Field(..., alias="Sales", description="Unit sales (thousands) at the location.")
    comp_price: float = Field(..., alias="CompPrice", ge=0, description="Price charged by competitor.")
    income: float = Field(..., alias="Income", ge=0, description="Community income level (thousands).")
    advertising: float = Field(..., alias="Advertising", ge=0, description="Local advertising budget.")
    population: float = Field(..., alias="Population", ge=0, description="Region population (thousands).")
    price: float = Field(..., alias="Price", ge=0, description="Price charged for car seats.")
    shelve_loc: Literal["Bad", "Medium", "Good"] = Field(
        ...,
        alias="ShelveLoc",
        description="Quality of the shelving location for the car seats.",
    )
    age: float = Field(..., alias="Age", ge=0, description="Average age of the local population.")
    education: float = Field(..., alias="Education", ge=0, description="Education level at the location.")
    urban: Literal["Yes", "No"] = Field(..., alias="Urban", description="Urban or rural location.")
    us: Literal["Yes", "No"] = Field(..., alias="US", description="Store located in the US or not.")


# Column names of the source file, in file order
SOURCE_COLUMNS = [field.alias for field in StoreRecord.model_fields.values()]
