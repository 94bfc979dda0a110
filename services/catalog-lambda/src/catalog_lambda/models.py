"""
Catalog data models.
These models represent the product and stock records used throughout the service.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Number = Union[int, float]

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

# Limits of the DynamoDB number type.
MAX_DIGITS = 38
MIN_EXPONENT = -130
MAX_EXPONENT = 125


def check_storable(number: Number, field_name: str) -> Number:
    """Reject numbers that DynamoDB cannot store without rounding."""
    stored = Decimal(str(number))
    if stored.is_zero():
        return number
    if len(stored.as_tuple().digits) > MAX_DIGITS:
        raise ValueError(f"Product {field_name} must have at most {MAX_DIGITS} significant digits")
    if not MIN_EXPONENT <= stored.adjusted() <= MAX_EXPONENT:
        raise ValueError(f"Product {field_name} is out of range")
    return number


def coerce_number(value: Any, field_name: str) -> Number:
    """Turn a JSON number, numeric string or DynamoDB Decimal into int or float."""
    if isinstance(value, bool):
        raise ValueError(f"Product {field_name} must be a number or numeric string")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Product {field_name} must be a number or numeric string")
    else:
        raise ValueError(f"Product {field_name} must be a number or numeric string")

    if not number.is_finite():
        raise ValueError(f"Product {field_name} must be a finite number")
    if not number.is_zero() and not MIN_EXPONENT <= number.adjusted() <= MAX_EXPONENT:
        raise ValueError(f"Product {field_name} is out of range")
    if number == number.to_integral_value():
        return check_storable(int(number), field_name)
    return check_storable(float(number), field_name)


def coerce_count(value: Any) -> int:
    """Parse a stock count; absent values mean zero."""
    if value is None or value == "":
        return 0
    if isinstance(value, str):
        stripped = value.strip()
        if not _INTEGER_RE.match(stripped):
            raise ValueError("Product count must be a non-negative integer")
        count = int(stripped)
    else:
        number = coerce_number(value, "count")
        if not isinstance(number, int):
            raise ValueError("Product count must be a non-negative integer")
        count = number
    if count < 0:
        raise ValueError("Product count must be a non-negative integer")
    return check_storable(count, "count")


class NewProduct(BaseModel):
    """A validated product payload that has not been stored yet."""
    title: str
    description: str
    price: Number
    count: int = 0

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Product title must be a non-empty string")
        return value.strip()

    @field_validator("description", mode="before")
    @classmethod
    def _check_description(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Product description must be a string")
        return value.strip()

    @field_validator("price", mode="before")
    @classmethod
    def _check_price(cls, value: Any) -> Number:
        price = coerce_number(value, "price")
        if price <= 0:
            raise ValueError("Product price must be a positive number")
        return price

    @field_validator("count", mode="before")
    @classmethod
    def _check_count(cls, value: Any) -> int:
        return coerce_count(value)


class Product(BaseModel):
    """A stored product joined with its stock count."""
    id: str
    title: str
    description: str = ""
    price: Number
    count: int = 0

    @field_validator("price", mode="before")
    @classmethod
    def _read_price(cls, value: Any) -> Number:
        return coerce_number(value, "price")

    @field_validator("count", mode="before")
    @classmethod
    def _read_count(cls, value: Any) -> int:
        return coerce_count(value)

    @classmethod
    def from_new(cls, product_id: str, product: NewProduct) -> "Product":
        return cls(id=product_id, **product.model_dump())

    def to_response(self) -> dict:
        """Convert to the JSON body returned by the HTTP API."""
        return self.model_dump(mode="json")


class UploadTarget(BaseModel):
    """Where and how a client uploads an import file."""
    model_config = ConfigDict(populate_by_name=True)

    signed_url: str = Field(..., alias="signedUrl")
    key: str

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ErrorMessage(BaseModel):
    """Error body returned by the HTTP API."""
    message: str
