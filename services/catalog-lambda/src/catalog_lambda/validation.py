"""
Product payload parsing shared by the HTTP create path and the queue consumer.

Both paths accept the same contract: a non-empty ``title``, a string
``description``, a positive ``price`` (number or numeric string) and an
optional non-negative ``count`` (number or numeric string, default 0).
"""

import json
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from .exceptions import ErrorContext, ValidationError
from .models import NewProduct

EXPECTED_PAYLOAD = (
    "title (non-empty string), description (string), price (positive number), "
    "count (optional non-negative integer)"
)

_FIELD_EXPECTATIONS = {
    "title": "non-empty string",
    "description": "string",
    "price": "positive number",
    "count": "non-negative integer",
}


def parse_json(raw: Optional[str], field_name: str = "body", context: Optional[ErrorContext] = None) -> Any:
    """Decode a JSON document, raising ValidationError on malformed input."""
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValidationError(
            message="Invalid JSON format",
            field_name=field_name,
            expected="JSON document",
            actual=str(e),
            context=context,
        )


def parse_product(data: Any, context: Optional[ErrorContext] = None) -> NewProduct:
    """
    Validate an untyped payload into a NewProduct.

    Args:
        data: Decoded JSON object or CSV row
        context: Optional error context to attach to failures

    Returns:
        The validated product

    Raises:
        ValidationError: On the first field that does not meet the contract
    """
    if not isinstance(data, dict):
        raise ValidationError(
            message="Product data must be an object",
            field_name="product",
            expected="object",
            actual=type(data).__name__,
            context=context,
        )

    try:
        return NewProduct.model_validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field_name = str(error["loc"][0]) if error["loc"] else "product"
        raise ValidationError(
            message=_error_message(field_name, error),
            field_name=field_name,
            expected=_FIELD_EXPECTATIONS.get(field_name, "valid value"),
            actual=data.get(field_name),
            context=context,
        )


def _error_message(field_name: str, error: dict) -> str:
    if error["type"] == "missing":
        return f"Product {field_name} is required"
    cause = error.get("ctx", {}).get("error")
    if cause is not None:
        return str(cause)
    return f"Product {field_name} is invalid: {error['msg']}"
