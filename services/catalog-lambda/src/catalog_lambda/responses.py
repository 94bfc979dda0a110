"""API Gateway proxy response helpers."""

import json
from decimal import Decimal
from typing import Any, Optional

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return str(value)


def build_response(
    status_code: int,
    body: Any,
    content_type: str = "application/json",
    headers: Optional[dict] = None,
) -> dict:
    """Build a Lambda proxy response with permissive CORS headers."""
    if isinstance(body, str) and content_type != "application/json":
        payload = body
    else:
        payload = json.dumps(body, default=_json_default)

    return {
        "statusCode": status_code,
        "headers": {**CORS_HEADERS, "Content-Type": content_type, **(headers or {})},
        "body": payload,
    }


def error_response(status_code: int, message: str) -> dict:
    """Build a JSON error response."""
    return build_response(status_code, {"message": message})
