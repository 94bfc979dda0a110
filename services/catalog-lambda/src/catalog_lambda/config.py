"""
Service configuration read from the Lambda environment.

The configuration is built once per container and handed to each component's
constructor, so components never read ``os.environ`` themselves.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .exceptions import ConfigurationError

FAIL_FAST = "fail_fast"
REPORT_PARTIAL = "report_partial"
BATCH_FAILURE_MODES = (FAIL_FAST, REPORT_PARTIAL)


@dataclass(frozen=True)
class ServiceConfig:
    """Settings shared by every Lambda in the catalog service."""
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    products_table: str = "products"
    stock_table: str = "stock"
    bucket_name: Optional[str] = None
    queue_url: Optional[str] = None
    sns_topic_arn: Optional[str] = None
    upload_prefix: str = "uploaded/"
    signed_url_expires: int = 3600
    batch_failure_mode: str = FAIL_FAST
    max_send_workers: int = 10
    credentials: Mapping[str, str] = field(default_factory=dict)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        """Build configuration from environment variables."""
        env = os.environ if environ is None else environ

        batch_failure_mode = env.get("BATCH_FAILURE_MODE", FAIL_FAST).strip().lower()
        if batch_failure_mode not in BATCH_FAILURE_MODES:
            raise ConfigurationError(
                message=(
                    f"Unsupported batch failure mode '{batch_failure_mode}', "
                    f"expected one of {', '.join(BATCH_FAILURE_MODES)}"
                ),
                config_key="BATCH_FAILURE_MODE",
            )

        return cls(
            region=env.get("AWS_REGION", "us-east-1"),
            endpoint_url=env.get("LOCALSTACK_ENDPOINT") or None,
            products_table=env.get("PRODUCTS_TABLE_NAME", "products"),
            stock_table=env.get("STOCK_TABLE_NAME", "stock"),
            bucket_name=env.get("BUCKET_NAME") or None,
            queue_url=env.get("QUEUE_URL") or None,
            sns_topic_arn=env.get("SNS_TOPIC_ARN") or None,
            upload_prefix=env.get("UPLOAD_PREFIX", "uploaded/"),
            signed_url_expires=_parse_int(env, "SIGNED_URL_EXPIRES", 3600),
            batch_failure_mode=batch_failure_mode,
            max_send_workers=_parse_int(env, "MAX_SEND_WORKERS", 10),
            credentials=_parse_credentials(env.get("AUTH_CREDENTIALS", "")),
            log_level=env.get("LOG_LEVEL", "INFO"),
        )

    def require(self, name: str) -> str:
        """Return a setting that must be present for the calling component."""
        value = getattr(self, name)
        if not value:
            raise ConfigurationError(
                message=f"Missing required configuration: {name}",
                config_key=name,
            )
        return value


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(
            message=f"{key} must be an integer, got '{raw}'",
            config_key=key,
        )
    if value <= 0:
        raise ConfigurationError(
            message=f"{key} must be positive, got {value}",
            config_key=key,
        )
    return value


def _parse_credentials(raw: str) -> dict[str, str]:
    """Parse the AUTH_CREDENTIALS JSON object of username -> secret."""
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            message=f"AUTH_CREDENTIALS is not valid JSON: {e}",
            config_key="AUTH_CREDENTIALS",
        )
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise ConfigurationError(
            message="AUTH_CREDENTIALS must be a JSON object of string to string",
            config_key="AUTH_CREDENTIALS",
        )
    return data


_config: Optional[ServiceConfig] = None


def get_config() -> ServiceConfig:
    """Get or create the container-wide configuration."""
    global _config
    if _config is None:
        _config = ServiceConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration (useful for testing)."""
    global _config
    _config = None
