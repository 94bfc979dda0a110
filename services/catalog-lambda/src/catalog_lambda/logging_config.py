"""
Invocation-scoped structured logging for the catalog Lambdas.

Every record is stamped with the invocation's correlation ID, the SQS batch
ID and the message being processed, all held in context variables. Work
handed to a thread pool must go through ``submit_with_context`` or those
fields are lost.
"""

import contextvars
import functools
import json
import logging
import os
import sys
import time
import uuid
from concurrent.futures import Executor, Future
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from .exceptions import CatalogError

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")
batch_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("batch_id", default="")
message_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("message_id", default="")

# LogRecord attributes copied into the JSON document when present.
RECORD_FIELDS = (
    "event_type",
    "aws_request_id",
    "product_id",
    "s3_bucket",
    "s3_key",
    "duration_ms",
    "metrics",
    "error",
)

QUIET_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Bind a correlation ID to the current invocation, generating one if needed."""
    cid = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_batch_id(batch_id: str) -> None:
    batch_id_var.set(batch_id)


def invocation_context() -> dict:
    """Return the non-empty tracing fields bound to the current context."""
    fields = {
        "correlation_id": correlation_id_var.get(),
        "batch_id": batch_id_var.get(),
        "message_id": message_id_var.get(),
    }
    return {name: value for name, value in fields.items() if value}


@contextmanager
def message_context(message_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with an SQS message ID."""
    token = message_id_var.set(message_id)
    try:
        yield
    finally:
        message_id_var.reset(token)


def submit_with_context(executor: Executor, fn: Callable, *args, **kwargs) -> Future:
    """Submit ``fn`` to ``executor`` running in a copy of the caller's context."""
    return executor.submit(contextvars.copy_context().run, fn, *args, **kwargs)


class StructuredJsonFormatter(logging.Formatter):
    """One JSON document per record, for CloudWatch Logs Insights."""

    def __init__(self, service_name: str = "catalog-lambda"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "function": record.funcName,
            "line": record.lineno,
            **invocation_context(),
        }

        for name in RECORD_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Adapter that merges its bound fields into each record's extras."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def with_product(self, product_id: str) -> "ContextualLogger":
        return ContextualLogger(self.logger, {**self.extra, "product_id": product_id})


def get_logger(name: str) -> ContextualLogger:
    return ContextualLogger(logging.getLogger(name), {})


def configure_logging(
    level: str = "INFO",
    service_name: str = "catalog-lambda",
) -> ContextualLogger:
    """
    Install a single stdout handler on the root logger.

    JSON output is used inside Lambda (``AWS_LAMBDA_FUNCTION_NAME`` is set);
    local runs get a plain one-line format.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
        handler.setFormatter(StructuredJsonFormatter(service_name))
    else:
        handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(asctime)s - %(name)s - %(message)s")
        )
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return ContextualLogger(root_logger, {})


def log_execution_time(logger: logging.LoggerAdapter):
    """
    Log how long a Lambda entry point took.

    Client errors (a CatalogError below 500) are logged as a warning without
    a traceback; anything else is logged at ERROR with one. The exception is
    always re-raised.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except CatalogError as e:
                duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
                if e.status_code < 500:
                    logger.warning(
                        f"{func.__name__} rejected after {duration_ms}ms: {e.message}",
                        extra={"duration_ms": duration_ms},
                    )
                else:
                    logger.error(
                        f"{func.__name__} failed after {duration_ms}ms: {e.message}",
                        extra={"duration_ms": duration_ms},
                        exc_info=True,
                    )
                raise
            except Exception as e:
                duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
                logger.error(
                    f"{func.__name__} failed after {duration_ms}ms: {e}",
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                raise

            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.info(f"{func.__name__} completed", extra={"duration_ms": duration_ms})
            return result
        return wrapper
    return decorator
