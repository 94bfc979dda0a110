"""
Custom exceptions for the product catalog service.
Provides structured error handling with rich context for debugging and monitoring.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from enum import Enum


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for routing and handling."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    AWS_SERVICE = "aws_service"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error tracking and debugging."""
    correlation_id: Optional[str] = None
    product_id: Optional[str] = None
    field_name: Optional[str] = None
    expected_type: Optional[str] = None
    actual_value: Optional[Any] = None
    message_id: Optional[str] = None
    s3_bucket: Optional[str] = None
    s3_key: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    additional_data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert context to dictionary for logging."""
        return {
            "correlation_id": self.correlation_id,
            "product_id": self.product_id,
            "field_name": self.field_name,
            "expected_type": self.expected_type,
            "actual_value": str(self.actual_value) if self.actual_value is not None else None,
            "message_id": self.message_id,
            "s3_bucket": self.s3_bucket,
            "s3_key": self.s3_key,
            "timestamp": self.timestamp,
            **self.additional_data,
        }


class CatalogError(Exception):
    """Base exception for all catalog service errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.VALIDATION,
        retryable: bool = False,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable
        self.original_exception = original_exception

    def to_dict(self) -> dict:
        """Serialize exception for logging and monitoring."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "retryable": self.retryable,
            "status_code": self.status_code,
            "context": self.context.to_dict(),
            "original_exception": str(self.original_exception) if self.original_exception else None,
        }


class ValidationError(CatalogError):
    """Raised when client input fails validation."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field_name: str,
        expected: str,
        actual: Any = None,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.field_name = field_name
        ctx.expected_type = expected
        ctx.actual_value = actual

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )
        self.field_name = field_name
        self.expected = expected
        self.actual = actual


class ProductNotFoundError(CatalogError):
    """Raised when a product identifier has no matching record."""

    status_code = 404

    def __init__(self, product_id: str, context: Optional[ErrorContext] = None):
        ctx = context or ErrorContext()
        ctx.product_id = product_id

        super().__init__(
            message="Product not found",
            context=ctx,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.NOT_FOUND,
            retryable=False,
        )
        self.product_id = product_id


class AuthenticationError(CatalogError):
    """
    Raised when an authorization token is missing or malformed.

    API Gateway turns an authorizer failure whose message is exactly
    "Unauthorized" into a 401, which is why the message is fixed.
    """

    status_code = 401

    def __init__(self, reason: str, context: Optional[ErrorContext] = None):
        ctx = context or ErrorContext()
        ctx.additional_data["reason"] = reason

        super().__init__(
            message="Unauthorized",
            context=ctx,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.AUTHENTICATION,
            retryable=False,
        )
        self.reason = reason


class AWSServiceError(CatalogError):
    """Raised when AWS service calls fail."""

    def __init__(
        self,
        message: str,
        service_name: str,
        operation: str,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.additional_data["aws_service"] = service_name
        ctx.additional_data["operation"] = operation

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.AWS_SERVICE,
            retryable=True,
            original_exception=original_exception,
        )
        self.service_name = service_name
        self.operation = operation


class S3Error(AWSServiceError):
    """Raised when S3 operations fail."""

    def __init__(
        self,
        message: str,
        bucket: str,
        key: str,
        operation: str = "GetObject",
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.s3_bucket = bucket
        ctx.s3_key = key

        super().__init__(
            message=message,
            service_name="S3",
            operation=operation,
            context=ctx,
            original_exception=original_exception,
        )


class SQSError(AWSServiceError):
    """Raised when SQS operations fail."""

    def __init__(
        self,
        message: str,
        queue_url: str,
        operation: str = "SendMessage",
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.additional_data["queue_url"] = queue_url

        super().__init__(
            message=message,
            service_name="SQS",
            operation=operation,
            context=ctx,
            original_exception=original_exception,
        )


class DynamoDBError(AWSServiceError):
    """Raised when DynamoDB operations fail."""

    def __init__(
        self,
        message: str,
        table_names: list[str],
        operation: str,
        product_id: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        ctx.additional_data["tables"] = table_names

        super().__init__(
            message=message,
            service_name="DynamoDB",
            operation=operation,
            context=ctx,
            original_exception=original_exception,
        )


class SNSError(AWSServiceError):
    """Raised when SNS operations fail."""

    def __init__(
        self,
        message: str,
        topic_arn: str,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.additional_data["topic_arn"] = topic_arn

        super().__init__(
            message=message,
            service_name="SNS",
            operation="Publish",
            context=ctx,
            original_exception=original_exception,
        )


class ConfigurationError(CatalogError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: str,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.additional_data["config_key"] = config_key

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )
        self.config_key = config_key
