"""
AWS Lambda handlers for the product catalog service.

HTTP handlers (API Gateway proxy integration):
    get_products_list, get_products_by_id, create_product,
    import_products_file, swagger_docs

Event handlers:
    import_file_parser   - S3 ObjectCreated under the upload prefix
    catalog_batch_process - SQS delivery of queued import rows
    basic_authorizer     - API Gateway TOKEN authorizer
"""

import base64
import functools
import os
import uuid
from typing import Any, Callable

from .authorizer import BasicAuthorizer
from .batch import CatalogBatchProcessor
from .clients import AWSClientFactory
from .config import get_config
from .docs import API_VERSION, SWAGGER_UI_HTML, build_openapi_spec
from .exceptions import CatalogError, ValidationError
from .extractor import RowExtractor
from .logging_config import (
    configure_logging,
    log_execution_time,
    set_batch_id,
    set_correlation_id,
)
from .notifier import ProductNotifier
from .repository import CatalogRepository
from .responses import build_response, error_response
from .storage import UploadStager
from .validation import parse_json, parse_product

logger = configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    service_name="catalog-lambda",
)


def _start_invocation(event: dict, context: Any) -> str:
    """Bind a correlation ID for the invocation and log its start."""
    request_id = getattr(context, "aws_request_id", None) if context else None
    correlation_id = set_correlation_id(request_id)
    logger.info(
        "Lambda invocation started",
        extra={
            "event_type": "lambda_start",
            "aws_request_id": request_id,
        },
    )
    return correlation_id


def api_handler(func: Callable[[dict, Any], dict]) -> Callable[[dict, Any], dict]:
    """
    Wrap an API Gateway handler with error-to-status mapping.

    CatalogError subclasses carry their own status code; anything else is
    logged with its traceback and reported as a 500.
    """

    @functools.wraps(func)
    def wrapper(event: dict, context: Any) -> dict:
        _start_invocation(event, context)
        try:
            return func(event, context)
        except CatalogError as e:
            log = logger.warning if e.status_code < 500 else logger.error
            log(f"{func.__name__} failed: {e.message}", extra={"error": e.to_dict()})
            message = e.message if e.status_code < 500 else "Internal server error"
            return error_response(e.status_code, message)
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            return error_response(500, "Internal server error")

    return wrapper


def _repository() -> CatalogRepository:
    config = get_config()
    return CatalogRepository(config, AWSClientFactory.get_dynamodb_client(config))


def _request_body(event: dict) -> str:
    body = event.get("body") or "{}"
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


@log_execution_time(logger)
@api_handler
def get_products_list(event: dict, context: Any) -> dict:
    """GET /products"""
    products = _repository().list_products()
    return build_response(200, [p.to_response() for p in products])


@log_execution_time(logger)
@api_handler
def get_products_by_id(event: dict, context: Any) -> dict:
    """GET /products/{productId}"""
    product_id = (event.get("pathParameters") or {}).get("productId")
    if not product_id:
        raise ValidationError(
            message="Product ID is required",
            field_name="productId",
            expected="path parameter",
        )
    product = _repository().get_product(product_id)
    return build_response(200, product.to_response())


@log_execution_time(logger)
@api_handler
def create_product(event: dict, context: Any) -> dict:
    """POST /products"""
    data = parse_json(_request_body(event))
    product = parse_product(data)
    created = _repository().create_product(product)
    return build_response(201, created.to_response())


@log_execution_time(logger)
@api_handler
def import_products_file(event: dict, context: Any) -> dict:
    """GET /import?name=<file>"""
    config = get_config()
    file_name = (event.get("queryStringParameters") or {}).get("name")
    stager = UploadStager(config, AWSClientFactory.get_s3_client(config))
    target = stager.create_upload_url(file_name)
    return build_response(200, target.to_response())


@api_handler
def swagger_docs(event: dict, context: Any) -> dict:
    """GET /swagger.json, /openapi.json, /docs"""
    path = event.get("path") or ""

    if event.get("httpMethod") == "OPTIONS":
        return build_response(200, "", content_type="text/plain")

    if path.endswith("/swagger.json") or path.endswith("/openapi.json"):
        return build_response(200, build_openapi_spec())

    if path.endswith(("/docs", "/swagger", "/api-docs")):
        return build_response(200, SWAGGER_UI_HTML, content_type="text/html")

    request_context = event.get("requestContext") or {}
    base_url = f"{request_context.get('domainName', '')}/{request_context.get('stage', '')}"
    return build_response(
        200,
        {
            "message": "Product Service API Documentation",
            "endpoints": {
                "swagger_ui": f"{base_url}/docs",
                "swagger_json": f"{base_url}/swagger.json",
                "openapi_json": f"{base_url}/openapi.json",
            },
            "version": API_VERSION,
        },
    )


@log_execution_time(logger)
def import_file_parser(event: dict, context: Any) -> dict:
    """
    S3 trigger: queue every row of each uploaded CSV file.

    Read failures propagate so the invocation is reported as failed.
    """
    _start_invocation(event, context)
    config = get_config()
    extractor = RowExtractor(
        config,
        s3_client=AWSClientFactory.get_s3_client(config),
        sqs_client=AWSClientFactory.get_sqs_client(config),
    )
    results = extractor.handle_event(event)
    return {"processed": [stats.to_dict() for stats in results]}


@log_execution_time(logger)
def catalog_batch_process(event: dict, context: Any) -> dict:
    """
    SQS trigger: create a product for every queued message.

    Returns an SQS partial batch response. In fail-fast mode the first
    invalid message raises instead, failing the whole delivery.
    """
    _start_invocation(event, context)
    set_batch_id(str(uuid.uuid4()))

    config = get_config()
    notifier = ProductNotifier(
        config.sns_topic_arn,
        AWSClientFactory.get_sns_client(config) if config.sns_topic_arn else None,
    )
    processor = CatalogBatchProcessor(
        _repository(),
        notifier,
        failure_mode=config.batch_failure_mode,
    )
    result = processor.process(event.get("Records") or [])
    return result.to_response()


def basic_authorizer(event: dict, context: Any) -> dict:
    """
    API Gateway TOKEN authorizer for Basic credentials.

    Raises AuthenticationError ("Unauthorized") for missing or malformed
    tokens; returns an Allow or Deny policy otherwise.
    """
    _start_invocation(event, context)
    authorizer = BasicAuthorizer(get_config().credentials)
    return authorizer.authorize(event.get("authorizationToken"), event.get("methodArn", ""))
