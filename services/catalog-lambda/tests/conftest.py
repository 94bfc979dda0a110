"""Pytest fixtures and configuration."""

import base64
import json
import os
from unittest.mock import MagicMock

import pytest

os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["PRODUCTS_TABLE_NAME"] = "test-products-table"
os.environ["STOCK_TABLE_NAME"] = "test-stock-table"
os.environ["BUCKET_NAME"] = "test-bucket"
os.environ["QUEUE_URL"] = "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue"
os.environ["SNS_TOPIC_ARN"] = "arn:aws:sns:us-east-1:123456789012:test-topic"
os.environ["AUTH_CREDENTIALS"] = json.dumps({"kas_s": "TEST_PASSWORD"})

from catalog_lambda.clients import AWSClientFactory  # noqa: E402
from catalog_lambda.config import ServiceConfig, reset_config  # noqa: E402
from catalog_lambda.logging_config import batch_id_var, correlation_id_var  # noqa: E402

METHOD_ARN = "arn:aws:execute-api:us-east-1:123456789012:abcdef/prod/GET/import"


@pytest.fixture(autouse=True)
def reset_cached_state():
    """Drop cached configuration, AWS clients and tracing IDs between tests."""
    reset_config()
    AWSClientFactory.reset()
    correlation_id_var.set("")
    batch_id_var.set("")
    yield
    reset_config()
    AWSClientFactory.reset()


@pytest.fixture
def config():
    """Return a configuration built from the test environment."""
    return ServiceConfig.from_env()


@pytest.fixture
def dynamodb_client():
    """Return a DynamoDB client double with empty responses."""
    client = MagicMock()
    client.transact_write_items.return_value = {}
    client.get_item.return_value = {}
    client.get_paginator.return_value.paginate.return_value = [{"Items": []}]
    return client


@pytest.fixture
def valid_product_payload():
    """Return a valid product payload."""
    return {
        "title": "Test Product",
        "description": "Test Description",
        "price": 29.99,
        "count": 10,
    }


@pytest.fixture
def sample_products_payloads():
    """Return a batch of valid product payloads."""
    return [
        {"title": "Samsung Galaxy S21", "description": "Flagship smartphone", "price": 79999, "count": 50},
        {"title": "Apple AirPods Pro", "description": "Wireless earbuds", "price": 24999, "count": "100"},
        {"title": "Sony PlayStation 5", "description": "Next-gen gaming console", "price": "49999"},
    ]


def make_sqs_event(bodies: list) -> dict:
    """Build an SQS event; dict bodies are JSON-encoded, strings are used as is."""
    return {
        "Records": [
            {
                "messageId": f"message-{index}",
                "receiptHandle": f"receipt-{index}",
                "body": body if isinstance(body, str) else json.dumps(body),
                "attributes": {"ApproximateReceiveCount": "1"},
                "messageAttributes": {},
                "eventSource": "aws:sqs",
                "eventSourceARN": "arn:aws:sqs:us-east-1:123456789012:test-queue",
                "awsRegion": "us-east-1",
            }
            for index, body in enumerate(bodies)
        ]
    }


def make_s3_event(*keys: str, bucket: str = "test-bucket") -> dict:
    """Build an S3 ObjectCreated event for the given (URL-encoded) keys."""
    return {
        "Records": [
            {
                "eventName": "ObjectCreated:Put",
                "s3": {
                    "bucket": {"name": bucket},
                    "object": {"key": key},
                },
            }
            for key in keys
        ]
    }


def make_api_event(
    method: str = "GET",
    path: str = "/products",
    body=None,
    path_parameters=None,
    query=None,
) -> dict:
    """Build an API Gateway proxy event."""
    return {
        "httpMethod": method,
        "path": path,
        "body": body if body is None or isinstance(body, str) else json.dumps(body),
        "isBase64Encoded": False,
        "headers": {},
        "pathParameters": path_parameters,
        "queryStringParameters": query,
        "requestContext": {"domainName": "api.example.com", "stage": "prod"},
    }


def basic_token(username: str, password: str) -> str:
    """Encode credentials as a Basic authorization token."""
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode()
    return f"Basic {encoded}"


def dynamo_product_item(product_id: str, title: str, price: str, description: str = "desc") -> dict:
    """Return a products table item in DynamoDB wire format."""
    return {
        "id": {"S": product_id},
        "title": {"S": title},
        "description": {"S": description},
        "price": {"N": price},
    }


def dynamo_stock_item(product_id: str, count: int) -> dict:
    """Return a stock table item in DynamoDB wire format."""
    return {"product_id": {"S": product_id}, "count": {"N": str(count)}}
