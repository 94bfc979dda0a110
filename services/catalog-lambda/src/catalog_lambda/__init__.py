"""
Product Catalog Lambdas - AWS Serverless catalog and CSV import service.

This package provides the product catalog API, the CSV bulk import pipeline
(S3 upload -> SQS -> DynamoDB -> SNS) and a Basic token authorizer for
API Gateway.
"""

from .exceptions import (
    AuthenticationError,
    AWSServiceError,
    CatalogError,
    ConfigurationError,
    DynamoDBError,
    ProductNotFoundError,
    S3Error,
    SNSError,
    SQSError,
    ValidationError,
)
from .handler import (
    basic_authorizer,
    catalog_batch_process,
    create_product,
    get_products_by_id,
    get_products_list,
    import_file_parser,
    import_products_file,
    swagger_docs,
)
from .models import NewProduct, Product

__all__ = [
    "basic_authorizer",
    "catalog_batch_process",
    "create_product",
    "get_products_by_id",
    "get_products_list",
    "import_file_parser",
    "import_products_file",
    "swagger_docs",
    "NewProduct",
    "Product",
    "CatalogError",
    "ValidationError",
    "ProductNotFoundError",
    "AuthenticationError",
    "AWSServiceError",
    "S3Error",
    "SQSError",
    "DynamoDBError",
    "SNSError",
    "ConfigurationError",
]

__version__ = "1.0.0"
