"""
DynamoDB access for the catalog: the products table and the stock table.

A product and its stock row are always created together in a single
transaction. Reads join the two tables one product at a time.
"""

import uuid
from decimal import Decimal
from typing import Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from .clients import AWSClientFactory
from .config import ServiceConfig
from .exceptions import DynamoDBError, ProductNotFoundError
from .logging_config import get_logger
from .models import NewProduct, Product

logger = get_logger(__name__)


class CatalogRepository:
    """Reads and writes catalog records."""

    def __init__(self, config: ServiceConfig, dynamodb_client=None):
        self.products_table = config.products_table
        self.stock_table = config.stock_table
        self.dynamodb = dynamodb_client or AWSClientFactory.get_dynamodb_client(config)
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def create_product(self, product: NewProduct, product_id: Optional[str] = None) -> Product:
        """
        Store a new product and its stock count atomically.

        Args:
            product: Validated product payload
            product_id: Identifier to use; a UUID4 is generated when omitted

        Returns:
            The stored product including its count

        Raises:
            DynamoDBError: If the transaction is rejected or the call fails
        """
        product_id = product_id or str(uuid.uuid4())
        product_item = {
            "id": product_id,
            "title": product.title,
            "description": product.description,
            "price": Decimal(str(product.price)),
        }
        stock_item = {"product_id": product_id, "count": product.count}

        try:
            self.dynamodb.transact_write_items(
                TransactItems=[
                    {"Put": {"TableName": self.products_table, "Item": self._serialize(product_item)}},
                    {"Put": {"TableName": self.stock_table, "Item": self._serialize(stock_item)}},
                ]
            )
        except (ClientError, BotoCoreError) as e:
            raise DynamoDBError(
                message=f"Failed to create product {product_id}: {e}",
                table_names=[self.products_table, self.stock_table],
                operation="TransactWriteItems",
                product_id=product_id,
                original_exception=e,
            )

        logger.with_product(product_id).info(
            f"Created product '{product.title}' with count {product.count}"
        )
        return Product.from_new(product_id, product)

    def list_products(self) -> list[Product]:
        """Return every product, each joined with its stock count."""
        items = []
        try:
            paginator = self.dynamodb.get_paginator("scan")
            for page in paginator.paginate(TableName=self.products_table):
                items.extend(page.get("Items", []))
        except (ClientError, BotoCoreError) as e:
            raise DynamoDBError(
                message=f"Failed to scan products: {e}",
                table_names=[self.products_table],
                operation="Scan",
                original_exception=e,
            )

        products = []
        for item in items:
            record = self._deserialize(item)
            record["count"] = self.get_stock_count(record["id"])
            products.append(Product.model_validate(record))

        logger.info(
            f"Listed {len(products)} products",
            extra={"metrics": {"product_count": len(products)}},
        )
        return products

    def get_product(self, product_id: str) -> Product:
        """
        Return one product joined with its stock count.

        Raises:
            ProductNotFoundError: If no product has this identifier
        """
        try:
            response = self.dynamodb.get_item(
                TableName=self.products_table,
                Key=self._serialize({"id": product_id}),
            )
        except (ClientError, BotoCoreError) as e:
            raise DynamoDBError(
                message=f"Failed to get product {product_id}: {e}",
                table_names=[self.products_table],
                operation="GetItem",
                product_id=product_id,
                original_exception=e,
            )

        item = response.get("Item")
        if not item:
            raise ProductNotFoundError(product_id)

        record = self._deserialize(item)
        record["count"] = self.get_stock_count(product_id)
        return Product.model_validate(record)

    def get_stock_count(self, product_id: str) -> int:
        """Return the stock count for a product, zero when no stock row exists."""
        try:
            response = self.dynamodb.get_item(
                TableName=self.stock_table,
                Key=self._serialize({"product_id": product_id}),
            )
        except (ClientError, BotoCoreError) as e:
            raise DynamoDBError(
                message=f"Failed to get stock for product {product_id}: {e}",
                table_names=[self.stock_table],
                operation="GetItem",
                product_id=product_id,
                original_exception=e,
            )

        item = response.get("Item")
        if not item or "count" not in item:
            return 0
        return int(self._deserializer.deserialize(item["count"]))

    def _serialize(self, record: dict) -> dict:
        return {k: self._serializer.serialize(v) for k, v in record.items()}

    def _deserialize(self, item: dict) -> dict:
        return {k: self._deserializer.deserialize(v) for k, v in item.items()}
