"""Best-effort SNS notification about newly created products."""

from typing import Optional

from .exceptions import SNSError
from .logging_config import get_logger
from .models import Product

logger = get_logger(__name__)

PREMIUM_PRICE_THRESHOLD = 100


def build_subject(products: list[Product]) -> str:
    """Subject line with a pluralized product count."""
    count = len(products)
    return f"{count} New Product{'s' if count > 1 else ''} Created"


def build_message(products: list[Product]) -> str:
    """Plain-text body enumerating each created product."""
    lines = ["New products have been successfully created in the catalog:", ""]
    for index, product in enumerate(products, start=1):
        lines.extend([
            f"{index}. {product.title}",
            f"   - ID: {product.id}",
            f"   - Price: ${product.price:.2f}",
            f"   - Stock Count: {product.count}",
            "",
        ])
    lines.append(f"Total products created: {len(products)}")
    lines.append("")
    lines.append("This is an automated notification from the Product Catalog Service.")
    return "\n".join(lines)


def build_message_attributes(products: list[Product]) -> dict:
    """Attributes that topic subscriptions filter on."""
    max_price = max(p.price for p in products)
    return {
        "price": {"DataType": "Number", "StringValue": str(max_price)},
        "isPremium": {
            "DataType": "String",
            "StringValue": "true" if max_price > PREMIUM_PRICE_THRESHOLD else "false",
        },
        "productCount": {"DataType": "Number", "StringValue": str(len(products))},
    }


class ProductNotifier:
    """Publishes a summary of created products to an SNS topic."""

    def __init__(self, topic_arn: Optional[str], sns_client=None):
        self.topic_arn = topic_arn
        self.sns = sns_client

    def notify(self, products: list[Product]) -> bool:
        """
        Publish a created-products summary.

        Failures are logged and discarded; a notification never fails the
        invocation that produced the products.

        Returns:
            True if a message was published
        """
        if not products:
            return False

        if not self.topic_arn:
            logger.warning("SNS_TOPIC_ARN not configured, skipping notification")
            return False

        try:
            self._publish(products)
        except SNSError as e:
            logger.error(
                f"Failed to send product notification: {e.message}",
                extra={"error": e.to_dict()},
            )
            return False

        logger.info(
            f"Notification sent for {len(products)} products",
            extra={"metrics": {"notified_products": len(products)}},
        )
        return True

    def _publish(self, products: list[Product]) -> dict:
        try:
            return self.sns.publish(
                TopicArn=self.topic_arn,
                Subject=build_subject(products),
                Message=build_message(products),
                MessageAttributes=build_message_attributes(products),
            )
        except Exception as e:
            raise SNSError(
                message=f"Failed to publish to SNS: {e}",
                topic_arn=self.topic_arn,
                original_exception=e,
            )
