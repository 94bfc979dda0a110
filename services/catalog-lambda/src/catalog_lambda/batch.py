"""
SQS consumer that turns queued import rows into catalog records.

Each message is parsed, validated and written as a product plus stock pair.
What happens when a message fails depends on the configured failure mode:

- ``fail_fast``: the error propagates immediately and later messages in the
  delivery are not attempted. Products already written stay written and the
  queue's redelivery policy decides what happens next.
- ``report_partial``: every message is attempted and the failed message IDs
  are returned as an SQS partial batch response.

In both modes the notifier runs once per invocation, only when the invocation
itself succeeds and at least one product was created.
"""

from dataclasses import dataclass, field

from .config import FAIL_FAST, REPORT_PARTIAL
from .exceptions import CatalogError, ErrorContext
from .logging_config import get_correlation_id, get_logger, message_context
from .models import Product
from .notifier import ProductNotifier
from .repository import CatalogRepository
from .validation import parse_json, parse_product

logger = get_logger(__name__)


@dataclass
class BatchResult:
    """Outcome of one SQS delivery."""
    created: list[Product] = field(default_factory=list)
    failed_message_ids: list[str] = field(default_factory=list)
    notified: bool = False

    def to_response(self) -> dict:
        """SQS partial batch response (ReportBatchItemFailures)."""
        return {
            "batchItemFailures": [
                {"itemIdentifier": message_id} for message_id in self.failed_message_ids
            ]
        }


class CatalogBatchProcessor:
    """Processes a delivery of queued product messages."""

    def __init__(
        self,
        repository: CatalogRepository,
        notifier: ProductNotifier,
        failure_mode: str = FAIL_FAST,
    ):
        if failure_mode not in (FAIL_FAST, REPORT_PARTIAL):
            raise ValueError(f"Unknown failure mode: {failure_mode}")
        self.repository = repository
        self.notifier = notifier
        self.failure_mode = failure_mode

    def process(self, records: list[dict]) -> BatchResult:
        """
        Process SQS records in delivery order.

        Args:
            records: The ``Records`` list of an SQS event

        Returns:
            BatchResult with created products and failed message IDs

        Raises:
            CatalogError: In fail-fast mode, the first message failure
        """
        result = BatchResult()
        logger.info(f"Processing {len(records)} messages")

        for record in records:
            message_id = record.get("messageId", "")
            with message_context(message_id):
                try:
                    product = self.process_record(record)
                except CatalogError as e:
                    logger.error(
                        f"Error processing message {message_id}: {e.message}",
                        extra={"error": e.to_dict()},
                    )
                    if self.failure_mode == FAIL_FAST:
                        raise
                    result.failed_message_ids.append(message_id)
                    continue
            result.created.append(product)

        logger.info(
            f"Finished processing {len(records)} messages",
            extra={
                "metrics": {
                    "created": len(result.created),
                    "failed": len(result.failed_message_ids),
                    "total": len(records),
                }
            },
        )

        if result.created:
            result.notified = self.notifier.notify(result.created)
        return result

    def process_record(self, record: dict) -> Product:
        """Validate one SQS message and store it as a product."""
        context = ErrorContext(
            correlation_id=get_correlation_id(),
            message_id=record.get("messageId"),
        )
        data = parse_json(record.get("body"), field_name="body", context=context)
        product = parse_product(data, context=context)
        return self.repository.create_product(product)
