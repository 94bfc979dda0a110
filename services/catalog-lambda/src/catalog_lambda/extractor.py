"""
Turns uploaded CSV files into one SQS message per row.

Rows are read sequentially from the S3 stream and their messages are sent
concurrently. A failed send is logged and counted without stopping the rest
of the file; rows are not validated here, the queue consumer does that.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from urllib.parse import unquote_plus

from botocore.exceptions import BotoCoreError, ClientError

from .config import ServiceConfig
from .exceptions import SQSError
from .logging_config import get_logger, submit_with_context
from .storage import CSV_EXTENSION, stream_csv_rows

logger = get_logger(__name__)


@dataclass
class ExtractionStats:
    """Per-object counts for one processed upload."""
    bucket: str
    key: str
    rows: int = 0
    sent: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {
            "bucket": self.bucket,
            "key": self.key,
            "rows": self.rows,
            "sent": self.sent,
            "failed": self.failed,
        }


class RowExtractor:
    """Reads uploaded CSV objects and queues their rows."""

    def __init__(self, config: ServiceConfig, s3_client, sqs_client):
        self.queue_url = config.require("queue_url")
        self.prefix = config.upload_prefix
        self.max_workers = config.max_send_workers
        self.s3 = s3_client
        self.sqs = sqs_client

    def handle_event(self, event: dict) -> list[ExtractionStats]:
        """Process every object in an S3 ObjectCreated notification."""
        results = []
        for record in event.get("Records", []):
            s3_record = record["s3"]
            bucket = s3_record["bucket"]["name"]
            key = unquote_plus(s3_record["object"]["key"])

            if not self.should_process(key):
                logger.info(
                    f"Skipping object outside import scope: {key}",
                    extra={"s3_bucket": bucket, "s3_key": key},
                )
                continue

            results.append(self.process_object(bucket, key))
        return results

    def should_process(self, key: str) -> bool:
        return key.startswith(self.prefix) and key.endswith(CSV_EXTENSION)

    def process_object(self, bucket: str, key: str) -> ExtractionStats:
        """
        Queue every row of one CSV object.

        Raises:
            S3Error: If the object cannot be read or parsed
        """
        stats = ExtractionStats(bucket=bucket, key=key)
        logger.info(
            "Processing uploaded file",
            extra={"s3_bucket": bucket, "s3_key": key},
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = []
            for row in stream_csv_rows(self.s3, bucket, key):
                stats.rows += 1
                futures.append(submit_with_context(executor, self._send_row, row, stats.rows))

            for future in futures:
                if future.result():
                    stats.sent += 1
                else:
                    stats.failed += 1

        logger.info(
            f"Finished processing {key}",
            extra={
                "s3_bucket": bucket,
                "s3_key": key,
                "metrics": stats.to_dict(),
            },
        )
        return stats

    def _send_row(self, row: dict, row_number: int) -> bool:
        try:
            self._send_message(json.dumps(row))
        except SQSError as e:
            logger.error(
                f"Error sending record {row_number} to SQS: {e.message}",
                extra={"error": e.to_dict()},
            )
            return False
        logger.debug(f"Record {row_number} sent to SQS")
        return True

    def _send_message(self, body: str) -> dict:
        try:
            return self.sqs.send_message(QueueUrl=self.queue_url, MessageBody=body)
        except (ClientError, BotoCoreError) as e:
            raise SQSError(
                message=f"Failed to send message: {e}",
                queue_url=self.queue_url,
                original_exception=e,
            )
