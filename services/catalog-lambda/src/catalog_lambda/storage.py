"""
S3 access for product imports: presigned upload URLs and streamed CSV reads.
"""

import codecs
import csv
from typing import Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .config import ServiceConfig
from .exceptions import S3Error, ValidationError
from .logging_config import get_logger
from .models import UploadTarget

logger = get_logger(__name__)

CSV_EXTENSION = ".csv"
CSV_CONTENT_TYPE = "text/csv"


class UploadStager:
    """Issues time-limited URLs that clients use to upload import files."""

    def __init__(self, config: ServiceConfig, s3_client):
        self.bucket = config.require("bucket_name")
        self.prefix = config.upload_prefix
        self.expires_in = config.signed_url_expires
        self.s3 = s3_client

    def create_upload_url(self, file_name: Optional[str]) -> UploadTarget:
        """
        Validate the file name and presign a PUT for ``<prefix><file_name>``.

        Raises:
            ValidationError: If the name is missing or not a .csv file
            S3Error: If presigning fails
        """
        if not file_name:
            raise ValidationError(
                message="Missing required query parameter: name",
                field_name="name",
                expected="file name",
                actual=file_name,
            )
        if not file_name.endswith(CSV_EXTENSION):
            raise ValidationError(
                message="File must be a CSV file",
                field_name="name",
                expected=f"*{CSV_EXTENSION}",
                actual=file_name,
            )

        key = f"{self.prefix}{file_name}"
        try:
            signed_url = self.s3.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ContentType": CSV_CONTENT_TYPE,
                },
                ExpiresIn=self.expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise S3Error(
                message=f"Failed to create signed URL: {e}",
                bucket=self.bucket,
                key=key,
                operation="PutObject",
                original_exception=e,
            )

        logger.info(
            f"Issued upload URL valid for {self.expires_in}s",
            extra={"s3_bucket": self.bucket, "s3_key": key},
        )
        return UploadTarget(signed_url=signed_url, key=key)


def stream_csv_rows(s3_client, bucket: str, key: str) -> Iterator[dict]:
    """
    Stream a CSV object from S3 as header-keyed rows.

    The body is decoded incrementally so large files are never held in memory.

    Raises:
        S3Error: If the object cannot be fetched or read
    """
    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
        raise S3Error(
            message=f"Failed to download from S3: {e}",
            bucket=bucket,
            key=key,
            original_exception=e,
        )

    lines = codecs.iterdecode(
        response["Body"].iter_lines(keepends=True),
        "utf-8-sig",
    )
    try:
        yield from csv.DictReader(lines)
    except (ClientError, BotoCoreError, UnicodeDecodeError, csv.Error) as e:
        raise S3Error(
            message=f"Failed to read CSV object: {e}",
            bucket=bucket,
            key=key,
            original_exception=e,
        )
