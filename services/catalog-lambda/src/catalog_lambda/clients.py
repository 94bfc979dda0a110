"""AWS client construction shared by every handler."""

import boto3
from botocore.config import Config

from .config import ServiceConfig

boto_config = Config(
    retries={"max_attempts": 3, "mode": "adaptive"},
    connect_timeout=10,
    read_timeout=60,
)


class AWSClientFactory:
    """Factory for creating AWS clients with proper configuration."""

    _clients: dict = {}

    @classmethod
    def _get_client(cls, service: str, config: ServiceConfig):
        key = (service, config.region, config.endpoint_url)
        if key not in cls._clients:
            kwargs = {"config": boto_config, "region_name": config.region}
            if config.endpoint_url:
                kwargs["endpoint_url"] = config.endpoint_url
            cls._clients[key] = boto3.client(service, **kwargs)
        return cls._clients[key]

    @classmethod
    def get_s3_client(cls, config: ServiceConfig):
        """Get or create S3 client."""
        return cls._get_client("s3", config)

    @classmethod
    def get_sqs_client(cls, config: ServiceConfig):
        """Get or create SQS client."""
        return cls._get_client("sqs", config)

    @classmethod
    def get_dynamodb_client(cls, config: ServiceConfig):
        """Get or create DynamoDB client."""
        return cls._get_client("dynamodb", config)

    @classmethod
    def get_sns_client(cls, config: ServiceConfig):
        """Get or create SNS client."""
        return cls._get_client("sns", config)

    @classmethod
    def reset(cls):
        """Reset clients (useful for testing)."""
        cls._clients = {}
