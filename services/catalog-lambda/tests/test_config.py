"""Tests for ServiceConfig."""

import pytest

from catalog_lambda.config import FAIL_FAST, REPORT_PARTIAL, ServiceConfig
from catalog_lambda.exceptions import ConfigurationError


class TestServiceConfig:
    """Tests for ServiceConfig.from_env."""

    def test_defaults(self):
        """Test an empty environment yields documented defaults."""
        config = ServiceConfig.from_env({})

        assert config.region == "us-east-1"
        assert config.products_table == "products"
        assert config.stock_table == "stock"
        assert config.upload_prefix == "uploaded/"
        assert config.signed_url_expires == 3600
        assert config.batch_failure_mode == FAIL_FAST
        assert config.sns_topic_arn is None
        assert config.credentials == {}

    def test_reads_environment(self):
        config = ServiceConfig.from_env({
            "AWS_REGION": "eu-west-1",
            "PRODUCTS_TABLE_NAME": "p",
            "STOCK_TABLE_NAME": "s",
            "SNS_TOPIC_ARN": "arn:topic",
            "BATCH_FAILURE_MODE": "REPORT_PARTIAL",
            "SIGNED_URL_EXPIRES": "600",
            "AUTH_CREDENTIALS": '{"kas_s": "TEST_PASSWORD"}',
        })

        assert config.region == "eu-west-1"
        assert config.products_table == "p"
        assert config.stock_table == "s"
        assert config.sns_topic_arn == "arn:topic"
        assert config.batch_failure_mode == REPORT_PARTIAL
        assert config.signed_url_expires == 600
        assert config.credentials == {"kas_s": "TEST_PASSWORD"}

    def test_empty_topic_means_unset(self):
        assert ServiceConfig.from_env({"SNS_TOPIC_ARN": ""}).sns_topic_arn is None

    @pytest.mark.parametrize(
        "env, key",
        [
            ({"BATCH_FAILURE_MODE": "skip"}, "BATCH_FAILURE_MODE"),
            ({"SIGNED_URL_EXPIRES": "soon"}, "SIGNED_URL_EXPIRES"),
            ({"MAX_SEND_WORKERS": "0"}, "MAX_SEND_WORKERS"),
            ({"AUTH_CREDENTIALS": "not json"}, "AUTH_CREDENTIALS"),
            ({"AUTH_CREDENTIALS": '["kas_s"]'}, "AUTH_CREDENTIALS"),
            ({"AUTH_CREDENTIALS": '{"kas_s": 1}'}, "AUTH_CREDENTIALS"),
        ],
    )
    def test_invalid_values_rejected(self, env, key):
        with pytest.raises(ConfigurationError) as exc_info:
            ServiceConfig.from_env(env)

        assert exc_info.value.config_key == key

    def test_require_missing_setting(self):
        with pytest.raises(ConfigurationError, match="queue_url"):
            ServiceConfig.from_env({}).require("queue_url")
