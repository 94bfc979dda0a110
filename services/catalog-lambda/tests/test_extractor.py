"""Tests for the CSV row extractor."""

import json
from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from catalog_lambda.exceptions import S3Error
from catalog_lambda.extractor import RowExtractor
from catalog_lambda.logging_config import get_correlation_id, set_correlation_id
from conftest import make_s3_event

CSV_CONTENT = (
    b"\xef\xbb\xbftitle,description,price,count\r\n"
    b"Lamp,Desk lamp,1500,4\r\n"
    b'"Chair, oak","Solid ""oak"" chair",9900,\r\n'
    b"Desk,Standing desk,25000,2\r\n"
)


def make_s3_client(content: bytes = CSV_CONTENT) -> MagicMock:
    s3 = MagicMock()
    body = MagicMock()
    body.iter_lines.return_value = iter(content.splitlines(keepends=True))
    s3.get_object.return_value = {"Body": body}
    return s3


@pytest.fixture
def sqs_client():
    client = MagicMock()
    client.send_message.return_value = {"MessageId": "m-1"}
    return client


def sent_bodies(sqs_client) -> list[dict]:
    return [
        json.loads(call.kwargs["MessageBody"])
        for call in sqs_client.send_message.call_args_list
    ]


class TestRowExtractor:
    """Tests for RowExtractor."""

    def test_queues_one_message_per_row(self, config, sqs_client):
        """Test every CSV row becomes one SQS message keyed by header."""
        s3 = make_s3_client()
        extractor = RowExtractor(config, s3, sqs_client)

        results = extractor.handle_event(make_s3_event("uploaded/products.csv"))

        assert len(results) == 1
        assert results[0].to_dict() == {
            "bucket": "test-bucket",
            "key": "uploaded/products.csv",
            "rows": 3,
            "sent": 3,
            "failed": 0,
        }
        s3.get_object.assert_called_once_with(Bucket="test-bucket", Key="uploaded/products.csv")

        bodies = sorted(sent_bodies(sqs_client), key=lambda b: b["title"])
        assert bodies == [
            {"title": "Chair, oak", "description": 'Solid "oak" chair', "price": "9900", "count": ""},
            {"title": "Desk", "description": "Standing desk", "price": "25000", "count": "2"},
            {"title": "Lamp", "description": "Desk lamp", "price": "1500", "count": "4"},
        ]
        for call in sqs_client.send_message.call_args_list:
            assert call.kwargs["QueueUrl"] == config.queue_url

    def test_send_failure_does_not_stop_other_rows(self, config, sqs_client):
        """Test a failed send is counted and the remaining rows still go out."""
        sqs_client.send_message.side_effect = [
            {"MessageId": "m-1"},
            ClientError({"Error": {"Code": "Throttling", "Message": "slow down"}}, "SendMessage"),
            {"MessageId": "m-3"},
        ]
        extractor = RowExtractor(replace(config, max_send_workers=1), make_s3_client(), sqs_client)

        stats = extractor.process_object("test-bucket", "uploaded/products.csv")

        assert stats.rows == 3
        assert stats.sent == 2
        assert stats.failed == 1
        assert sqs_client.send_message.call_count == 3

    @pytest.mark.parametrize(
        "key",
        ["products.csv", "other/products.csv", "uploaded/products.txt", "uploaded/.keep"],
    )
    def test_skips_objects_outside_import_scope(self, config, sqs_client, key):
        """Test objects outside the prefix or without .csv are ignored."""
        s3 = make_s3_client()
        extractor = RowExtractor(config, s3, sqs_client)

        assert extractor.handle_event(make_s3_event(key)) == []
        s3.get_object.assert_not_called()
        sqs_client.send_message.assert_not_called()

    def test_url_encoded_key_is_decoded(self, config, sqs_client):
        """Test S3 notification keys are URL-decoded before reading."""
        s3 = make_s3_client()
        extractor = RowExtractor(config, s3, sqs_client)

        extractor.handle_event(make_s3_event("uploaded/my+products%282%29.csv"))

        s3.get_object.assert_called_once_with(Bucket="test-bucket", Key="uploaded/my products(2).csv")

    def test_processes_every_record(self, config, sqs_client):
        s3 = MagicMock()
        s3.get_object.side_effect = lambda Bucket, Key: {
            "Body": MagicMock(iter_lines=MagicMock(return_value=iter([b"title\n", b"A\n"])))
        }
        extractor = RowExtractor(config, s3, sqs_client)

        results = extractor.handle_event(make_s3_event("uploaded/a.csv", "uploaded/b.csv"))

        assert [r.key for r in results] == ["uploaded/a.csv", "uploaded/b.csv"]
        assert sqs_client.send_message.call_count == 2

    def test_send_threads_keep_correlation_id(self, config, sqs_client):
        """Test rows sent from the pool are logged under the invocation's correlation ID."""
        seen = []
        sqs_client.send_message.side_effect = lambda **kwargs: seen.append(get_correlation_id())
        set_correlation_id("req-123")

        RowExtractor(config, make_s3_client(), sqs_client).process_object(
            "test-bucket", "uploaded/products.csv"
        )

        assert seen == ["req-123"] * 3

    def test_header_only_file(self, config, sqs_client):
        extractor = RowExtractor(config, make_s3_client(b"title,description,price\n"), sqs_client)

        stats = extractor.process_object("test-bucket", "uploaded/empty.csv")

        assert stats.rows == 0
        sqs_client.send_message.assert_not_called()

    def test_download_failure_raises(self, config, sqs_client):
        """Test S3 read errors fail the invocation."""
        s3 = MagicMock()
        s3.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        extractor = RowExtractor(config, s3, sqs_client)

        with pytest.raises(S3Error) as exc_info:
            extractor.process_object("test-bucket", "uploaded/products.csv")

        assert exc_info.value.context.s3_key == "uploaded/products.csv"
        sqs_client.send_message.assert_not_called()
