import json
import time
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from roof_estimator.storage.results import InMemoryResultStore, S3ResultStore
from roof_estimator.storage.s3 import S3Storage, S3StorageError


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_in_memory_put_get():
    store = InMemoryResultStore()
    store.put("a", {"status": "ok"})
    assert store.get("a") == {"status": "ok"}
    assert store.get("missing") is None


def test_in_memory_entries_expire():
    clock = FakeClock()
    store = InMemoryResultStore(ttl_seconds=60, clock=clock)
    store.put("a", {"n": 1})

    clock.now += 59
    assert store.get("a") == {"n": 1}
    clock.now += 1
    assert store.get("a") is None
    assert len(store) == 0


def test_in_memory_evicts_oldest_when_full():
    store = InMemoryResultStore(max_entries=2)
    store.put("a", {"n": 1})
    store.put("b", {"n": 2})
    store.put("c", {"n": 3})

    assert store.get("a") is None
    assert store.get("b") == {"n": 2}
    assert store.get("c") == {"n": 3}


def test_in_memory_returns_copies():
    store = InMemoryResultStore()
    store.put("a", {"n": 1})
    store.get("a")["n"] = 2
    assert store.get("a") == {"n": 1}


@pytest.fixture
def mock_boto_client():
    with patch("boto3.client") as mock:
        yield mock


def _body(obj) -> dict:
    body = MagicMock()
    body.read.return_value = json.dumps(obj).encode("utf-8")
    return {"Body": body}


def test_s3_store_put_writes_json(mock_boto_client):
    mock_s3 = mock_boto_client.return_value
    store = S3ResultStore(S3Storage(bucket="results"), prefix="callbacks/")

    store.put("lead-1", {"status": "ok"})

    kwargs = mock_s3.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "results"
    assert kwargs["Key"] == "callbacks/lead-1.json"
    assert kwargs["ContentType"] == "application/json"
    assert json.loads(kwargs["Body"])["record"] == {"status": "ok"}


def test_s3_store_get_fresh_record(mock_boto_client):
    mock_s3 = mock_boto_client.return_value
    mock_s3.get_object.return_value = _body({"stored_at": time.time(), "record": {"status": "ok"}})

    store = S3ResultStore(S3Storage(bucket="results"))
    assert store.get("lead-1") == {"status": "ok"}
    mock_s3.get_object.assert_called_once_with(Bucket="results", Key="callbacks/lead-1.json")


def test_s3_store_get_expired_record(mock_boto_client):
    mock_s3 = mock_boto_client.return_value
    mock_s3.get_object.return_value = _body({"stored_at": time.time() - 7200, "record": {"a": 1}})

    store = S3ResultStore(S3Storage(bucket="results"), ttl_seconds=3600)
    assert store.get("lead-1") is None


def test_s3_store_missing_key(mock_boto_client):
    mock_s3 = mock_boto_client.return_value
    error_response = {"Error": {"Code": "NoSuchKey", "Message": "Not Found"}}
    mock_s3.get_object.side_effect = ClientError(error_response, "GetObject")

    store = S3ResultStore(S3Storage(bucket="results"))
    assert store.get("lead-1") is None


def test_s3_storage_other_errors_raise(mock_boto_client):
    mock_s3 = mock_boto_client.return_value
    error_response = {"Error": {"Code": "500", "Message": "Internal Error"}}
    mock_s3.get_object.side_effect = ClientError(error_response, "GetObject")

    with pytest.raises(S3StorageError):
        S3Storage(bucket="results").get_json("k")


def test_s3_storage_invalid_json(mock_boto_client):
    mock_s3 = mock_boto_client.return_value
    body = MagicMock()
    body.read.return_value = b"invalid-json"
    mock_s3.get_object.return_value = {"Body": body}

    with pytest.raises(S3StorageError, match="Invalid JSON"):
        S3Storage(bucket="results").get_json("k")
