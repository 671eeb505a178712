import boto3
import pytest
from botocore.client import Config
from botocore.stub import Stubber

from app.services.storage import BlobAlreadyExists, S3BlobStore, new_blob_ref


@pytest.fixture
def stubbed():
    client = boto3.client(
        "s3",
        endpoint_url="http://minio.test:9000",
        aws_access_key_id="test",
        aws_secret_access_key="test",
        region_name="us-east-1",
        config=Config(signature_version="s3v4"),
    )
    store = S3BlobStore(client, bucket="gallery-test")
    store._bucket_checked = True
    with Stubber(client) as stubber:
        yield store, stubber
        stubber.assert_no_pending_responses()


def test_new_blob_ref_is_unique() -> None:
    assert new_blob_ref().startswith("uploads/")
    assert new_blob_ref() != new_blob_ref()


def test_presigned_url_for_existing_object(stubbed) -> None:
    store, stubber = stubbed
    stubber.add_response("head_object", {}, {"Bucket": "gallery-test", "Key": "uploads/a"})
    url = store.presigned_get_url("uploads/a")
    assert url is not None
    assert "uploads/a" in url
    assert "X-Amz-Expires=" in url


def test_presigned_url_for_missing_object_is_none(stubbed) -> None:
    store, stubber = stubbed
    stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
    assert store.presigned_get_url("uploads/gone") is None


def test_second_write_to_same_key_conflicts(stubbed) -> None:
    store, stubber = stubbed
    stubber.add_client_error("put_object", service_error_code="PreconditionFailed", http_status_code=412)
    with pytest.raises(BlobAlreadyExists):
        store.put_bytes("uploads/a", "image/png", b"x")


def test_ensure_bucket_creates_missing_bucket(stubbed) -> None:
    store, stubber = stubbed
    store._bucket_checked = False
    stubber.add_client_error("head_bucket", service_error_code="404", http_status_code=404)
    stubber.add_response("create_bucket", {}, {"Bucket": "gallery-test"})
    store.ensure_bucket()
    assert store._bucket_checked is True


def test_forbidden_head_is_treated_as_missing(stubbed) -> None:
    store, stubber = stubbed
    stubber.add_client_error("head_object", service_error_code="403", http_status_code=403)
    assert store.presigned_get_url("uploads/hidden") is None
