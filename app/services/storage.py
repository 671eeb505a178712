from __future__ import annotations

import uuid

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from app.core.config import settings


_MISSING_CODES = {"404", "nosuchkey", "notfound", "nosuchbucket"}
# Without s3:ListBucket, S3 answers a HEAD on a missing key with 403.
_HIDDEN_CODES = _MISSING_CODES | {"403", "forbidden", "accessdenied"}
_CONFLICT_CODES = {"412", "preconditionfailed", "409", "conditionalrequestconflict"}


class BlobAlreadyExists(Exception):
    """The object key was written before; upload tickets are single-use."""


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", "")).lower()


def new_blob_ref() -> str:
    return f"uploads/{uuid.uuid4().hex}"


class S3BlobStore:
    def __init__(self, client, bucket: str, region: str = "") -> None:
        self.client = client
        self.bucket = bucket
        self.region = region
        self._bucket_checked = False

    def ensure_bucket(self) -> None:
        if self._bucket_checked:
            return

        try:
            self.client.head_bucket(Bucket=self.bucket)
            self._bucket_checked = True
            return
        except ClientError as exc:
            if _error_code(exc) not in _MISSING_CODES:
                raise

        create_args = {"Bucket": self.bucket}
        region = str(self.region or "").strip()
        if region and region != "us-east-1":
            create_args["CreateBucketConfiguration"] = {"LocationConstraint": region}
        self.client.create_bucket(**create_args)
        self._bucket_checked = True

    def put_bytes(self, blob_ref: str, media_type: str, data: bytes) -> None:
        self.ensure_bucket()
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=blob_ref,
                Body=data,
                ContentType=media_type,
                IfNoneMatch="*",
            )
        except ClientError as exc:
            if _error_code(exc) in _CONFLICT_CODES:
                raise BlobAlreadyExists(blob_ref) from exc
            raise

    def exists(self, blob_ref: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=blob_ref)
        except ClientError as exc:
            if _error_code(exc) in _HIDDEN_CODES:
                return False
            raise
        return True

    def presigned_get_url(self, blob_ref: str) -> str | None:
        """Return a time-limited GET URL, or None when the object is gone."""
        if not self.exists(blob_ref):
            return None
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": blob_ref},
            ExpiresIn=settings.download_url_expires_seconds,
        )

    def delete(self, blob_ref: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=blob_ref)


s3_client = boto3.client(
    "s3",
    endpoint_url=settings.s3_endpoint_url,
    aws_access_key_id=settings.s3_access_key,
    aws_secret_access_key=settings.s3_secret_key,
    region_name=settings.s3_region,
    config=Config(signature_version="s3v4"),
)

blob_store = S3BlobStore(s3_client, bucket=settings.s3_bucket, region=settings.s3_region)


def get_blob_store() -> S3BlobStore:
    return blob_store
