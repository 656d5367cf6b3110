import json
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from roof_estimator.config import settings


class S3StorageError(RuntimeError):
    pass


cfg = Config(
    signature_version="s3v4",
    request_checksum_calculation="when_required",
    response_checksum_validation="when_required",
    s3={"addressing_style": "path"},
)


class S3Storage:
    """Thin JSON-object wrapper over an S3-compatible bucket."""

    def __init__(self, bucket: str | None = None):
        self.bucket = bucket or settings.s3_bucket_results
        self._client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint or None,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
            use_ssl=settings.s3_secure,
            config=cfg,
        )

    def get_json(self, key: str) -> dict[str, Any] | None:
        """Returns None for a missing key."""
        try:
            resp = self._client.get_object(Bucket=self.bucket, Key=key)
            raw = resp["Body"].read()
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in {"404", "NoSuchKey", "NotFound"}:
                return None
            raise S3StorageError(f"Failed to get s3://{self.bucket}/{key}") from e
        except BotoCoreError as e:
            raise S3StorageError(f"Failed to get s3://{self.bucket}/{key}") from e

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise S3StorageError(f"Invalid JSON at s3://{self.bucket}/{key}") from e

    def put_json(self, key: str, obj: dict[str, Any]) -> None:
        data = json.dumps(obj, ensure_ascii=False).encode("utf-8")
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            raise S3StorageError(f"Failed to put s3://{self.bucket}/{key}") from e
