"""S3 implementation of ObjectStorage."""

import logging
from typing import Any, Self

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from registrations.domain.errors import StorageError
from registrations.stores.interfaces import ObjectStorage

logger = logging.getLogger(__name__)


class S3ObjectStorage(ObjectStorage):
    """Waiver PDFs in a single S3 bucket."""

    def __init__(self, bucket: str, region: str, client: Any = None) -> None:
        self.bucket = bucket
        self.region = region
        self._client = client or boto3.client("s3", region_name=region)

    @classmethod
    def from_settings(cls) -> Self:
        conf = settings.REGISTRATION_STORAGE
        client = boto3.client(
            "s3",
            region_name=conf["REGION"],
            config=Config(
                connect_timeout=conf["CONNECT_TIMEOUT"],
                read_timeout=conf["READ_TIMEOUT"],
                retries={"max_attempts": conf["MAX_ATTEMPTS"], "mode": "standard"},
            ),
        )
        return cls(bucket=conf["BUCKET"], region=conf["REGION"], client=client)

    def url_for(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            self._client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Upload of %s failed: %s", key, exc)
            raise StorageError(key) from exc
        logger.info("Uploaded %s (%d bytes)", key, len(data))
        return self.url_for(key)

    def get(self, key: str) -> bytes:
        try:
            obj = self._client.get_object(Bucket=self.bucket, Key=key)
            return obj["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            logger.error("Download of %s failed: %s", key, exc)
            raise StorageError(key) from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Delete of %s failed: %s", key, exc)
            raise StorageError(key) from exc
        logger.info("Deleted file from S3: %s", key)
