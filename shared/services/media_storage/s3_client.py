"""S3-совместимое хранилище артефактов (MinIO, reg.ru, Cloud.ru, AWS и т.д.)."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from core.config.settings import settings
from core.logging.logger import logger
from shared.services.contract_errors import UpstreamFailure

from .base import ArtifactStorageClient


def _s3_client() -> Any:
    if not all([settings.s3_endpoint, settings.s3_access_key, settings.s3_secret_key]):
        raise ValueError(
            "S3 storage config incomplete: set S3_ENDPOINT, S3_ACCESS_KEY, S3_SECRET_KEY"
        )
    return boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=BotoConfig(signature_version="s3v4"),
        region_name=settings.s3_region or "us-east-1",
    )


def _run_sync(fn, *args, **kwargs):
    return asyncio.to_thread(fn, *args, **kwargs)


class S3ArtifactStorageClient(ArtifactStorageClient):
    """Presigned-ссылки на файлы в S3-совместимом бакете."""

    def __init__(self, client: Optional[Any] = None, bucket: Optional[str] = None) -> None:
        self._client = client or _s3_client()
        self._bucket = bucket or settings.s3_bucket
        self._expires = settings.signed_url_expires_seconds

    async def get_signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        expires = expires_in or self._expires
        try:
            url = await _run_sync(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=expires,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 signed URL failed", key=key, bucket=self._bucket, error=str(e))
            raise UpstreamFailure(f"Failed to create signed URL for {key}", cause=e) from e

        logger.debug("S3 signed URL issued", key=key, expires_in=expires)
        return url

    async def exists(self, key: str) -> bool:
        try:
            await _run_sync(self._client.head_object, Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            logger.error("S3 head_object failed", key=key, error=str(e))
            raise UpstreamFailure(f"Failed to check {key}", cause=e) from e
