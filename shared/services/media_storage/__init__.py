"""Хранилище сгенерированных файлов договоров (S3-совместимое)."""

from shared.services.media_storage.base import ArtifactStorageClient
from shared.services.media_storage.factory import get_artifact_storage_client
from shared.services.media_storage.s3_client import S3ArtifactStorageClient

__all__ = ["ArtifactStorageClient", "S3ArtifactStorageClient", "get_artifact_storage_client"]
