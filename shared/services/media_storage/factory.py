"""Фабрика клиента хранилища артефактов."""

from __future__ import annotations

from typing import Optional

from .base import ArtifactStorageClient
from .s3_client import S3ArtifactStorageClient

_client: Optional[ArtifactStorageClient] = None


def get_artifact_storage_client() -> ArtifactStorageClient:
    """Возвращает общий клиент хранилища (создаётся при первом вызове)."""
    global _client
    if _client is None:
        _client = S3ArtifactStorageClient()
    return _client
