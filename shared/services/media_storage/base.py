"""Интерфейс хранилища сгенерированных файлов договоров."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class ArtifactStorageClient(ABC):
    """Абстрактный интерфейс хранилища артефактов (PDF договоров)."""

    @abstractmethod
    async def get_signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        """Получить ограниченную по времени ссылку на файл."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Проверить существование файла."""
        ...
