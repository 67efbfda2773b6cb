"""
Базовый файл для всех доменных сущностей
Решает проблему циклических импортов
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

# Создаем общую Base для всех моделей
Base = declarative_base()


def generate_id() -> str:
    """Непрозрачный строковый идентификатор записи."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
