"""Утилиты для работы с временными зонами и польскими форматами дат."""

from datetime import datetime, date
from typing import Optional
import pytz
from core.config.settings import settings
from core.logging.logger import logger

# Родительный падеж: «15 czerwca 2025»
PL_MONTHS_GENITIVE = [
    "stycznia", "lutego", "marca", "kwietnia", "maja", "czerwca",
    "lipca", "sierpnia", "września", "października", "listopada", "grudnia",
]


class TimezoneHelper:
    """Помощник для работы с временными зонами."""

    def __init__(self, default_timezone: str = None):
        """
        Инициализация помощника временных зон.

        Args:
            default_timezone: Временная зона по умолчанию
        """
        self.default_timezone_str = default_timezone or settings.default_timezone
        try:
            self.default_timezone = pytz.timezone(self.default_timezone_str)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone {self.default_timezone_str}, using UTC")
            self.default_timezone = pytz.UTC

    def utc_to_local(self, utc_datetime: Optional[datetime]) -> Optional[datetime]:
        """
        Конвертирует UTC время в локальное время.

        Время без зоны считается UTC (так его возвращают некоторые драйверы БД).
        """
        if utc_datetime is None:
            return None
        if utc_datetime.tzinfo is None:
            utc_datetime = pytz.UTC.localize(utc_datetime)
        return utc_datetime.astimezone(self.default_timezone)

    def today(self) -> date:
        """Текущая дата в зоне по умолчанию."""
        return datetime.now(self.default_timezone).date()

    def format_date_only(self, value: Optional[datetime]) -> str:
        """DD.MM.YYYY"""
        if value is None:
            return ""
        if isinstance(value, datetime):
            value = self.utc_to_local(value)
        return value.strftime("%d.%m.%Y")

    def format_date_time(self, value: Optional[datetime]) -> str:
        """«15 czerwca 2025 18:00»"""
        if value is None:
            return ""
        local = self.utc_to_local(value)
        return f"{local.day} {PL_MONTHS_GENITIVE[local.month - 1]} {local.year} {local:%H:%M}"

    def format_time_only(self, value: Optional[datetime]) -> str:
        """HH:MM"""
        if value is None:
            return ""
        return self.utc_to_local(value).strftime("%H:%M")


timezone_helper = TimezoneHelper()
