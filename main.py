#!/usr/bin/env python3
"""
Запуск API сервиса договоров мероприятий
"""

import uvicorn

from core.config.settings import settings
from core.logging.logger import setup_logging


def main():
    """Основная функция запуска API."""
    setup_logging()
    uvicorn.run(
        "apps.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
