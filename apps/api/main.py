"""
Главный API роутер сервиса договоров
"""
from fastapi import APIRouter

from apps.api.routers.contracts import router as contracts_router

# Создаем главный роутер
api_router = APIRouter(prefix="/api/v1")

# Подключаем роутеры
api_router.include_router(contracts_router)
