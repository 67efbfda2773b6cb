"""
FastAPI приложение сервиса договоров мероприятий
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import uuid

from core.config.settings import settings
from core.database.session import close_database, init_database
from core.logging.logger import logger
from shared.services.contract_errors import (
    ContractError,
    ContractNotFound,
    ContractPermissionDenied,
    ContractValidationError,
    UpstreamFailure,
)
from .main import api_router

# Коды HTTP для доменных ошибок
ERROR_STATUS_CODES = [
    (ContractValidationError, 400),
    (ContractPermissionDenied, 403),
    (ContractNotFound, 404),
    (UpstreamFailure, 502),
]


def status_code_for(exc: ContractError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_database()
    yield
    await close_database()


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Создание FastAPI приложения."""
    app = FastAPI(
        title=settings.app_name,
        description="API договоров мероприятий: переменные, статусы, PDF и отправка",
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # В продакшене ограничить
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware для логирования запросов
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Логирование всех HTTP запросов."""
        request_id = str(uuid.uuid4())
        start_time = time.time()

        logger.info(
            "HTTP Request started",
            request_id=request_id,
            method=request.method,
            url=str(request.url),
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            logger.info(
                "HTTP Request completed",
                request_id=request_id,
                status_code=response.status_code,
                process_time=process_time
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = str(process_time)

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "HTTP Request failed",
                request_id=request_id,
                error=str(e),
                process_time=process_time
            )
            raise

    # Обработчики ошибок
    @app.exception_handler(ContractError)
    async def contract_error_handler(request: Request, exc: ContractError):
        """Доменные ошибки договоров."""
        status_code = status_code_for(exc)
        logger.warning(
            "Contract error",
            error_code=exc.code,
            detail=exc.message,
            status_code=status_code,
            path=request.url.path
        )

        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.code,
                "message": exc.message
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Обработчик HTTP исключений."""
        logger.error(
            "HTTP Exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTP Error",
                "message": exc.detail,
                "status_code": exc.status_code
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Обработчик ошибок валидации."""
        logger.error(
            "Validation Error",
            errors=exc.errors(),
            path=request.url.path
        )

        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation Error",
                "message": "Ошибка валидации данных",
                "details": jsonable_encoder(exc.errors())
            }
        )

    # Подключаем API роутеры
    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """Проверка состояния приложения."""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.version
        }

    return app
