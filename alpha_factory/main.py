# -*- coding: utf-8 -*-
"""
Точка входа FastAPI приложения Alpha Factory.

Запуск:
    uvicorn alpha_factory.main:app --host 0.0.0.0 --port 3000 --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from alpha_factory.config import settings
from alpha_factory.database import close_db, init_db
from alpha_factory.db.redis_client import close_redis
from alpha_factory.logging_config import setup_logging
from alpha_factory.services.telegram import close_telegram_notifier

# Инициализируем логирование
setup_logging(settings.LOG_LEVEL, settings.LOG_FILE, sql_echo=settings.DEBUG)
logger = logging.getLogger("alpha_factory.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Контекстный менеджер жизненного цикла приложения.

    Выполняет инициализацию при старте и очистку при остановке.
    """
    # Startup
    logger.info(f"Запуск {settings.APP_NAME}...")
    logger.info(f"Версия: {settings.APP_VERSION}")
    logger.info(f"Debug режим: {settings.DEBUG}")

    try:
        await init_db()
        logger.info("База данных инициализирована")
    except Exception as e:
        logger.error(f"Ошибка инициализации БД: {e}")
        raise

    if not settings.telegram_configured:
        logger.warning("TELEGRAM_BOT_TOKEN не задан, уведомления в Telegram отключены")
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY не задан, письма не отправляются")

    logger.info(f"Сервер запущен на http://{settings.HOST}:{settings.PORT}")

    yield

    # Shutdown
    logger.info("Остановка сервера...")
    await close_telegram_notifier()
    await close_redis()
    await close_db()
    logger.info("Сервер остановлен")


# Создаём приложение FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="REST API студии видеопроизводства Alpha Factory",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Ошибки API отдаются в формате {"error": "..."}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Некорректное тело запроса."""
    logger.info(f"Некорректный запрос {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


# Глобальный обработчик исключений
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик необработанных исключений."""
    logger.error(f"Необработанное исключение: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


# Health check endpoint
@app.get("/health", tags=["System"])
async def health_check():
    """Проверка работоспособности сервиса."""
    return {"status": "ok", "version": settings.APP_VERSION}


# Импорт и регистрация роутеров
def register_routers():
    """Регистрирует все роутеры. Страницы кабинетов регистрируются последними."""
    from alpha_factory.routers import (
        admin,
        admin_panel,
        auth,
        billing,
        debug,
        groups,
        invoices,
        notifications,
        pages,
        paypal,
        projects,
        reminders,
        telegram,
        voice,
    )

    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoices"])
    app.include_router(paypal.router, prefix="/api/paypal", tags=["PayPal"])
    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(groups.router, prefix="/api/admin/groups", tags=["Groups"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Administration"])
    app.include_router(admin_panel.router, prefix="/api/admin-panel", tags=["Owner Panel"])
    app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
    app.include_router(billing.router, prefix="/api", tags=["Billing"])
    app.include_router(reminders.router, prefix="/api", tags=["Reminders"])
    app.include_router(voice.router, prefix="/api", tags=["Voice"])
    app.include_router(telegram.router, prefix="/api/telegram", tags=["Telegram"])
    app.include_router(debug.router, prefix="/api/test", tags=["Diagnostics"])
    app.include_router(debug.debug_router, prefix="/api/debug", tags=["Diagnostics"])

    app.mount("/assets", StaticFiles(directory=str(pages.WEB_DIR / "assets")), name="assets")
    app.include_router(pages.router, include_in_schema=False)


# Регистрируем роутеры
register_routers()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "alpha_factory.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
