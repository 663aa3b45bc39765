# -*- coding: utf-8 -*-
"""
Модуль работы с базой данных.

Предоставляет асинхронный движок, фабрику сессий и
зависимость FastAPI с автоматическим commit/rollback.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy import text

from alpha_factory.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Параметры пула: у SQLite (тесты, локальный запуск) пула нет."""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Проверка соединения перед использованием
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.DEBUG,
    **_engine_options(settings.database_url),
)

# Фабрика асинхронных сессий
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency для получения сессии БД в FastAPI.

    Коммитит изменения после успешной обработки запроса
    и откатывает их при исключении.

    Yields:
        AsyncSession: Асинхронная сессия SQLAlchemy
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Ошибка в сессии БД: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Сессия для скриптов и фоновых задач (вне FastAPI)."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """
    Инициализация подключения к БД.

    Проверяет доступность базы данных при старте приложения.
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Подключение к базе данных установлено")
    except Exception as e:
        logger.error(f"Не удалось подключиться к базе данных: {e}")
        raise


async def close_db() -> None:
    """
    Закрытие подключения к БД.

    Вызывается при остановке приложения.
    """
    await engine.dispose()
    logger.info("Подключение к базе данных закрыто")
