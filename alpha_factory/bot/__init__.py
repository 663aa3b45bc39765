"""Telegram-бот групп проектов (aiogram, режим webhook)."""

from typing import Optional

from aiogram import Dispatcher

from alpha_factory.bot.handlers import router

_dispatcher: Optional[Dispatcher] = None


def get_dispatcher() -> Dispatcher:
    """Dispatcher с подключёнными обработчиками (один на процесс)."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher()
        _dispatcher.include_router(router)
    return _dispatcher
