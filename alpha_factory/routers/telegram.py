# -*- coding: utf-8 -*-
"""
API роутер Telegram webhook.

Эндпоинты:
- POST /webhook - Приём апдейтов от Telegram
- GET /webhook - Проверка доступности
"""

import logging

from aiogram.types import Update
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.bot import get_dispatcher
from alpha_factory.database import get_db_session
from alpha_factory.services.telegram import TelegramNotifier, get_telegram_notifier

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.telegram")


@router.post("/webhook")
async def telegram_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
):
    """Передаёт апдейт диспетчеру aiogram."""
    bot = notifier.bot
    if bot is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Telegram bot not configured")

    payload = await request.json()
    update = Update.model_validate(payload, context={"bot": bot})
    await get_dispatcher().feed_update(bot, update, db=db)
    return {"status": "ok"}


@router.get("/webhook")
async def telegram_webhook_status():
    return {"status": "Telegram webhook endpoint is active"}
