# -*- coding: utf-8 -*-
"""
API роутер напоминаний о просроченной съёмке.

Эндпоинты:
- GET /api/reminders/check-overdue-projects - Отчёт без отправки писем
- POST /api/reminders/check-overdue-projects - Отправка напоминаний
- GET|POST /api/cron/daily-reminders - Ежедневный запуск по расписанию

Запрос cron должен содержать Authorization: Bearer <CRON_SECRET>,
если CRON_SECRET задан.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.config import settings
from alpha_factory.database import get_db_session
from alpha_factory.db.base import utcnow
from alpha_factory.services.email import EmailService, get_email_service
from alpha_factory.services.reminders import list_overdue_projects, send_overdue_reminders
from alpha_factory.utils.dates import isoformat_ms
from alpha_factory.utils.security import secrets_equal

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.reminders")


async def _run_overdue_check(db: AsyncSession, mailer: EmailService) -> dict:
    logger.info("Запуск проверки просроченных проектов")
    summary = await send_overdue_reminders(db, mailer)
    return {
        "success": True,
        "message": "Overdue projects check completed",
        "summary": summary,
    }


@router.get("/reminders/check-overdue-projects")
async def overdue_projects_report(db: AsyncSession = Depends(get_db_session)):
    return await list_overdue_projects(db)


@router.post("/reminders/check-overdue-projects")
async def check_overdue_projects(
    db: AsyncSession = Depends(get_db_session),
    mailer: EmailService = Depends(get_email_service),
):
    """Отправляет письмо по каждому проекту, просроченному ровно на один день."""
    return await _run_overdue_check(db, mailer)


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Проверяет Bearer-токен cron, если CRON_SECRET задан."""
    if not settings.CRON_SECRET:
        return
    expected = f"Bearer {settings.CRON_SECRET}"
    if not authorization or not secrets_equal(expected, authorization):
        logger.warning("Запрос cron без верного CRON_SECRET")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.api_route("/cron/daily-reminders", methods=["GET", "POST"], dependencies=[Depends(verify_cron_secret)])
async def daily_reminders(
    db: AsyncSession = Depends(get_db_session),
    mailer: EmailService = Depends(get_email_service),
):
    logger.info("Ежедневная рассылка напоминаний запущена")
    result = await _run_overdue_check(db, mailer)
    logger.info(f"Ежедневная рассылка завершена: {result['summary']['remindersSent']} писем")
    return {
        "success": True,
        "message": "Daily reminders cron job completed",
        "timestamp": isoformat_ms(utcnow()),
        "result": result,
    }
