# -*- coding: utf-8 -*-
"""
API роутер статуса оплаты клиента.

Эндпоинты:
- GET /check-overdue-status - Просрочка по счетам и уровень доступа
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, get_current_user
from alpha_factory.database import get_db_session
from alpha_factory.services.billing import get_overdue_status

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.billing")


@router.get("/check-overdue-status")
async def check_overdue_status(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Уровень доступа клиента по самой старой неоплаченной работе.

    Счёт за завершённый проект считается выставленным в момент последнего
    обновления проекта и должен быть оплачен в течение 14 дней.
    """
    overdue = await get_overdue_status(db, current_user.id)
    if overdue.has_overdue_invoices:
        logger.info(
            f"Клиент {current_user.user.email}: просрочка {overdue.overdue_days} дн., "
            f"доступ {overdue.access_level}"
        )
    return overdue.as_dict()
