# -*- coding: utf-8 -*-
"""
Диагностические эндпоинты для ручной проверки интеграций.

Эндпоинты (/api/test):
- GET /bot-status - Настроен ли Telegram бот
- GET /check-groups - Группы и их Telegram-чаты
- POST /manual-suspend - Приостановить аккаунт по email
- POST /cleanup-test-projects - Удалить тестовые проекты и снять приостановку
- POST /send-email-direct - Отправить напоминание об оплате (3, 7, 10 дней)
- GET|POST /check-user-status - Статус приостановки по email

Эндпоинты (/api/debug):
- POST /check-password - Информация о пароле учётной записи

Авторизация не требуется.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.jwt import pwd_context, verify_password
from alpha_factory.config import settings
from alpha_factory.database import get_db_session
from alpha_factory.db.base import utcnow
from alpha_factory.db.models import Group, Project, User
from alpha_factory.models.admin import (
    CheckPasswordRequest,
    ManualSuspendRequest,
    SendEmailDirectRequest,
    UserEmailRequest,
)
from alpha_factory.models.common import UserResponse
from alpha_factory.services.billing import suspend_user
from alpha_factory.services.email import REMINDER_TITLES, EmailService, get_email_service
from alpha_factory.services.users import find_user_by_email, get_credential_account
from alpha_factory.utils.dates import isoformat_ms
from alpha_factory.utils.security import mask_secret

router = APIRouter()
debug_router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.debug")

TEST_TITLE_MARKERS = ("Test", "test", "مشروع اختبار")


async def _get_user_by_email_or_404(db: AsyncSession, email: Optional[str]) -> User:
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userEmail is required")
    user = await find_user_by_email(db, email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User with email {email} not found")
    return user


def _suspension_info(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "suspended": user.suspended,
        "suspendedAt": isoformat_ms(user.suspended_at) if user.suspended_at else None,
        "suspensionReason": user.suspension_reason,
        "createdAt": isoformat_ms(user.created_at) if user.created_at else None,
    }


@router.get("/bot-status")
async def bot_status():
    token = settings.TELEGRAM_BOT_TOKEN
    chat_id = settings.ADMIN_TELEGRAM_CHAT_ID
    bot = {
        "hasTelegramBotToken": bool(token),
        "hasAdminTelegramChatId": bool(chat_id),
        "tokenLength": len(token),
        "tokenPrefix": mask_secret(token),
        "chatId": chat_id or "Not set",
        "timestamp": isoformat_ms(utcnow()),
    }
    logger.info(f"Проверка бота: токен {'задан' if token else 'не задан'}, чат {bot['chatId']}")
    return {"success": True, "status": bot, "message": "Bot status checked successfully"}


@router.get("/check-groups")
async def check_groups(db: AsyncSession = Depends(get_db_session)):
    result = await db.execute(select(Group).order_by(Group.created_at))
    groups = result.scalars().all()
    return {
        "success": True,
        "groups": [
            {
                "id": g.id,
                "name": g.name,
                "telegramChatId": g.telegram_chat_id,
                "telegramGroupName": g.telegram_group_name,
                "telegramInviteLink": g.telegram_invite_link,
                "users": [{"id": u.id, "name": u.name, "role": u.role} for u in g.users],
            }
            for g in groups
        ],
        "totalGroups": len(groups),
        "groupsWithTelegram": sum(1 for g in groups if g.telegram_chat_id),
        "message": "Groups checked successfully",
    }


@router.post("/manual-suspend")
async def manual_suspend(data: ManualSuspendRequest, db: AsyncSession = Depends(get_db_session)):
    user = await _get_user_by_email_or_404(db, data.user_email)
    suspend_user(user, data.reason)
    await db.flush()
    return {
        "success": True,
        "message": f"User {user.email} suspended successfully",
        "user": UserResponse.model_validate(user).dump(),
    }


@router.post("/cleanup-test-projects")
async def cleanup_test_projects(data: UserEmailRequest, db: AsyncSession = Depends(get_db_session)):
    """Удаляет проекты клиента с «Test», «test» или «مشروع اختبار» в названии."""
    user = await _get_user_by_email_or_404(db, data.user_email)

    result = await db.execute(
        select(Project).where(
            Project.client_id == user.id,
            or_(*(Project.title.contains(marker) for marker in TEST_TITLE_MARKERS)),
        )
    )
    projects = result.scalars().all()
    for project in projects:
        await db.delete(project)
    deleted = len(projects)

    user.suspended = False
    user.suspended_at = None
    user.suspension_reason = None
    await db.flush()

    logger.info(f"Удалено тестовых проектов {user.email}: {deleted}")
    return {
        "success": True,
        "message": f"Cleaned up {deleted} test projects and unsuspended user",
        "deletedCount": deleted,
    }


@router.post("/send-email-direct")
async def send_email_direct(
    data: SendEmailDirectRequest,
    mailer: EmailService = Depends(get_email_service),
):
    if not data.reminder_type or not data.user_email or not data.user_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: reminderType, userEmail, userName",
        )
    if data.reminder_type not in REMINDER_TITLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid reminderType. Must be '3', '7', or '10'",
        )

    sent = await mailer.send_invoice_reminder(data.user_email, data.user_name, data.reminder_type)
    if not sent:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to send reminder email"},
        )

    return {
        "success": True,
        "message": f"✅ {data.reminder_type}-day reminder email sent successfully to {data.user_email}",
        "details": {
            "to": data.user_email,
            "userName": data.user_name,
            "reminderType": data.reminder_type,
            "sentAt": isoformat_ms(utcnow()),
        },
    }


@router.get("/check-user-status")
async def check_user_status_by_query(
    email: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db_session),
):
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email parameter is required")
    user = await _get_user_by_email_or_404(db, email)
    return {"success": True, "user": _suspension_info(user), "message": f"User {email} status checked"}


@router.post("/check-user-status")
async def check_user_status(data: UserEmailRequest, db: AsyncSession = Depends(get_db_session)):
    user = await _get_user_by_email_or_404(db, data.user_email)
    return {
        "success": True,
        "user": _suspension_info(user),
        "message": f"User {data.user_email} status checked",
    }


@debug_router.post("/check-password")
async def check_password(data: CheckPasswordRequest, db: AsyncSession = Depends(get_db_session)):
    """
    Показывает, какой хэш хранится у учётной записи, и проверяет пароль.

    Сам пароль и хэш в ответ не попадают.
    """
    if not data.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    user = await find_user_by_email(db, data.email)
    account = await get_credential_account(db, user.id) if user else None
    if user is None or account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User or account not found")

    stored = account.password
    result = {
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "accountId": account.id,
        "providerId": account.provider_id,
        "hasPassword": bool(stored),
        "hashInfo": {
            "length": len(stored),
            "scheme": pwd_context.identify(stored),
            "isBcrypt": stored.startswith("$2"),
        } if stored else None,
    }

    if data.test_password and stored:
        result["passwordTest"] = {
            "isValid": verify_password(data.test_password, stored),
            "length": len(data.test_password),
        }

    return result
