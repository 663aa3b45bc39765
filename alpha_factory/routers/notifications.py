# -*- coding: utf-8 -*-
"""
API роутер уведомлений в Telegram-чат группы пользователя.

Эндпоинты:
- POST / - Отправить уведомление (task_completion, project_update, admin_mention)
- GET / - Доступные типы уведомлений и состояние Telegram у группы
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, get_current_user
from alpha_factory.database import get_db_session
from alpha_factory.db.models import Group
from alpha_factory.models.admin import NotificationRequest
from alpha_factory.services.telegram import TelegramNotifier, get_telegram_notifier

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.notifications")

TASK_COMPLETION = "task_completion"
PROJECT_UPDATE = "project_update"
ADMIN_MENTION = "admin_mention"

GENERAL_UPDATE_AR = "تحديث عام"
REVIEW_REQUEST_AR = "طلب مراجعة"

AVAILABLE_NOTIFICATIONS = [
    {"type": TASK_COMPLETION, "description": "إشعار إنجاز مهمة", "requiredFields": ["taskType"]},
    {"type": PROJECT_UPDATE, "description": "تحديث المشروع", "requiredFields": ["message"]},
    {"type": ADMIN_MENTION, "description": "طلب مراجعة من الإدارة", "requiredFields": []},
]


async def _user_group(db: AsyncSession, current_user: CurrentUser) -> Group:
    group = await db.get(Group, current_user.user.group_id) if current_user.user.group_id else None
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User group not found")
    return group


@router.post("")
async def send_notification(
    data: NotificationRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
):
    """
    Отправляет уведомление от имени пользователя в чат его группы.

    task_completion требует taskType, project_update требует message.
    """
    if not data.type:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Notification type is required")

    group = await _user_group(db, current_user)
    if not group.telegram_chat_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Telegram group not configured for this project",
        )

    user = current_user.user
    if data.type == TASK_COMPLETION:
        if not data.task_type:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Task type is required for task completion notifications",
            )
        sent = await notifier.notify_admin(
            group.telegram_chat_id, user.name, user.role or "unknown", data.task_type, group.name
        )
    elif data.type == PROJECT_UPDATE:
        if not data.message:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Message is required for project update notifications",
            )
        sent = await notifier.send_project_update(group.telegram_chat_id, GENERAL_UPDATE_AR, data.message, group.name)
    elif data.type == ADMIN_MENTION:
        sent = await notifier.notify_admin(
            group.telegram_chat_id, user.name, user.role or "unknown", REVIEW_REQUEST_AR, group.name
        )
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid notification type")

    if not sent:
        logger.error(f"Уведомление {data.type} от {user.email} не доставлено в чат группы {group.name}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send notification")

    logger.info(f"Уведомление {data.type} от {user.email} отправлено в чат группы {group.name}")
    return {"success": True, "message": "Notification sent successfully"}


@router.get("")
async def list_notifications(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    group = await _user_group(db, current_user)
    user = current_user.user
    return {
        "group": {
            "id": group.id,
            "name": group.name,
            "telegramConfigured": bool(group.telegram_chat_id),
            "telegramInviteLink": group.telegram_invite_link,
        },
        "user": {"id": user.id, "name": user.name, "role": user.role},
        "availableNotifications": AVAILABLE_NOTIFICATIONS,
    }
