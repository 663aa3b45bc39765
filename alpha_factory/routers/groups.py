# -*- coding: utf-8 -*-
"""
API роутер рабочих групп.

Эндпоинты:
- GET / - Группы с участниками
- POST / - Создание группы и её участников со сгенерированными учётными данными
- DELETE / - Удаление группы вместе с участниками
- PUT /{group_id}/telegram - Подключение Telegram-чата к существующей группе

Доступ: owner, admin, supervisor.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, require_roles
from alpha_factory.database import get_db_session
from alpha_factory.db.models import ADMIN_ROLES, ROLE_SUPERVISOR, Group
from alpha_factory.models.admin import GroupCreateRequest, GroupDeleteRequest, GroupTelegramRequest
from alpha_factory.models.common import GroupResponse, UserResponse
from alpha_factory.services.accounts import AccountsError, NewMember, check_new_members, create_member_accounts
from alpha_factory.services.email import EmailService, get_email_service
from alpha_factory.services.telegram import (
    TeamMember,
    TelegramNotifier,
    get_telegram_notifier,
    telegram_group_name,
)
from alpha_factory.services.users import delete_user

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.groups")

require_group_manager = require_roles(
    *ADMIN_ROLES,
    ROLE_SUPERVISOR,
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Unauthorized",
)


async def _load_group(db: AsyncSession, group_id: str) -> Optional[Group]:
    result = await db.execute(
        select(Group)
        .where(Group.id == group_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


@router.get("")
async def list_groups(
    current_user: CurrentUser = Depends(require_group_manager),
    db: AsyncSession = Depends(get_db_session),
):
    result = await db.execute(select(Group).order_by(Group.created_at.desc()))
    groups = result.scalars().all()
    return {"groups": [GroupResponse.model_validate(g).dump() for g in groups]}


@router.post("")
async def create_group(
    data: GroupCreateRequest,
    current_user: CurrentUser = Depends(require_group_manager),
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
    mailer: EmailService = Depends(get_email_service),
):
    """
    Создаёт группу и её участников.

    Логин и пароль каждого участника генерируются и отправляются на email
    вместе со ссылкой-приглашением в Telegram (если бот настроен).
    """
    if not data.group_name or not data.users:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Group name and users are required")

    for member in data.users:
        if not member.name or not member.role:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name and role are required for all users",
            )
        if not member.email:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required for all users")

    members = [NewMember(name=m.name, email=m.email, role=m.role) for m in data.users]
    try:
        await check_new_members(db, members)
    except AccountsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    group = Group(name=data.group_name)
    db.add(group)
    await db.flush()

    credentials = await create_member_accounts(db, members, group.id, data.group_name)

    telegram_result = None
    if notifier.is_configured:
        telegram_result = await notifier.create_group_invite(
            data.group_name,
            [TeamMember(name=c.name, role=c.role, email=c.email) for c in credentials],
            data.telegram_chat_id,
        )
        if telegram_result.success:
            group.telegram_chat_id = telegram_result.chat_id
            group.telegram_invite_link = telegram_result.invite_link
            group.telegram_group_name = telegram_group_name(data.group_name)
            logger.info(f"Telegram-чат {telegram_result.chat_id} подключён к группе {data.group_name}")
        else:
            logger.error(f"Не удалось подключить Telegram к группе {data.group_name}: {telegram_result.error}")
    else:
        logger.info("Telegram бот не настроен, чат группы не создаётся")

    await db.flush()
    group = await _load_group(db, group.id)

    invite_link = telegram_result.invite_link if telegram_result else None
    for c in credentials:
        c.telegram_invite_link = invite_link
    email_results = await mailer.send_credentials_emails(credentials)
    logger.info(
        f"Группа {data.group_name}: писем отправлено {email_results.successful}, ошибок {email_results.failed}"
    )

    return {
        "message": "Group and users created successfully",
        "group": GroupResponse.model_validate(group).dump(),
        "users": [UserResponse.model_validate(u).dump() for u in group.users],
        "credentials": [
            {"email": c.email, "username": c.username, "password": c.password, "role": c.role}
            for c in credentials
        ],
        "emailResults": {"successful": email_results.successful, "failed": email_results.failed},
        "telegram": {
            "configured": notifier.is_configured,
            "groupCreated": bool(telegram_result and telegram_result.success),
            "chatId": telegram_result.chat_id if telegram_result else None,
            "inviteLink": invite_link,
            "error": telegram_result.error if telegram_result else None,
        },
    }


@router.delete("")
async def delete_group(
    data: GroupDeleteRequest,
    current_user: CurrentUser = Depends(require_group_manager),
    db: AsyncSession = Depends(get_db_session),
):
    """Удаляет группу, её участников и их учётные записи."""
    if not data.group_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Group ID is required")

    group = await _load_group(db, data.group_id)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")

    group_name = group.name
    members = list(group.users)
    for member in members:
        await delete_user(db, member)
    await db.delete(group)
    await db.flush()

    logger.info(f"Группа {group_name} удалена вместе с {len(members)} пользователями")
    return {
        "success": True,
        "message": f'Successfully deleted group "{group_name}" and {len(members)} user(s)',
        "deletedGroup": {"id": data.group_id, "name": group_name, "userCount": len(members)},
    }


@router.put("/{group_id}/telegram")
async def configure_group_telegram(
    group_id: str,
    data: GroupTelegramRequest,
    current_user: CurrentUser = Depends(require_group_manager),
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
):
    """Подключает Telegram-чат к группе и отправляет в него приветствие."""
    if not data.telegram_chat_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Telegram chat ID is required")

    group = await _load_group(db, group_id)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")

    telegram_result = await notifier.create_group_invite(
        group.name,
        [TeamMember(name=u.name, role=u.role or "member", email=u.email) for u in group.users],
        data.telegram_chat_id,
    )
    if not telegram_result.success:
        logger.error(f"Не удалось подключить Telegram к группе {group.name}: {telegram_result.error}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to configure Telegram: {telegram_result.error}",
        )

    group.telegram_chat_id = telegram_result.chat_id
    group.telegram_invite_link = telegram_result.invite_link
    group.telegram_group_name = telegram_group_name(group.name)
    await db.flush()

    return {
        "success": True,
        "message": "Telegram configuration added successfully",
        "group": GroupResponse.model_validate(group).dump(),
        "telegram": {
            "chatId": telegram_result.chat_id,
            "inviteLink": telegram_result.invite_link,
            "groupName": group.telegram_group_name,
        },
    }
