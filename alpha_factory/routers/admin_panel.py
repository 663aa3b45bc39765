# -*- coding: utf-8 -*-
"""
API роутер панели владельца.

Эндпоинты:
- GET /stats - Количество пользователей по ролям, групп и проектов
- POST /accounts - Аккаунты в новой или существующей группе (owner)
- POST /standalone-accounts - Аккаунты сотрудников без группы (owner, supervisor)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, require_roles
from alpha_factory.database import get_db_session
from alpha_factory.db.models import (
    ROLE_ADMIN,
    ROLE_CLIENT,
    ROLE_DESIGNER,
    ROLE_EDITOR,
    ROLE_OWNER,
    ROLE_REVIEWER,
    ROLE_SUPERVISOR,
    Group,
    Project,
    User,
)
from alpha_factory.models.admin import AccountsCreateRequest, GroupMemberCreate, StandaloneAccountsRequest
from alpha_factory.services.accounts import AccountsError, NewMember, check_new_members, create_member_accounts
from alpha_factory.services.email import EmailService, get_email_service
from alpha_factory.services.telegram import (
    TeamMember,
    TelegramNotifier,
    get_telegram_notifier,
    telegram_group_name,
)

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.admin_panel")

require_owner = require_roles(
    ROLE_OWNER,
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Unauthorized - Owner access required",
)

require_owner_or_supervisor = require_roles(
    ROLE_OWNER,
    ROLE_SUPERVISOR,
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Unauthorized - Owner or Supervisor access required",
)

STAT_ROLES = {
    "adminUsers": ROLE_ADMIN,
    "clientUsers": ROLE_CLIENT,
    "editorUsers": ROLE_EDITOR,
    "designerUsers": ROLE_DESIGNER,
    "reviewerUsers": ROLE_REVIEWER,
}

# Владельца создаёт только scripts/create_owner.py
ACCOUNT_ROLES = (ROLE_ADMIN, ROLE_SUPERVISOR, ROLE_CLIENT, ROLE_EDITOR, ROLE_DESIGNER, ROLE_REVIEWER)
STANDALONE_ROLES = (ROLE_ADMIN, ROLE_SUPERVISOR, ROLE_EDITOR, ROLE_DESIGNER, ROLE_REVIEWER)
STANDALONE_GROUP_NAME = "Standalone Account"


def _validate_members(users: list[GroupMemberCreate], allowed_roles: tuple[str, ...], roles_error: str,
                      email_error: str) -> None:
    if not users:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Users array is required and must not be empty",
        )
    for user in users:
        if not user.name or not user.role:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name and role are required for all users",
            )
        if user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=roles_error)
        if not user.email:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=email_error)


async def _check_members(db: AsyncSession, members: list[NewMember]) -> None:
    try:
        await check_new_members(db, members)
    except AccountsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/stats")
async def get_stats(
    current_user: CurrentUser = Depends(require_owner),
    db: AsyncSession = Depends(get_db_session),
):
    """Статистика для дашборда владельца."""
    total_users = await db.scalar(select(func.count(User.id)))
    total_groups = await db.scalar(select(func.count(Group.id)))
    total_projects = await db.scalar(select(func.count(Project.id)))

    result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    by_role = {role: count for role, count in result.all()}

    stats = {
        "totalUsers": total_users or 0,
        "totalGroups": total_groups or 0,
        "totalProjects": total_projects or 0,
    }
    for key, role in STAT_ROLES.items():
        stats[key] = by_role.get(role, 0)

    return {"success": True, "stats": stats}


@router.post("/accounts")
async def create_accounts(
    data: AccountsCreateRequest,
    current_user: CurrentUser = Depends(require_owner),
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
    mailer: EmailService = Depends(get_email_service),
):
    """
    Создаёт аккаунты в новой группе (groupName) или в существующей (groupId).

    Новая группа получает Telegram-чат как в /api/admin/groups. При добавлении
    в существующую группу используется её ссылка-приглашение, а в чат уходит
    сообщение о новых участниках. Клиентам ссылка на чат в письме не отправляется.
    """
    _validate_members(
        data.users,
        ACCOUNT_ROLES,
        f"Invalid role. Allowed roles: {', '.join(ACCOUNT_ROLES)}",
        "Email is required for all users",
    )
    if not data.group_name and not data.group_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Either groupName or groupId is required")

    group = None
    if data.group_id:
        group = await db.get(Group, data.group_id)
        if group is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")

    members = [NewMember(name=u.name, email=u.email, role=u.role, phone=u.phone) for u in data.users]
    await _check_members(db, members)

    new_group = bool(data.group_name)
    if new_group:
        group = Group(name=data.group_name, telegram_chat_id=data.telegram_chat_id or None)
        db.add(group)
        await db.flush()

    credentials = await create_member_accounts(db, members, group.id, group.name)
    team = [TeamMember(name=c.name, role=c.role, email=c.email) for c in credentials]

    invite_link = None
    if not notifier.is_configured:
        logger.info("Telegram бот не настроен, приглашения не создаются")
    elif new_group:
        telegram_result = await notifier.create_group_invite(group.name, team, data.telegram_chat_id)
        if telegram_result.success:
            group.telegram_chat_id = telegram_result.chat_id
            group.telegram_invite_link = telegram_result.invite_link
            group.telegram_group_name = telegram_group_name(group.name)
            invite_link = telegram_result.invite_link
        else:
            logger.error(f"Не удалось подключить Telegram к группе {group.name}: {telegram_result.error}")
    elif group.telegram_invite_link:
        invite_link = group.telegram_invite_link
        if group.telegram_chat_id:
            await notifier.send_new_member_notification(group.telegram_chat_id, team, group.name)
    else:
        logger.info(f"У группы {group.name} нет Telegram-чата")
    await db.flush()

    for c in credentials:
        c.telegram_invite_link = invite_link if c.role != ROLE_CLIENT else None
    email_results = await mailer.send_credentials_emails(credentials)

    suffix = f' and group "{data.group_name}"' if new_group else " and added to existing group"
    logger.info(f"Владелец {current_user.user.email} создал аккаунтов: {len(credentials)} ({group.name})")
    return {
        "success": True,
        "message": f"Successfully created {len(credentials)} user(s){suffix}",
        "credentials": [
            {
                "name": c.name,
                "email": c.email,
                "phone": member.phone,
                "username": c.username,
                "password": c.password,
                "role": c.role,
                "groupName": c.group_name,
            }
            for c, member in zip(credentials, members)
        ],
        "telegramInviteLink": invite_link,
        "groupId": group.id,
        "emailResults": {"successful": email_results.successful, "failed": email_results.failed},
    }


@router.post("/standalone-accounts")
async def create_standalone_accounts(
    data: StandaloneAccountsRequest,
    current_user: CurrentUser = Depends(require_owner_or_supervisor),
    db: AsyncSession = Depends(get_db_session),
    mailer: EmailService = Depends(get_email_service),
):
    """Аккаунты сотрудников без группы; роль client не допускается."""
    _validate_members(
        data.users,
        STANDALONE_ROLES,
        "Only admin, supervisor, editor, designer, and reviewer roles are allowed for standalone accounts",
        "Email is required for all standalone users",
    )

    members = [NewMember(name=u.name, email=u.email, role=u.role) for u in data.users]
    await _check_members(db, members)

    credentials = await create_member_accounts(db, members, None, STANDALONE_GROUP_NAME)
    email_results = await mailer.send_credentials_emails(credentials)

    return {
        "success": True,
        "message": f"Successfully created {len(credentials)} standalone account(s)",
        "credentials": [
            {"name": c.name, "email": c.email, "username": c.username, "password": c.password, "role": c.role}
            for c in credentials
        ],
        "emailResults": {"successful": email_results.successful, "failed": email_results.failed},
    }
