# -*- coding: utf-8 -*-
"""
API роутер администрирования аккаунтов.

Эндпоинты:
- POST /suspend-user - Приостановить аккаунт
- DELETE /suspend-user - Снять приостановку и погасить просрочку
- POST /auto-suspend - Автоматическая приостановка при просрочке от 7 дней
- GET /users - Список пользователей (кроме администраторов)
- PUT /users/{user_id} - Изменить email, имя или телефон
- DELETE /users/{user_id} - Удалить пользователя
- PUT /users/{user_id}/change-password - Сменить пароль пользователя
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, get_current_user, require_roles
from alpha_factory.database import get_db_session
from alpha_factory.db.models import ADMIN_ROLES, ROLE_ADMIN, ROLE_SUPERVISOR, User
from alpha_factory.models.admin import (
    AutoSuspendRequest,
    ChangePasswordRequest,
    SuspendUserRequest,
    UserUpdateRequest,
)
from alpha_factory.models.common import UserResponse
from alpha_factory.services.billing import (
    AUTO_SUSPEND_DAYS,
    auto_suspend_reason,
    days_overdue,
    suspend_user,
    unsuspend_user,
)
from alpha_factory.services.users import delete_user, find_user_by_email, normalize_email, set_password
from alpha_factory.utils.dates import parse_datetime
from alpha_factory.utils.security import is_valid_phone

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.admin")

MIN_PASSWORD_LENGTH = 6

require_admin = require_roles(*ADMIN_ROLES)
require_user_admin = require_roles(*ADMIN_ROLES, status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
require_user_viewer = require_roles(
    *ADMIN_ROLES,
    ROLE_SUPERVISOR,
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Unauthorized",
)


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# ==================== Приостановка ====================

@router.post("/suspend-user")
async def suspend_user_account(
    data: SuspendUserRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Приостанавливает аккаунт (owner, admin)."""
    if not data.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID is required")

    user = await _get_user_or_404(db, data.user_id)
    suspend_user(user, data.reason)
    await db.flush()

    logger.info(f"{current_user.user.email} приостановил аккаунт {user.email}")
    return {
        "success": True,
        "message": "تم تعليق الحساب بنجاح",
        "user": UserResponse.model_validate(user).dump(),
    }


@router.delete("/suspend-user")
async def unsuspend_user_account(
    data: SuspendUserRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Снимает приостановку.

    Дата обновления завершённых проектов клиента сдвигается на сейчас,
    поэтому их счета перестают считаться просроченными.
    """
    if not data.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID is required")

    user = await _get_user_or_404(db, data.user_id)
    cleared = await unsuspend_user(db, user)
    await db.flush()

    logger.info(f"{current_user.user.email} снял приостановку с {user.email}")
    return {
        "success": True,
        "message": f"تم إلغاء تعليق الحساب وإزالة {cleared} فاتورة متأخرة",
        "user": UserResponse.model_validate(user).dump(),
        "clearedInvoices": cleared,
    }


@router.post("/auto-suspend")
async def auto_suspend(
    data: AutoSuspendRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Приостанавливает аккаунт, если счёт просрочен на 7 и более дней.

    Клиент может проверить только себя, администратор любого пользователя.
    """
    due_date = parse_datetime(data.invoice_due_date)
    if not data.user_id or due_date is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User ID and invoice due date are required",
        )
    if not current_user.is_admin and data.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    overdue = days_overdue(due_date)
    if overdue >= AUTO_SUSPEND_DAYS:
        user = await db.get(User, data.user_id)
        if user is not None and not user.suspended:
            suspend_user(user, auto_suspend_reason(overdue))
            await db.flush()
            return {
                "success": True,
                "message": "تم تعليق الحساب تلقائياً بسبب عدم السداد",
                "suspended": True,
                "daysOverdue": overdue,
            }

    return {
        "success": True,
        "message": "لا يوجد حاجة للتعليق حالياً",
        "suspended": False,
        "daysOverdue": overdue,
    }


# ==================== Пользователи ====================

@router.get("/users")
async def list_users(
    current_user: CurrentUser = Depends(require_user_viewer),
    db: AsyncSession = Depends(get_db_session),
):
    """Все пользователи, кроме администраторов, новые первыми."""
    result = await db.execute(
        select(User)
        .where((User.role.is_(None)) | (User.role != ROLE_ADMIN))
        .order_by(User.created_at.desc())
    )
    users = result.scalars().all()
    return {"users": [UserResponse.model_validate(u).dump() for u in users]}


@router.put("/users/{user_id}")
async def update_user(
    user_id: str,
    data: UserUpdateRequest,
    current_user: CurrentUser = Depends(require_user_admin),
    db: AsyncSession = Depends(get_db_session),
):
    if not data.email and not data.name and not data.phone:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one field (email, name, or phone) is required",
        )

    user = await _get_user_or_404(db, user_id)

    if data.email:
        existing = await find_user_by_email(db, data.email)
        if existing is not None and existing.id != user_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already taken")

    if data.phone:
        result = await db.execute(select(User).where(User.phone == data.phone, User.id != user_id))
        if result.scalars().first() is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Phone number is already taken")
        if not is_valid_phone(data.phone):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid phone number format")

    if data.email:
        user.email = normalize_email(data.email)
    if data.name:
        user.name = data.name
    if data.phone:
        user.phone = data.phone
    await db.flush()

    logger.info(f"{current_user.user.email} обновил пользователя {user.email}")
    return {"user": UserResponse.model_validate(user).dump()}


@router.delete("/users/{user_id}")
async def remove_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_user_admin),
    db: AsyncSession = Depends(get_db_session),
):
    if current_user.id == user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    user = await _get_user_or_404(db, user_id)
    await delete_user(db, user)

    logger.info(f"{current_user.user.email} удалил пользователя {user_id}")
    return {"message": "User deleted successfully"}


@router.put("/users/{user_id}/change-password")
async def change_user_password(
    user_id: str,
    data: ChangePasswordRequest,
    current_user: CurrentUser = Depends(require_user_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Меняет пароль другого пользователя. Свой пароль так сменить нельзя."""
    if not data.new_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="New password is required")
    if len(data.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be at least 6 characters long",
        )
    if current_user.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change your own password through this method",
        )

    user = await _get_user_or_404(db, user_id)
    await set_password(db, user, data.new_password)

    logger.info(f"{current_user.user.email} сменил пароль пользователя {user.email}")
    return {"message": "Password changed successfully", "userId": user_id}
