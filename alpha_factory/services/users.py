# -*- coding: utf-8 -*-
"""
Операции с пользователями и их учётными записями входа.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.jwt import hash_password, verify_password
from alpha_factory.db.base import new_id
from alpha_factory.db.models import CREDENTIAL_PROVIDER, ROLE_OWNER, Account, Session, User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == normalize_email(email)))
    return result.scalar_one_or_none()


async def find_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username.strip()))
    return result.scalar_one_or_none()


async def get_credential_account(db: AsyncSession, user_id: str) -> Optional[Account]:
    result = await db.execute(
        select(Account).where(
            Account.user_id == user_id,
            Account.provider_id == CREDENTIAL_PROVIDER,
        )
    )
    return result.scalars().first()


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """
    Проверяет email и пароль.

    Returns:
        Пользователь или None, если пользователь, учётная запись или пароль не подходят
    """
    user = await find_user_by_email(db, email)
    if user is None:
        return None
    account = await get_credential_account(db, user.id)
    if account is None or not account.password:
        return None
    if not verify_password(password, account.password):
        return None
    return user


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: str,
    username: Optional[str] = None,
    group_id: Optional[str] = None,
    email_verified: bool = False,
) -> User:
    """Создаёт пользователя вместе с учётной записью для входа по паролю."""
    user_id = new_id()
    user = User(
        id=user_id,
        name=name.strip(),
        email=normalize_email(email),
        username=username,
        role=role,
        group_id=group_id,
        email_verified=email_verified,
    )
    account = Account(
        user_id=user_id,
        account_id=user_id,
        provider_id=CREDENTIAL_PROVIDER,
        password=hash_password(password),
    )
    db.add_all([user, account])
    await db.flush()
    logger.info(f"Создан пользователь {user.email} ({role})")
    return user


async def set_password(db: AsyncSession, user: User, new_password: str) -> Account:
    """Меняет пароль; создаёт учётную запись, если её не было."""
    account = await get_credential_account(db, user.id)
    if account is None:
        account = Account(user_id=user.id, account_id=user.id, provider_id=CREDENTIAL_PROVIDER)
        db.add(account)
    account.password = hash_password(new_password)
    await db.flush()
    return account


async def delete_user(db: AsyncSession, user: User) -> None:
    """Удаляет пользователя с учётными записями и сессиями."""
    await db.execute(delete(Session).where(Session.user_id == user.id))
    await db.execute(delete(Account).where(Account.user_id == user.id))
    await db.delete(user)
    await db.flush()


class OwnerSetupError(Exception):
    """Владелец уже есть или email занят."""


async def create_owner(db: AsyncSession, name: str, email: str, password: str) -> User:
    """
    Создаёт аккаунт владельца (первичная настройка).

    Raises:
        OwnerSetupError: если владелец уже существует или email занят
    """
    result = await db.execute(select(User).where(User.role == ROLE_OWNER))
    existing_owner = result.scalars().first()
    if existing_owner is not None:
        raise OwnerSetupError(f"Owner account already exists: {existing_owner.name} ({existing_owner.email})")

    if await find_user_by_email(db, email) is not None:
        raise OwnerSetupError(f"Email already exists: {email}")

    return await create_user(
        db,
        name=name,
        email=email,
        password=password,
        role=ROLE_OWNER,
        email_verified=True,
    )
