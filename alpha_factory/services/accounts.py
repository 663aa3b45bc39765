"""
Массовое создание учётных записей со сгенерированными логинами и паролями.

Используется при создании групп и в панели владельца. Проверки выполняются
до записи в БД; ошибки возвращаются как AccountsError со статусом HTTP.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.db.models import User
from alpha_factory.services.email import UserCredentials
from alpha_factory.services.users import create_user, normalize_email
from alpha_factory.utils.credentials import generate_password, generate_username

logger = logging.getLogger(__name__)


class AccountsError(Exception):
    """Запрос на создание аккаунтов отклонён."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class NewMember:
    name: str
    email: str
    role: str
    phone: Optional[str] = None


def _repeated(values: list[str]) -> list[str]:
    return sorted({v for v in values if values.count(v) > 1})


async def check_new_members(db: AsyncSession, members: list[NewMember]) -> None:
    """
    Проверяет, что email и телефоны не повторяются в запросе и свободны в БД.

    Raises:
        AccountsError: 409 при повторе или занятом значении
    """
    emails = [normalize_email(m.email) for m in members]
    duplicates = _repeated(emails)
    if duplicates:
        raise AccountsError(
            status.HTTP_409_CONFLICT,
            f"البريد الإلكتروني مكرر في الطلب: {', '.join(duplicates)}",
        )

    phones = [m.phone.strip() for m in members if m.phone and m.phone.strip()]
    duplicates = _repeated(phones)
    if duplicates:
        raise AccountsError(
            status.HTTP_409_CONFLICT,
            f"رقم الهاتف مكرر في الطلب: {', '.join(duplicates)}",
        )

    result = await db.execute(select(User.email).where(func.lower(User.email).in_(emails)))
    taken = result.scalars().all()
    if taken:
        raise AccountsError(
            status.HTTP_409_CONFLICT,
            f"البريد الإلكتروني مستخدم مسبقاً: {', '.join(taken)}",
        )

    if phones:
        result = await db.execute(select(User.phone).where(or_(*(User.phone == p for p in phones))))
        taken = result.scalars().all()
        if taken:
            raise AccountsError(
                status.HTTP_409_CONFLICT,
                f"رقم الهاتف مستخدم مسبقاً: {', '.join(taken)}",
            )


async def create_member_accounts(
    db: AsyncSession,
    members: list[NewMember],
    group_id: Optional[str],
    group_name: str,
) -> list[UserCredentials]:
    """Создаёт пользователей и возвращает их доступы для писем и ответа API."""
    credentials: list[UserCredentials] = []
    for member in members:
        username = generate_username(member.name, member.role)
        password = generate_password()
        user = await create_user(
            db,
            name=member.name,
            email=member.email,
            password=password,
            role=member.role,
            username=username,
            group_id=group_id,
        )
        if member.phone and member.phone.strip():
            user.phone = member.phone.strip()
        credentials.append(UserCredentials(
            name=member.name,
            email=normalize_email(member.email),
            username=username,
            password=password,
            role=member.role,
            group_name=group_name,
        ))

    await db.flush()
    logger.info(f"Создано аккаунтов: {len(credentials)} ({group_name})")
    return credentials
