# -*- coding: utf-8 -*-
"""
FastAPI зависимости для авторизации.

Предоставляет зависимости для:
- Получения текущего пользователя из токена сессии (заголовок или cookie)
- Опциональной авторизации для публичных эндпоинтов
- Проверки ролей
"""

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from alpha_factory.auth.jwt import hash_token, verify_token
from alpha_factory.config import settings
from alpha_factory.database import get_db_session
from alpha_factory.db.base import utcnow
from alpha_factory.db.models import ADMIN_ROLES, Session, User
from alpha_factory.utils.dates import ensure_aware

# Схема авторизации Bearer token
oauth2_scheme = HTTPBearer(auto_error=False)


class CurrentUser:
    """
    Контекст текущего авторизованного пользователя.

    Содержит пользователя из БД и строку сессии.
    """
    def __init__(self, user: User, session: Session):
        self.user = user
        self.session = session

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def role(self) -> Optional[str]:
        return self.user.role

    @property
    def is_admin(self) -> bool:
        """owner или admin."""
        return self.user.role in ADMIN_ROLES


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """Токен из Authorization: Bearer или из cookie сессии."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def resolve_session(db: AsyncSession, token: Optional[str]) -> Optional[CurrentUser]:
    """
    Находит активную сессию по токену.

    Returns:
        CurrentUser или None, если токен невалиден, сессия удалена или истекла
    """
    if not token:
        return None

    token_data = verify_token(token)
    if token_data is None or token_data.get("type") != "session":
        return None

    session_id = token_data.get("sid")
    if not session_id:
        return None

    result = await db.execute(select(Session).where(Session.id == session_id))
    session = result.scalar_one_or_none()
    if session is None or session.token_hash != hash_token(token):
        return None
    if ensure_aware(session.expires_at) <= utcnow():
        return None

    user = await db.get(User, session.user_id)
    if user is None:
        return None

    return CurrentUser(user=user, session=session)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[CurrentUser]:
    """
    Опционально получает текущего пользователя.

    Не выбрасывает исключение если сессии нет.
    """
    return await resolve_session(db, extract_token(request, credentials))


async def get_current_user(
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
) -> CurrentUser:
    """
    Получает текущего пользователя.

    Raises:
        HTTPException 401: Если сессия отсутствует или невалидна
    """
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return current_user


def require_roles(
    *roles: str,
    status_code: int = status.HTTP_403_FORBIDDEN,
    detail: str = "Forbidden",
) -> Callable:
    """
    Фабрика зависимостей для проверки роли.

    Пример использования:
        @router.get("/stats")
        async def stats(user: CurrentUser = Depends(require_roles("owner"))):
            ...
    """
    async def _check_role(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(status_code=status_code, detail=detail)
        return current_user

    return _check_role
