"""Соответствие ролей и стартовых страниц кабинетов."""

from typing import Optional

from alpha_factory.db.models import (
    ROLE_ADMIN,
    ROLE_CLIENT,
    ROLE_DESIGNER,
    ROLE_EDITOR,
    ROLE_OWNER,
    ROLE_REVIEWER,
)

DASHBOARD_PATHS = {
    ROLE_OWNER: "/admin",
    ROLE_ADMIN: "/admin",
    ROLE_CLIENT: "/client",
    ROLE_DESIGNER: "/designer",
    ROLE_REVIEWER: "/reviewer",
    ROLE_EDITOR: "/editor",
}


def dashboard_path(role: Optional[str]) -> str:
    """Кабинет для роли; неизвестная роль или её отсутствие ведут на главную."""
    return DASHBOARD_PATHS.get(role or "", "/")
