# -*- coding: utf-8 -*-
"""
Страницы кабинетов.

Каждая страница - статическая HTML-оболочка из alpha_factory/web,
данные она загружает через /api. Анонимный пользователь или пользователь
с другой ролью перенаправляется на главную.

Маршруты:
- GET / - Вход
- GET /auth-redirect - Перенаправление в кабинет по роли
- GET /admin, /client, /designer, /editor - Кабинеты
- GET /reviewer - Перенаправление на /reviewer/dashboard
- GET /{role}/dashboard - Кабинет роли
- GET /paypal/success, /paypal/cancel - Результат оплаты
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse, RedirectResponse

from alpha_factory.auth.dependencies import CurrentUser, get_optional_user
from alpha_factory.auth.redirects import dashboard_path
from alpha_factory.db.models import (
    ADMIN_ROLES,
    ROLE_CLIENT,
    ROLE_DESIGNER,
    ROLE_EDITOR,
    ROLE_REVIEWER,
)

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.pages")

WEB_DIR = Path(__file__).resolve().parent.parent / "web"

# Кабинет -> (файл оболочки, допустимые роли)
DASHBOARDS = {
    "admin": ("admin.html", ADMIN_ROLES),
    "client": ("client.html", (ROLE_CLIENT,)),
    "designer": ("designer.html", (ROLE_DESIGNER,)),
    "editor": ("editor.html", (ROLE_EDITOR,)),
    "reviewer": ("reviewer.html", (ROLE_REVIEWER,)),
}


def page(name: str) -> FileResponse:
    return FileResponse(WEB_DIR / name, media_type="text/html")


def _dashboard(section: str, current_user: Optional[CurrentUser]):
    filename, roles = DASHBOARDS[section]
    if current_user is None or current_user.role not in roles:
        return RedirectResponse("/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    return page(filename)


@router.get("/")
async def index_page():
    return page("index.html")


@router.get("/auth-redirect")
async def auth_redirect(current_user: Optional[CurrentUser] = Depends(get_optional_user)):
    target = dashboard_path(current_user.role) if current_user else "/"
    return RedirectResponse(target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/paypal/success")
async def paypal_success_page():
    return page("paypal_success.html")


@router.get("/paypal/cancel")
async def paypal_cancel_page():
    return page("paypal_cancel.html")


@router.get("/reviewer")
async def reviewer_page():
    return RedirectResponse("/reviewer/dashboard", status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/{section}/dashboard")
async def section_dashboard(section: str, current_user: Optional[CurrentUser] = Depends(get_optional_user)):
    if section not in DASHBOARDS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return _dashboard(section, current_user)


@router.get("/{section}")
async def section_page(section: str, current_user: Optional[CurrentUser] = Depends(get_optional_user)):
    """Кабинеты admin, client, designer, editor."""
    if section not in DASHBOARDS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return _dashboard(section, current_user)
