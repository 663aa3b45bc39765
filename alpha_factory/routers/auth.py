# -*- coding: utf-8 -*-
"""
API роутер аутентификации.

Эндпоинты:
- POST /sign-in/email - Вход по email и паролю
- POST /signout - Выход
- GET /session - Текущая сессия
- GET|POST /callback - Перенаправление в кабинет по роли
- GET /check-suspension - Статус приостановки аккаунта
- POST /find-user - Поиск email по логину
- POST /send-otp - Отправка кода подтверждения
- POST /verify-otp - Проверка кода подтверждения
- POST /verify-credentials - Проверка пароля без создания сессии
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import (
    CurrentUser,
    extract_token,
    get_optional_user,
    oauth2_scheme,
    resolve_session,
)
from alpha_factory.auth.jwt import create_session_token, hash_token, session_expires_at
from alpha_factory.auth.otp import OTPError, OTPStore, get_otp_store
from alpha_factory.auth.redirects import dashboard_path
from alpha_factory.config import settings
from alpha_factory.database import get_db_session
from alpha_factory.db.base import new_id
from alpha_factory.db.models import Session
from alpha_factory.models.auth import (
    FindUserRequest,
    SendOtpRequest,
    SessionUser,
    SignInRequest,
    VerifyCredentialsRequest,
    VerifyOtpRequest,
)
from alpha_factory.services.email import EmailError, EmailService, get_email_service
from alpha_factory.services.users import authenticate, find_user_by_email, find_user_by_username
from alpha_factory.utils.security import get_client_info, is_email

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.auth")

INVALID_CREDENTIALS = "بيانات الدخول غير صحيحة"
CREDENTIALS_REQUIRED = "البريد الإلكتروني وكلمة المرور مطلوبان"


@router.post("/sign-in/email")
async def sign_in(
    request: Request,
    response: Response,
    data: SignInRequest,
    db: AsyncSession = Depends(get_db_session),
):
    """
    Вход по email и паролю.

    Создаёт сессию в БД, возвращает токен и ставит cookie.
    """
    if not data.email or not data.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CREDENTIALS_REQUIRED)

    ip, user_agent = get_client_info(request)
    user = await authenticate(db, data.email, data.password)
    if user is None:
        logger.warning(f"Неудачная попытка входа: {data.email}, IP: {ip}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    session_id = new_id()
    expires_at = session_expires_at()
    token = create_session_token(user.id, session_id, expires_at, {"role": user.role})
    db.add(Session(
        id=session_id,
        user_id=user.id,
        token_hash=hash_token(token),
        expires_at=expires_at,
        ip_address=ip,
        user_agent=user_agent[:512],
    ))
    await db.flush()

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=settings.BASE_URL.startswith("https://"),
    )
    logger.info(f"Успешный вход: {user.email}, IP: {ip}")

    return {
        "token": token,
        "user": SessionUser.model_validate(user).dump(),
        "redirect": dashboard_path(user.role),
    }


@router.post("/signout")
async def sign_out(
    response: Response,
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Выход: удаляет сессию и cookie."""
    if current_user is not None:
        await db.delete(current_user.session)
        logger.info(f"Выход: {current_user.user.email}")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/session")
async def get_session(current_user: Optional[CurrentUser] = Depends(get_optional_user)):
    """Текущий пользователь или null."""
    if current_user is None:
        return {"user": None}
    return {"user": SessionUser.model_validate(current_user.user).dump()}


async def _redirect_by_role(request: Request, db: AsyncSession, redirect_status: int) -> RedirectResponse:
    try:
        credentials = await oauth2_scheme(request)
        current_user = await resolve_session(db, extract_token(request, credentials))
    except Exception as e:
        logger.error(f"Ошибка в auth callback: {e}", exc_info=True)
        return RedirectResponse("/", status_code=redirect_status)

    if current_user is None or not current_user.role:
        return RedirectResponse("/", status_code=redirect_status)
    return RedirectResponse(dashboard_path(current_user.role), status_code=redirect_status)


@router.get("/callback")
async def auth_callback_get(request: Request, db: AsyncSession = Depends(get_db_session)):
    """Перенаправляет в кабинет по роли (или на главную)."""
    return await _redirect_by_role(request, db, status.HTTP_307_TEMPORARY_REDIRECT)


@router.post("/callback")
async def auth_callback_post(request: Request, db: AsyncSession = Depends(get_db_session)):
    return await _redirect_by_role(request, db, status.HTTP_303_SEE_OTHER)


@router.get("/check-suspension")
async def check_suspension(current_user: Optional[CurrentUser] = Depends(get_optional_user)):
    """Статус приостановки аккаунта текущего пользователя."""
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = current_user.user
    if user.suspended:
        return {
            "suspended": True,
            "suspendedAt": user.suspended_at.isoformat() if user.suspended_at else None,
            "suspensionReason": user.suspension_reason,
            "message": "حسابك معلق حالياً. للحصول على المساعدة، يرجى التواصل مع الدعم الفني.",
        }
    return {"suspended": False, "message": "الحساب نشط"}


@router.post("/find-user")
async def find_user(data: FindUserRequest, db: AsyncSession = Depends(get_db_session)):
    """
    Находит email по email или логину.

    Используется формой входа, где можно ввести любое из двух.
    """
    identifier = (data.identifier or "").strip()
    if not identifier:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Identifier is required")

    if is_email(identifier):
        user = await find_user_by_email(db, identifier)
    else:
        user = await find_user_by_username(db, identifier)

    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"email": user.email}


@router.post("/send-otp")
async def send_otp(
    data: SendOtpRequest,
    otp_store: OTPStore = Depends(get_otp_store),
    mailer: EmailService = Depends(get_email_service),
):
    """Генерирует шестизначный код на 5 минут и отправляет его на email."""
    if not data.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="البريد الإلكتروني مطلوب")

    code = await otp_store.issue(data.email)

    if not mailer.is_configured:
        logger.error("RESEND_API_KEY не задан, код подтверждения не отправлен")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Email service not configured",
        )

    try:
        await mailer.send_otp_email(data.email, code)
    except EmailError as e:
        logger.error(f"Ошибка отправки кода на {data.email}: {e}")
        await otp_store.discard(data.email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="حدث خطأ في إرسال رمز التحقق",
        )

    return {"success": True}


@router.post("/verify-otp")
async def verify_otp(data: VerifyOtpRequest, otp_store: OTPStore = Depends(get_otp_store)):
    """Проверяет код; успешно проверенный код удаляется."""
    if not data.email or not data.otp:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="البريد الإلكتروني ورمز التحقق مطلوبان",
        )

    try:
        await otp_store.verify(data.email, data.otp)
    except OTPError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {"success": True}


@router.post("/verify-credentials")
async def verify_credentials(data: VerifyCredentialsRequest, db: AsyncSession = Depends(get_db_session)):
    """Проверяет email и пароль, сессию не создаёт (первый шаг входа с OTP)."""
    if not data.email or not data.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CREDENTIALS_REQUIRED)

    user = await authenticate(db, data.email, data.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    return {"success": True}
