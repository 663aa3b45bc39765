# -*- coding: utf-8 -*-
"""
API роутер счетов.

Эндпоинты:
- GET / - Счета текущего пользователя
- POST / - Создание счёта
- GET /check-new - Количество счетов и дата последнего
- POST /send-reminder - Напоминание об оплате (3 или 7 дней)
"""

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, get_current_user
from alpha_factory.database import get_db_session
from alpha_factory.db.base import utcnow
from alpha_factory.db.models import Invoice, InvoiceItem, InvoiceStatus
from alpha_factory.models.invoice import InvoiceCreate, InvoiceResponse, SendReminderRequest
from alpha_factory.services.email import EmailService, get_email_service
from alpha_factory.utils.dates import isoformat_ms, parse_datetime

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.invoices")

REMINDER_TYPES = ("3", "7")


@router.get("")
async def list_invoices(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Счета пользователя с позициями, новые первыми."""
    result = await db.execute(
        select(Invoice)
        .where(Invoice.client_id == current_user.id)
        .order_by(Invoice.created_at.desc())
    )
    invoices = result.scalars().all()
    return {
        "success": True,
        "invoices": [InvoiceResponse.model_validate(inv).dump() for inv in invoices],
    }


@router.post("")
async def create_invoice(
    data: InvoiceCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Создаёт счёт в статусе PENDING.

    Расчётный период: от startDate (или сегодня) до dueDate.
    """
    due_date = parse_datetime(data.due_date)
    if not data.invoice_number or due_date is None or data.total_amount is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    start_date = parse_datetime(data.start_date) or utcnow()

    invoice = Invoice(
        invoice_number=data.invoice_number,
        client_id=current_user.id,
        billing_period_start=start_date,
        billing_period_end=due_date,
        due_date=due_date,
        total_amount=Decimal(str(data.total_amount)),
        status=InvoiceStatus.PENDING,
        items=[
            InvoiceItem(
                project_id=item.project_id,
                description=item.description,
                quantity=item.quantity,
                unit_price=Decimal(str(item.unit_price)),
                total=Decimal(str(item.total)),
                work_type=item.work_type,
                work_date=parse_datetime(item.work_date),
                work_description=item.work_description,
            )
            for item in data.items
        ],
        payments=[],
    )
    db.add(invoice)
    await db.flush()

    logger.info(f"Создан счёт {invoice.invoice_number} для {current_user.user.email}")
    return {"success": True, "invoice": InvoiceResponse.model_validate(invoice).dump()}


@router.get("/check-new")
async def check_new_invoices(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Количество счетов пользователя и дата последнего."""
    result = await db.execute(
        select(func.count(Invoice.id), func.max(Invoice.created_at))
        .where(Invoice.client_id == current_user.id)
    )
    count, latest = result.one()
    return {
        "success": True,
        "invoiceCount": count or 0,
        "latestInvoiceDate": isoformat_ms(latest) if latest else None,
    }


@router.post("/send-reminder")
async def send_reminder(
    data: SendReminderRequest,
    current_user: CurrentUser = Depends(get_current_user),
    mailer: EmailService = Depends(get_email_service),
):
    """Отправляет напоминание об оплате на указанный email."""
    if not data.reminder_type or not data.user_email or not data.user_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: reminderType, userEmail, userName",
        )
    if data.reminder_type not in REMINDER_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid reminderType. Must be '3' or '7'",
        )

    sent = await mailer.send_invoice_reminder(data.user_email, data.user_name, data.reminder_type)
    if not sent:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to send reminder email"},
        )

    logger.info(f"Напоминание {data.reminder_type} дн. отправлено {data.user_email} ({current_user.user.email})")
    return {
        "success": True,
        "message": "Invoice reminder email sent successfully",
        "details": {
            "to": data.user_email,
            "userName": data.user_name,
            "reminderType": data.reminder_type,
            "sentAt": isoformat_ms(utcnow()),
        },
    }
