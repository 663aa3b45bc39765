# -*- coding: utf-8 -*-
"""
Бизнес-правила оплаты.

- Счёт за проект выставляется после завершения всех этапов и должен
  быть оплачен в течение 14 дней (срок считается от updated_at проекта).
- Уровень доступа клиента зависит от максимальной просрочки:
  3+ дней предупреждение, 7+ только страница счетов, 14+ блокировка.
- Автоматическая приостановка аккаунта при просрочке от 7 дней.
- Фиксация оплаты PayPal в таблице payments.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.db.base import utcnow
from alpha_factory.db.models import (
    FILMING_DONE,
    MODE_DONE,
    REVIEW_DONE,
    Invoice,
    InvoiceStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Project,
    User,
)
from alpha_factory.services.paypal import CaptureInfo
from alpha_factory.utils.dates import ensure_aware

logger = logging.getLogger(__name__)

PAYMENT_TERM_DAYS = 14
WARNING_DAYS = 3
INVOICE_ONLY_DAYS = 7
BLOCKED_DAYS = 14
AUTO_SUSPEND_DAYS = 7

ACCESS_FULL = "full"
ACCESS_INVOICE_ONLY = "invoice_only"
ACCESS_BLOCKED = "blocked"

DEFAULT_SUSPENSION_REASON = "عدم سداد الفاتورة المستحقة"

_DAY_SECONDS = 24 * 60 * 60


@dataclass
class OverdueStatus:
    overdue_days: int
    access_level: str
    restriction_message: str

    @property
    def has_overdue_invoices(self) -> bool:
        return self.overdue_days > 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "overdueDays": self.overdue_days,
            "accessLevel": self.access_level,
            "restrictionMessage": self.restriction_message,
            "hasOverdueInvoices": self.has_overdue_invoices,
        }


def completed_projects_filter(client_id: str) -> tuple:
    """Условия выборки полностью завершённых проектов клиента."""
    return (
        Project.client_id == client_id,
        Project.filming_status == FILMING_DONE,
        Project.edit_mode == MODE_DONE,
        Project.design_mode == MODE_DONE,
        Project.review_mode == REVIEW_DONE,
    )


def days_overdue(due_date: datetime, now: Optional[datetime] = None) -> int:
    """Полных дней после срока оплаты, не меньше нуля."""
    now = now or utcnow()
    delta = (ensure_aware(now) - ensure_aware(due_date)).total_seconds() / _DAY_SECONDS
    return max(0, math.floor(delta))


def invoice_due_date(completed_at: datetime) -> datetime:
    return ensure_aware(completed_at) + timedelta(days=PAYMENT_TERM_DAYS)


def access_status(max_overdue_days: int) -> OverdueStatus:
    """Уровень доступа по максимальной просрочке."""
    if max_overdue_days >= BLOCKED_DAYS:
        return OverdueStatus(
            max_overdue_days,
            ACCESS_BLOCKED,
            "تم حظر حسابك بسبب عدم سداد الفواتير لأكثر من 14 يوم. يرجى التواصل مع الإدارة.",
        )
    if max_overdue_days >= INVOICE_ONLY_DAYS:
        return OverdueStatus(
            max_overdue_days,
            ACCESS_INVOICE_ONLY,
            f"فاتورتك متأخرة منذ {max_overdue_days} أيام. يمكنك الوصول لصفحة الفواتير فقط حتى يتم السداد.",
        )
    if max_overdue_days >= WARNING_DAYS:
        return OverdueStatus(
            max_overdue_days,
            ACCESS_FULL,
            f"لديك فاتورة متأخرة منذ {max_overdue_days} أيام. يرجى السداد في أقرب وقت.",
        )
    return OverdueStatus(max_overdue_days, ACCESS_FULL, "")


def overdue_status_for(completion_dates: Iterable[datetime], now: Optional[datetime] = None) -> OverdueStatus:
    now = now or utcnow()
    max_days = max((days_overdue(invoice_due_date(d), now) for d in completion_dates), default=0)
    return access_status(max_days)


async def get_overdue_status(db: AsyncSession, client_id: str) -> OverdueStatus:
    result = await db.execute(
        select(Project.updated_at).where(*completed_projects_filter(client_id))
    )
    return overdue_status_for(result.scalars().all())


# ==================== Приостановка аккаунтов ====================

def suspend_user(user: User, reason: Optional[str] = None) -> None:
    user.suspended = True
    user.suspended_at = utcnow()
    user.suspension_reason = reason or DEFAULT_SUSPENSION_REASON
    logger.info(f"Аккаунт приостановлен: {user.email} ({user.suspension_reason})")


async def unsuspend_user(db: AsyncSession, user: User) -> int:
    """
    Снимает приостановку и обнуляет просрочку.

    Returns:
        Количество завершённых проектов, чьи счета считаются погашенными
    """
    user.suspended = False
    user.suspended_at = None
    user.suspension_reason = None

    result = await db.execute(select(Project).where(*completed_projects_filter(user.id)))
    projects = result.scalars().all()
    now = utcnow()
    for project in projects:
        project.updated_at = now
    cleared = len(projects)
    logger.info(f"Аккаунт восстановлен: {user.email}, погашено счетов: {cleared}")
    return cleared


def auto_suspend_reason(overdue: int) -> str:
    return f"عدم سداد الفاتورة المستحقة خلال {overdue} يوم من تاريخ الاستحقاق"


# ==================== Платежи ====================

async def record_paypal_capture(
    db: AsyncSession,
    order_id: str,
    capture: CaptureInfo,
    capture_data: dict[str, Any],
    payer_id: Optional[str] = None,
) -> Optional[Payment]:
    """
    Сохраняет успешный PayPal capture и отмечает счёт оплаченным.

    reference_id заказа должен совпадать с id или номером счёта.
    Повторный capture того же заказа не создаёт второй платёж.

    Returns:
        Payment или None, если счёт не найден или оплата не завершена
    """
    if not capture.completed or not capture.reference_id:
        return None

    # reference_id - id счёта или его номер; совпадение по id приоритетнее
    invoice = await db.get(Invoice, capture.reference_id)
    if invoice is None:
        result = await db.execute(
            select(Invoice)
            .where(Invoice.invoice_number == capture.reference_id)
            .order_by(Invoice.created_at)
        )
        invoice = result.scalars().first()
    if invoice is None:
        logger.info(f"PayPal заказ {order_id}: счёт {capture.reference_id} не найден, платёж не сохранён")
        return None

    existing = await db.execute(select(Payment).where(Payment.paypal_order_id == order_id))
    payment = existing.scalar_one_or_none()
    if payment is not None:
        return payment

    amount = capture.amount or {}
    now = utcnow()
    payment = Payment(
        invoice_id=invoice.id,
        payment_method=PaymentMethod.PAYPAL,
        payment_provider="paypal",
        transaction_id=capture.transaction_id,
        amount=Decimal(str(amount.get("value", invoice.total_amount))),
        currency=amount.get("currency_code", "USD"),
        status=PaymentStatus.COMPLETED,
        paypal_order_id=order_id,
        paypal_payer_id=payer_id or (capture_data.get("payer") or {}).get("payer_id"),
        payment_metadata=capture_data,
        paid_at=now,
    )
    db.add(payment)

    invoice.status = InvoiceStatus.PAID
    invoice.paid_at = now
    await db.flush()

    logger.info(f"Счёт {invoice.invoice_number} оплачен через PayPal, заказ {order_id}")
    return payment
