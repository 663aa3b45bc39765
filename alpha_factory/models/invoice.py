# -*- coding: utf-8 -*-
"""
Pydantic схемы для счетов и платежей.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from alpha_factory.db.models import InvoiceStatus, PaymentMethod, PaymentStatus
from alpha_factory.models.common import CamelModel


# ==================== Запросы ====================

class InvoiceItemCreate(CamelModel):
    project_id: Optional[str] = Field(None, description="ID проекта")
    description: str = Field(..., description="Описание работы")
    quantity: int = Field(1, ge=1, description="Количество")
    unit_price: float = Field(..., description="Цена за единицу")
    total: float = Field(..., description="Сумма позиции")
    work_type: Optional[str] = Field(None, description="Тип работы")
    work_date: Optional[str] = Field(None, description="Дата выполнения")
    work_description: Optional[str] = Field(None, description="Подробности")


class InvoiceCreate(CamelModel):
    invoice_number: Optional[str] = Field(None, description="Номер счёта")
    start_date: Optional[str] = Field(None, description="Начало расчётного периода")
    due_date: Optional[str] = Field(None, description="Срок оплаты")
    total_amount: Optional[float] = Field(None, description="Итоговая сумма")
    items: list[InvoiceItemCreate] = Field(default_factory=list, description="Позиции счёта")


class SendReminderRequest(CamelModel):
    reminder_type: Optional[str] = Field(None, description="Тип напоминания: 3 или 7")
    user_email: Optional[str] = Field(None, description="Email получателя")
    user_name: Optional[str] = Field(None, description="Имя получателя")


class CreatePaymentRequest(CamelModel):
    amount: Optional[float] = Field(None, description="Сумма к оплате")
    currency: str = Field("USD", description="Валюта")
    description: Optional[str] = Field(None, description="Описание платежа")
    invoice_id: Optional[str] = Field(None, description="ID или номер счёта (reference_id заказа)")


class CapturePaymentRequest(CamelModel):
    order_id: Optional[str] = Field(None, description="ID заказа PayPal")


# ==================== Ответы ====================

class InvoiceItemResponse(CamelModel):
    id: str
    invoice_id: str
    project_id: Optional[str] = None
    description: str
    unit_price: float
    quantity: int
    total: float
    work_type: Optional[str] = None
    work_date: Optional[datetime] = None
    work_description: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentResponse(CamelModel):
    id: str
    invoice_id: str
    payment_method: PaymentMethod
    payment_provider: Optional[str] = None
    transaction_id: Optional[str] = None
    amount: float
    currency: str
    status: PaymentStatus
    paypal_order_id: Optional[str] = None
    paypal_payer_id: Optional[str] = None
    crypto_address: Optional[str] = None
    crypto_network: Optional[str] = None
    metadata: Optional[dict[str, Any]] = Field(None, validation_alias="payment_metadata")
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class InvoiceResponse(CamelModel):
    id: str
    invoice_number: str
    client_id: str
    billing_period_start: datetime
    billing_period_end: datetime
    due_date: datetime
    total_amount: float
    status: InvoiceStatus
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: list[InvoiceItemResponse] = Field(default_factory=list)
    payments: list[PaymentResponse] = Field(default_factory=list)
