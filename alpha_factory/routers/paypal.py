# -*- coding: utf-8 -*-
"""
API роутер оплаты через PayPal.

Эндпоинты:
- POST /create-payment - Создание заказа и ссылки на оплату
- POST /capture-payment - Списание по одобренному заказу
- GET /handle-return - Возврат покупателя с PayPal (token, PayerID)

Успешное списание по заказу, привязанному к счёту, сохраняется
в таблице payments, а счёт отмечается оплаченным.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, get_current_user
from alpha_factory.database import get_db_session
from alpha_factory.models.invoice import CapturePaymentRequest, CreatePaymentRequest
from alpha_factory.services.billing import record_paypal_capture
from alpha_factory.services.paypal import (
    PayPalClient,
    PayPalError,
    extract_capture,
    find_approval_url,
    get_paypal_client,
)

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.paypal")


def _paypal_failure(error: str, details: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": error, "details": details},
    )


@router.post("/create-payment")
async def create_payment(
    data: CreatePaymentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    paypal: PayPalClient = Depends(get_paypal_client),
):
    """Создаёт заказ PayPal с intent=CAPTURE."""
    if not data.amount or data.amount <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid amount")

    try:
        response = await paypal.create_order(
            amount=data.amount,
            currency=data.currency,
            description=data.description,
            reference_id=data.invoice_id,
        )
    except PayPalError as e:
        logger.error(f"Ошибка создания заказа PayPal: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")

    if not response.ok:
        return _paypal_failure("Failed to create PayPal payment", response.data)

    order = response.data
    logger.info(f"Создан заказ PayPal {order.get('id')} пользователем {current_user.user.email}")
    return {
        "success": True,
        "orderId": order.get("id"),
        "approvalUrl": find_approval_url(order),
        "order": order,
    }


@router.post("/capture-payment")
async def capture_payment(
    data: CapturePaymentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    paypal: PayPalClient = Depends(get_paypal_client),
    db: AsyncSession = Depends(get_db_session),
):
    """Списывает оплату по заказу."""
    if not data.order_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order ID is required")

    try:
        response = await paypal.capture_order(data.order_id)
    except PayPalError as e:
        logger.error(f"Ошибка списания PayPal {data.order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")

    if not response.ok:
        return _paypal_failure("Failed to capture PayPal payment", response.data)

    capture_data = response.data
    capture = extract_capture(capture_data)
    if not capture.completed:
        return {"success": False, "status": capture.status, "captureData": capture_data}

    await record_paypal_capture(db, data.order_id, capture, capture_data)
    return {
        "success": True,
        "status": "COMPLETED",
        "transactionId": capture.transaction_id,
        "amount": capture.amount,
        "captureData": capture_data,
    }


@router.get("/handle-return")
async def handle_return(
    token: Optional[str] = Query(None, description="ID заказа PayPal"),
    payer_id: Optional[str] = Query(None, alias="PayerID"),
    current_user: CurrentUser = Depends(get_current_user),
    paypal: PayPalClient = Depends(get_paypal_client),
    db: AsyncSession = Depends(get_db_session),
):
    """Обрабатывает возврат покупателя: получает заказ и списывает оплату."""
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing PayPal token")

    try:
        order_response = await paypal.get_order(token)
        if not order_response.ok:
            return _paypal_failure("Failed to get order details", order_response.data)

        capture_response = await paypal.capture_order(token)
    except PayPalError as e:
        logger.error(f"Ошибка обработки возврата PayPal {token}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")

    if not capture_response.ok:
        return _paypal_failure("Failed to capture payment", capture_response.data)

    capture_data = capture_response.data
    capture = extract_capture(capture_data)
    if not capture.completed:
        return {"success": False, "status": capture.status, "captureData": capture_data}

    await record_paypal_capture(db, token, capture, capture_data, payer_id=payer_id)
    return {
        "success": True,
        "status": "COMPLETED",
        "transactionId": capture.transaction_id,
        "amount": capture.amount,
        "referenceId": capture.reference_id,
        "payerId": payer_id,
        "orderData": order_response.data,
        "captureData": capture_data,
    }
