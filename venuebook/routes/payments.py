"""
Payment records for bookings.

Intents are local records with a random client secret; no external processor is
contacted. Confirming an intent marks the booking paid, refunding reverses it.
"""

import logging
import secrets
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_roles
from ..database import get_db
from ..models import ROLE_ADMIN, Booking, Payment, User
from ..security_utils import strip_html
from ..shared.validators import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


class CreateIntentRequest(BaseModel):
    bookingId: Optional[int] = None


class RefundRequest(BaseModel):
    paymentId: Optional[int] = None
    reason: Optional[str] = None


class PaymentResponse(BaseModel):
    id: int
    booking_id: int
    user_id: int
    amount: float
    currency: str
    status: str
    refund_reason: Optional[str] = None
    refunded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def _get_payment(db: Session, payment_id: int) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.post("/create-intent")
async def create_payment_intent(
    data: CreateIntentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not data.bookingId:
        raise HTTPException(status_code=400, detail="Missing required field: bookingId")

    booking = db.query(Booking).filter(Booking.id == data.bookingId).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    if booking.client_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not authorized to pay for this booking")
    if booking.status == "cancelled":
        raise HTTPException(status_code=400, detail="Cannot pay for a cancelled booking")
    if booking.payment_status == "paid":
        raise HTTPException(status_code=400, detail="Booking is already paid")

    payment = Payment(
        booking_id=booking.id,
        user_id=current_user.id,
        amount=booking.total_price_amount or 0,
        currency=booking.total_price_currency,
        status="pending",
        client_secret=f"pi_{secrets.token_hex(12)}_secret_{secrets.token_hex(12)}",
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(f"Payment intent {payment.id} created for booking {booking.id}")

    return {"clientSecret": payment.client_secret, "paymentId": payment.id, "bookingId": booking.id}


@router.post("/{payment_id}/confirm")
async def confirm_payment(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payment = _get_payment(db, payment_id)
    if current_user.role != ROLE_ADMIN and payment.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not authorized to confirm this payment")
    if payment.status != "pending":
        raise HTTPException(status_code=400, detail=f"Payment is already {payment.status}")

    payment.status = "completed"
    payment.booking.payment_status = "paid"
    db.commit()
    db.refresh(payment)
    logger.info(f"Payment {payment.id} completed for booking {payment.booking_id}")

    return {"message": "Payment confirmed", "payment": PaymentResponse.model_validate(payment)}


@router.get("/history")
async def payment_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Payment)
    if current_user.role != ROLE_ADMIN:
        query = query.filter(Payment.user_id == current_user.id)
    payments = query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()
    return {"payments": [PaymentResponse.model_validate(p) for p in payments]}


@router.post("/refund")
async def refund_payment(
    data: RefundRequest,
    _: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    if not data.paymentId:
        raise HTTPException(status_code=400, detail="Missing required field: paymentId")

    payment = _get_payment(db, data.paymentId)
    if payment.status != "completed":
        raise HTTPException(status_code=400, detail="Only completed payments can be refunded")

    payment.status = "refunded"
    payment.refund_reason = strip_html(data.reason)
    payment.refunded_at = utcnow()
    payment.booking.payment_status = "refunded"
    db.commit()
    db.refresh(payment)
    logger.info(f"Payment {payment.id} refunded")

    return {"message": "Payment refunded", "payment": PaymentResponse.model_validate(payment)}
