# vendoriq/services/payment_service.py
import hashlib
import hmac
import logging
import time
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Tuple

import requests
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vendoriq.core.config import settings
from vendoriq.models.subscription import Subscription
from vendoriq.models.user import User

logger = logging.getLogger(__name__)

PLANS = {
    "basic": {"monthly": 200, "yearly": 2000},
    "premium": {"monthly": 300, "yearly": 3000},
}


def razorpay_configured() -> bool:
    return bool(settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET)


def get_plan_amount(plan: str, duration: str) -> int:
    amount = PLANS.get(plan, {}).get(duration)
    if amount is None:
        raise HTTPException(status_code=400, detail="Invalid plan or duration")
    return amount


def _require_configured():
    if not razorpay_configured():
        raise HTTPException(
            status_code=503,
            detail="Payment gateway not configured. Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET.",
        )


def create_order(user_id: str, plan: str, duration: str) -> dict:
    amount = get_plan_amount(plan, duration)
    _require_configured()

    payload = {
        "amount": amount * 100,  # paise
        "currency": settings.SUBSCRIPTION_CURRENCY,
        "receipt": f"order_{user_id}_{int(time.time() * 1000)}",
        "notes": {"user_id": user_id, "plan": plan, "duration": duration},
    }
    try:
        resp = requests.post(
            f"{settings.RAZORPAY_BASE_URL}/orders",
            json=payload,
            auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET),
            timeout=20,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"❌ Razorpay order creation failed for {user_id}: {e}")
        raise HTTPException(status_code=502, detail="Payment order creation failed")

    order = resp.json()
    logger.info(f"💳 Created order {order.get('id')} for user {user_id} ({plan}/{duration})")
    return {
        "order_id": order["id"],
        "amount": order["amount"],
        "currency": order["currency"],
        "key_id": settings.RAZORPAY_KEY_ID,
    }


def fetch_order(order_id: str) -> dict:
    _require_configured()
    try:
        resp = requests.get(
            f"{settings.RAZORPAY_BASE_URL}/orders/{order_id}",
            auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET),
            timeout=20,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"❌ Razorpay order lookup failed for {order_id}: {e}")
        raise HTTPException(status_code=502, detail="Payment order lookup failed")
    return resp.json()


def plan_from_order(order: dict, user_id: str) -> Tuple[str, str]:
    """Plan and duration recorded on the order when it was created for this user."""
    notes = order.get("notes")
    if not isinstance(notes, dict):
        notes = {}
    if notes.get("user_id") != user_id:
        logger.warning(f"⚠️ Order {order.get('id')} was not created for user {user_id}")
        raise HTTPException(status_code=403, detail="Order does not belong to this account")

    plan, duration = notes.get("plan"), notes.get("duration")
    amount = get_plan_amount(plan, duration)
    if order.get("amount") != amount * 100:
        logger.warning(f"⚠️ Order {order.get('id')} amount {order.get('amount')} does not match {plan}/{duration}")
        raise HTTPException(status_code=400, detail="Order amount does not match plan")
    return plan, duration


def payment_already_used(db: Session, payment_id: str) -> bool:
    return db.query(Subscription.id).filter(Subscription.payment_id == payment_id).first() is not None


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    _require_configured()
    body = f"{order_id}|{payment_id}".encode()
    expected = hmac.new(settings.RAZORPAY_KEY_SECRET.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


def activate_subscription(db: Session, user: User, plan: str, duration: str, payment_id: str) -> Subscription:
    amount = get_plan_amount(plan, duration)
    months = 12 if duration == "yearly" else 1
    now = datetime.utcnow()

    subscription = Subscription(
        user_id=user.id,
        plan_name=plan,
        amount=Decimal(amount),
        currency=settings.SUBSCRIPTION_CURRENCY,
        starts_at=now,
        ends_at=now + timedelta(days=30 * months),
        payment_method="razorpay",
        payment_id=payment_id,
    )
    db.add(subscription)

    user.subscription_status = "active"
    user.last_payment_at = now

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"⚠️ Payment {payment_id} was already applied to a subscription")
        raise HTTPException(status_code=400, detail="Payment already processed")
    db.refresh(subscription)
    logger.info(f"✅ Subscription {plan}/{duration} activated for user {user.id}")
    return subscription
