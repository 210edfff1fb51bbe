# vendoriq/api/payments.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from vendoriq.core.security import get_current_user
from vendoriq.db.session import get_db
from vendoriq.models.subscription import Subscription
from vendoriq.models.user import User
from vendoriq.schemas.payment import CreateOrderRequest, VerifyPaymentRequest
from vendoriq.services import payment_service

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/create-order")
def create_order(data: CreateOrderRequest, current_user: User = Depends(get_current_user)):
    order = payment_service.create_order(current_user.id, data.plan, data.duration)
    return {"success": True, "data": order}


@router.post("/verify")
def verify_payment(
    data: VerifyPaymentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not payment_service.verify_payment_signature(
        data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature
    ):
        raise HTTPException(status_code=400, detail="Invalid payment signature")
    if payment_service.payment_already_used(db, data.razorpay_payment_id):
        raise HTTPException(status_code=400, detail="Payment already processed")

    # The order notes, not the request body, decide what was paid for
    order = payment_service.fetch_order(data.razorpay_order_id)
    plan, duration = payment_service.plan_from_order(order, current_user.id)

    subscription = payment_service.activate_subscription(
        db, current_user, plan, duration, data.razorpay_payment_id
    )
    return {
        "success": True,
        "message": "Payment verified and subscription activated",
        "data": subscription.to_dict(),
    }


@router.get("/subscriptions")
def list_subscriptions(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    subscriptions = (
        db.query(Subscription)
        .filter(Subscription.user_id == current_user.id)
        .order_by(Subscription.created_at.desc())
        .all()
    )
    return {"success": True, "data": [s.to_dict() for s in subscriptions]}
