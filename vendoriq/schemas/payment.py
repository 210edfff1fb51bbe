# vendoriq/schemas/payment.py
from pydantic import BaseModel


class CreateOrderRequest(BaseModel):
    plan: str
    duration: str


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
