# vendoriq/models/subscription.py
import uuid

from sqlalchemy import Column, String, DateTime, Numeric, Enum, ForeignKey, func
from sqlalchemy.orm import relationship

from vendoriq.db.base_class import Base

SUBSCRIPTION_STATES = ("active", "cancelled", "expired")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    plan_name = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="INR")
    status = Column(Enum(*SUBSCRIPTION_STATES, name="subscription_state"), default="active", index=True)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    payment_method = Column(String(255), nullable=True)
    payment_id = Column(String(255), nullable=True, unique=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="subscriptions")

    def to_dict(self):
        return {
            "id": self.id,
            "plan_name": self.plan_name,
            "amount": float(self.amount),
            "currency": self.currency,
            "status": self.status,
            "starts_at": self.starts_at.isoformat(),
            "ends_at": self.ends_at.isoformat(),
            "payment_method": self.payment_method,
            "payment_id": self.payment_id,
        }
