# vendoriq/models/user.py
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, Enum, JSON, func
from sqlalchemy.orm import relationship

from vendoriq.db.base_class import Base

SUBSCRIPTION_STATUSES = ("trial", "active", "expired")


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=False)
    phone = Column(String(20), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    email_verified_at = Column(DateTime, nullable=True)
    phone_verified_at = Column(DateTime, nullable=True)
    hashed_password = Column(String(255), nullable=True)
    location = Column(String(255), index=True, nullable=False)
    industries = Column(JSON, default=list)

    # Status flags
    is_verified = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    # Reputation
    rating = Column(Numeric(3, 2), default=0)
    total_reviews = Column(Integer, default=0)

    # Subscription
    subscription_status = Column(
        Enum(*SUBSCRIPTION_STATUSES, name="subscription_status"), default="trial", index=True
    )
    trial_ends_at = Column(DateTime, nullable=True)
    last_payment_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    service_requests = relationship("ServiceRequest", back_populates="creator")
    subscriptions = relationship("Subscription", back_populates="user", cascade="all, delete-orphan")
    files = relationship("File", back_populates="user", cascade="all, delete-orphan")

    def is_trial_active(self) -> bool:
        return (
            self.subscription_status == "trial"
            and self.trial_ends_at is not None
            and self.trial_ends_at > datetime.utcnow()
        )

    def can_post_requests(self) -> bool:
        return self.subscription_status == "active" or self.is_trial_active()

    def to_dict(self):
        """Serialize the user without credentials"""
        return {
            "id": self.id,
            "business_name": self.business_name,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "location": self.location,
            "industries": self.industries or [],
            "is_verified": self.is_verified,
            "is_active": self.is_active,
            "rating": float(self.rating or 0),
            "total_reviews": self.total_reviews,
            "subscription_status": self.subscription_status,
            "email_verified_at": self.email_verified_at.isoformat() if self.email_verified_at else None,
            "phone_verified_at": self.phone_verified_at.isoformat() if self.phone_verified_at else None,
            "trial_ends_at": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            "last_payment_at": self.last_payment_at.isoformat() if self.last_payment_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
