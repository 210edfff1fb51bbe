# vendoriq/services/auth_service.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from vendoriq.core.config import settings
from vendoriq.core.security import create_user_token, get_password_hash, verify_password
from vendoriq.models.user import User
from vendoriq.schemas.auth import ContactIdentifier, LoginRequest, RegisterRequest
from vendoriq.services.notifier import Notifier, email_notifier, sms_notifier
from vendoriq.services.otp_service import IssuedPasscode, OTPManager, VerifyReason

logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    VerifyReason.NO_ACTIVE_CODE: "OTP expired or invalid",
    VerifyReason.MISMATCH: "Invalid OTP",
    VerifyReason.EXPIRED: "OTP expired",
}


def notifier_for(contact: ContactIdentifier) -> Notifier:
    return email_notifier if contact.channel == "email" else sms_notifier


def find_user(db: Session, contact: ContactIdentifier) -> Optional[User]:
    if contact.email:
        return db.query(User).filter(User.email == str(contact.email)).first()
    return db.query(User).filter(User.phone == contact.phone).first()


class AuthService:
    """Registration, passcode login and token issuance on top of OTPManager."""

    def __init__(self, db: Session, otp_manager: OTPManager):
        self.db = db
        self.otp = otp_manager

    def register(self, data: RegisterRequest) -> tuple[User, IssuedPasscode]:
        existing = self.db.query(User).filter(
            or_(User.phone == data.phone, User.email == str(data.email))
        ).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists with this phone or email",
            )

        user = User(
            business_name=data.business_name,
            contact_person=data.contact_person,
            phone=data.phone,
            email=str(data.email),
            location=data.location,
            industries=data.industries,
            hashed_password=get_password_hash(data.password) if data.password else None,
            trial_ends_at=datetime.utcnow() + timedelta(days=settings.TRIAL_PERIOD_DAYS),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ Registered business {user.business_name} ({user.id})")

        issued = self.otp.issue(user.email, notifier=email_notifier, subject_hint=user.id)
        return user, issued

    def send_code(self, contact: ContactIdentifier) -> IssuedPasscode:
        return self.otp.issue(contact.identifier, notifier=notifier_for(contact))

    def verify_code(self, contact: ContactIdentifier, code: str) -> tuple[User, str]:
        result = self.otp.verify(contact.identifier, code)
        if not result.ok:
            logger.info(f"OTP verification failed for {contact.identifier}: {result.reason.value}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": FAILURE_MESSAGES[result.reason], "reason": result.reason.value},
            )

        user = find_user(self.db, contact)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found. Please register first.",
            )

        now = datetime.utcnow()
        if contact.channel == "email":
            user.email_verified_at = now
        else:
            user.phone_verified_at = now
        user.is_verified = True
        self.db.commit()
        self.db.refresh(user)

        return user, create_user_token(user)

    def login(self, data: LoginRequest) -> tuple[User, Optional[str], Optional[IssuedPasscode]]:
        """Password login returns a token; passcode login sends a code to the user's email."""
        user = find_user(self.db, data)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found. Please register first.",
            )

        if data.password:
            if not user.hashed_password:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Password not set. Please use OTP login.",
                )
            if not verify_password(data.password, user.hashed_password):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid password")
            return user, create_user_token(user), None

        issued = self.otp.issue(user.email, notifier=email_notifier, subject_hint=user.id)
        return user, None, issued
