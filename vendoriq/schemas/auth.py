# vendoriq/schemas/auth.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

PHONE_PATTERN = r"^\+91[0-9]{10}$"


class RegisterRequest(BaseModel):
    business_name: str = Field(..., min_length=2, max_length=255)
    contact_person: str = Field(..., min_length=2, max_length=255)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: EmailStr
    location: str = Field(..., min_length=2, max_length=255)
    industries: List[str] = Field(..., min_length=1)
    password: Optional[str] = Field(None, min_length=6)


class ContactIdentifier(BaseModel):
    """Either an email address or a phone number identifies the caller"""
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)

    @model_validator(mode="after")
    def require_email_or_phone(self):
        if not self.email and not self.phone:
            raise ValueError("Either email or phone is required")
        return self

    @property
    def identifier(self) -> str:
        return str(self.email) if self.email else self.phone

    @property
    def channel(self) -> str:
        return "email" if self.email else "sms"


class SendOtpRequest(ContactIdentifier):
    pass


class VerifyOtpRequest(ContactIdentifier):
    otp: str = Field(..., pattern=r"^[0-9]{6}$")


class LoginRequest(ContactIdentifier):
    password: Optional[str] = Field(None, min_length=6)


class OtpSentResponse(BaseModel):
    success: bool = True
    message: str
    expires_at: datetime


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user_id: str
    otp_expires_at: datetime


class TokenResponse(BaseModel):
    success: bool = True
    message: str
    user: dict
    token: str
