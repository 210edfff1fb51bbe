# vendoriq/api/deps.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from vendoriq.crud.form_field import FormFieldRepository
from vendoriq.db.session import get_db
from vendoriq.services.auth_service import AuthService
from vendoriq.services.form_validation_service import FormValidationService
from vendoriq.services.otp_service import OTPManager


def get_otp_manager(request: Request) -> OTPManager:
    """The manager is created on startup and owned by the application"""
    return request.app.state.otp_manager


def get_auth_service(
    db: Session = Depends(get_db),
    otp_manager: OTPManager = Depends(get_otp_manager),
) -> AuthService:
    return AuthService(db, otp_manager)


def get_form_validator(db: Session = Depends(get_db)) -> FormValidationService:
    return FormValidationService(FormFieldRepository(db))
