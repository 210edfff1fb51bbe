# vendoriq/api/auth.py
from fastapi import APIRouter, Depends, status

from vendoriq.api.deps import get_auth_service
from vendoriq.core.security import create_user_token, get_current_user
from vendoriq.models.user import User
from vendoriq.schemas.auth import (
    LoginRequest,
    OtpSentResponse,
    RegisterRequest,
    RegisterResponse,
    SendOtpRequest,
    TokenResponse,
    VerifyOtpRequest,
)
from vendoriq.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """Create a business account and email it a verification code"""
    user, issued = auth.register(data)
    return RegisterResponse(
        message="User registered successfully. OTP sent to your email.",
        user_id=user.id,
        otp_expires_at=issued.expires_at,
    )


@router.post("/send-otp", response_model=OtpSentResponse)
def send_otp(data: SendOtpRequest, auth: AuthService = Depends(get_auth_service)):
    issued = auth.send_code(data)
    return OtpSentResponse(message="OTP sent successfully", expires_at=issued.expires_at)


@router.post("/verify-otp", response_model=TokenResponse)
def verify_otp(data: VerifyOtpRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.verify_code(data, data.otp)
    return TokenResponse(message="Login successful", user=user.to_dict(), token=token)


@router.post("/login")
def login(data: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    user, token, issued = auth.login(data)
    if token:
        return TokenResponse(message="Login successful", user=user.to_dict(), token=token)
    return OtpSentResponse(message="OTP sent to your email", expires_at=issued.expires_at)


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    # Tokens are stateless; clients discard them
    return {"success": True, "message": "Logged out successfully"}


@router.post("/refresh")
def refresh(current_user: User = Depends(get_current_user)):
    return {
        "success": True,
        "message": "Token refreshed successfully",
        "token": create_user_token(current_user),
    }


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    data = current_user.to_dict()
    data["service_requests"] = [r.to_dict() for r in current_user.service_requests]
    data["subscriptions"] = [s.to_dict() for s in current_user.subscriptions]
    return {"success": True, "data": data}
