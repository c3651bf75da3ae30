"""
Authentication routes.

Defines the end-user endpoints: registration, link and code verification,
verification resend, and login.
"""

from fastapi import APIRouter, Depends, Query, status

from dlibrary.api.dependencies import (
    get_login_gate,
    get_registration_service,
    get_verification_issuer,
)
from dlibrary.api.models import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResendRequest,
    SessionUser,
    VerifyCodeRequest,
)
from dlibrary.domain.exceptions import InvalidInput
from dlibrary.domain.login import LoginGate
from dlibrary.domain.registration import RegistrationService
from dlibrary.domain.verification import VerificationIssuer

router = APIRouter(tags=["auth"])

_ERRORS = {
    400: {"model": MessageResponse, "description": "Validation error"},
    404: {"model": MessageResponse, "description": "Invalid or expired verification"},
}


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageResponse, "description": "Invalid input or email taken"}},
    summary="Register a new user",
    description="Create an unverified account. A verification link and a "
    "6-digit code are sent to the provided email.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.register(
        request_data.full_name,
        request_data.email,
        request_data.password,
        school_name=request_data.school_name,
        location=request_data.location,
        gender=request_data.gender,
        contact=request_data.contact,
    )
    return MessageResponse(message="Account created. Verification email sent.")


@router.get(
    "/verify",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Verify email with link token",
)
def verify(
    token: str | None = Query(default=None),
    issuer: VerificationIssuer = Depends(get_verification_issuer),
) -> MessageResponse:
    if not token:
        raise InvalidInput("Token is required")
    issuer.consume_token(token)
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/verify-code",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Verify email with numeric code",
)
def verify_code(
    request_data: VerifyCodeRequest,
    issuer: VerificationIssuer = Depends(get_verification_issuer),
) -> MessageResponse:
    issuer.consume_code(request_data.email, request_data.code)
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/resend",
    response_model=MessageResponse,
    responses={
        400: {"model": MessageResponse, "description": "Already verified"},
        404: {"model": MessageResponse, "description": "Unknown email"},
    },
    summary="Resend verification",
    description="Replace the outstanding link token and code and send them again.",
)
def resend(
    request_data: ResendRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.resend_verification(request_data.email)
    return MessageResponse(message="Verification resent")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": MessageResponse, "description": "Invalid credentials or unverified email"},
        403: {"model": MessageResponse, "description": "Account removed, banned or suspended"},
    },
    summary="Log in",
)
def login(
    request_data: LoginRequest,
    gate: LoginGate = Depends(get_login_gate),
) -> LoginResponse:
    session = gate.authenticate(request_data.email, request_data.password)
    return LoginResponse(
        message="Login successful",
        user_id=session.id,
        user=SessionUser.from_session(session),
    )
