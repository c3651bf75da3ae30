"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from dlibrary.adapters.smtp import build_notification_dispatcher
from dlibrary.config.settings import Settings, get_settings
from dlibrary.domain.account import Role, Session
from dlibrary.domain.credentials import CredentialStore
from dlibrary.domain.exceptions import AuthenticationDenied
from dlibrary.domain.login import LoginGate
from dlibrary.domain.moderation import ModerationService
from dlibrary.domain.ports import AccountRepository, NotificationDispatcher
from dlibrary.domain.registration import RegistrationService
from dlibrary.domain.verification import VerificationIssuer


@lru_cache
def get_notification_dispatcher() -> NotificationDispatcher:
    """SMTP or console dispatcher, chosen once from settings."""
    return build_notification_dispatcher(get_settings())


@lru_cache
def get_credential_store() -> CredentialStore:
    return CredentialStore(rounds=get_settings().bcrypt_cost)


def get_repository(request: Request) -> AccountRepository:
    """
    Get the account repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def build_registration_service(
    repository: AccountRepository, settings: Settings | None = None
) -> RegistrationService:
    """Wire the registration service; shared by routes and startup seeding."""
    settings = settings or get_settings()
    issuer = VerificationIssuer(
        repository, ttl=timedelta(seconds=settings.verification_ttl_seconds)
    )
    return RegistrationService(
        repository=repository,
        notifier=get_notification_dispatcher(),
        credentials=get_credential_store(),
        issuer=issuer,
        verification_link_base=settings.verification_link_base,
    )


def get_verification_issuer(request: Request) -> VerificationIssuer:
    settings = get_settings()
    return VerificationIssuer(
        get_repository(request), ttl=timedelta(seconds=settings.verification_ttl_seconds)
    )


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, credential store and notification dispatcher.
    """
    return build_registration_service(get_repository(request))


def get_login_gate(request: Request) -> LoginGate:
    return LoginGate(repository=get_repository(request), credentials=get_credential_store())


def get_moderation_service(request: Request) -> ModerationService:
    return ModerationService(
        repository=get_repository(request), notifier=get_notification_dispatcher()
    )


# HTTP BASIC AUTH security scheme for the admin endpoints
http_basic = HTTPBasic()


def require_admin(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    gate: LoginGate = Depends(get_login_gate),
) -> Session:
    """
    Authenticate the caller through the login gate and require the admin role.

    FastAPI's HTTPBasic returns 401 for a missing or malformed header.
    Failed login checks also return 401; a non-admin account gets 403.
    """
    try:
        session = gate.authenticate(credentials.username, credentials.password)
    except AuthenticationDenied:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        ) from None

    if session.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return session
