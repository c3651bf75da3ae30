"""
Admin routes - account listing and moderation transitions.

All endpoints require HTTP BASIC AUTH credentials of a verified admin.
The authenticated admin's name is recorded as the actor.
"""

import uuid

from fastapi import APIRouter, Depends, Query

from dlibrary.api.dependencies import get_moderation_service, require_admin
from dlibrary.api.models import (
    AccountListResponse,
    AccountResponse,
    AccountSummary,
    DeleteResponse,
    MessageResponse,
    ModerationRequest,
    RoleRequest,
    SuspendRequest,
)
from dlibrary.domain.account import Session
from dlibrary.domain.moderation import ModerationService

router = APIRouter(tags=["admin"])

_ERRORS = {
    400: {"model": MessageResponse, "description": "Validation error"},
    401: {"model": MessageResponse, "description": "Missing or invalid credentials"},
    403: {"model": MessageResponse, "description": "Admin access required"},
    404: {"model": MessageResponse, "description": "User not found"},
}


@router.get("/users", response_model=AccountListResponse, responses=_ERRORS, summary="List users")
def list_users(
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
    admin: Session = Depends(require_admin),
    service: ModerationService = Depends(get_moderation_service),
) -> AccountListResponse:
    users = [AccountSummary.from_account(a) for a in service.list_accounts(include_deleted)]
    return AccountListResponse(count=len(users), users=users)


@router.put(
    "/users/{account_id}/ban", response_model=AccountResponse, responses=_ERRORS, summary="Ban user"
)
def ban_user(
    account_id: uuid.UUID,
    request_data: ModerationRequest | None = None,
    admin: Session = Depends(require_admin),
    service: ModerationService = Depends(get_moderation_service),
) -> AccountResponse:
    reason = request_data.reason if request_data else None
    account = service.ban(account_id, reason=reason, actor=admin.name)
    return AccountResponse(message="User banned", user=AccountSummary.from_account(account))


@router.put(
    "/users/{account_id}/suspend",
    response_model=AccountResponse,
    responses=_ERRORS,
    summary="Suspend user",
)
def suspend_user(
    account_id: uuid.UUID,
    request_data: SuspendRequest,
    admin: Session = Depends(require_admin),
    service: ModerationService = Depends(get_moderation_service),
) -> AccountResponse:
    account = service.suspend(
        account_id, request_data.until, reason=request_data.reason, actor=admin.name
    )
    return AccountResponse(message="User suspended", user=AccountSummary.from_account(account))


@router.put(
    "/users/{account_id}/unsuspend",
    response_model=AccountResponse,
    responses=_ERRORS,
    summary="Lift suspension or ban",
)
def unsuspend_user(
    account_id: uuid.UUID,
    request_data: ModerationRequest | None = None,
    admin: Session = Depends(require_admin),
    service: ModerationService = Depends(get_moderation_service),
) -> AccountResponse:
    reason = request_data.reason if request_data else None
    account = service.unsuspend(account_id, reason=reason, actor=admin.name)
    return AccountResponse(message="User unsuspended", user=AccountSummary.from_account(account))


@router.put(
    "/users/{account_id}/role",
    response_model=AccountResponse,
    responses=_ERRORS,
    summary="Change user role",
)
def change_user_role(
    account_id: uuid.UUID,
    request_data: RoleRequest,
    admin: Session = Depends(require_admin),
    service: ModerationService = Depends(get_moderation_service),
) -> AccountResponse:
    account = service.change_role(account_id, request_data.role, actor=admin.name)
    return AccountResponse(message="User role updated", user=AccountSummary.from_account(account))


@router.delete(
    "/users/{account_id}",
    response_model=DeleteResponse,
    responses=_ERRORS,
    summary="Soft-delete user",
)
def delete_user(
    account_id: uuid.UUID,
    request_data: ModerationRequest | None = None,
    admin: Session = Depends(require_admin),
    service: ModerationService = Depends(get_moderation_service),
) -> DeleteResponse:
    reason = request_data.reason if request_data else None
    account = service.soft_delete(account_id, reason=reason, actor=admin.name)
    return DeleteResponse(message="User soft-deleted", id=account.id)


@router.put(
    "/users/{account_id}/restore",
    response_model=AccountResponse,
    responses=_ERRORS,
    summary="Restore soft-deleted user",
)
def restore_user(
    account_id: uuid.UUID,
    request_data: ModerationRequest | None = None,
    admin: Session = Depends(require_admin),
    service: ModerationService = Depends(get_moderation_service),
) -> AccountResponse:
    reason = request_data.reason if request_data else None
    account = service.restore(account_id, reason=reason, actor=admin.name)
    return AccountResponse(message="User restored", user=AccountSummary.from_account(account))
