"""Authorization policy.

Every mutating endpoint asks :func:`authorize` (directly or through
:func:`enforce`) whether a caller with a given role may perform an action,
optionally against a target account role or a resource the caller owns.
The role rules live here and nowhere else.
"""
from typing import Optional

from fastapi import HTTPException, status

from app.models.user import ADMIN_ROLES, ASSIGNABLE_ROLES

ADMIN_ONLY_ACTIONS = {"admin:access", "order:approve", "user:list"}
USER_ADMIN_ACTIONS = {"user:create", "user:update", "user:delete"}
OWNER_ACTIONS = {"crop:update", "crop:delete"}


def is_admin_role(role: Optional[str]) -> bool:
    return role in ADMIN_ROLES


def authorize(caller_role: Optional[str], action: str, target_role: Optional[str] = None, *, is_owner: bool = False) -> bool:
    if action in ADMIN_ONLY_ACTIONS:
        return is_admin_role(caller_role)

    if action in USER_ADMIN_ACTIONS:
        if not is_admin_role(caller_role):
            return False
        # Nobody touches the bootstrap account through the admin surface
        if target_role == "super_admin":
            return False
        if target_role == "admin":
            return caller_role == "super_admin"
        return True

    if action == "crop:create":
        return caller_role == "farmer"

    if action in OWNER_ACTIONS:
        return is_owner or is_admin_role(caller_role)

    if action == "message:send":
        # Never between two non-admin accounts
        return is_admin_role(caller_role) or is_admin_role(target_role)

    if action == "message:read":
        return is_owner

    return False


def enforce(caller_role: Optional[str], action: str, target_role: Optional[str] = None, *, is_owner: bool = False, detail: str = "Forbidden"):
    if not authorize(caller_role, action, target_role, is_owner=is_owner):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def ensure_assignable_role(role: str):
    if role not in ASSIGNABLE_ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid user type. Must be one of: {', '.join(ASSIGNABLE_ROLES)}"
        )
