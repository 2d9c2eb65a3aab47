"""
Role ladder rules.

Roles move one rung at a time along User < Moderator < Admin. next_role is
evaluated before a promotion/demotion is proposed; check_role_change is
enforced by the store when the change is actually applied.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.errors import IllegalRoleTransitionError, PermissionDeniedError, RoleChangeError
from models.enums import Role
from models.user import User


class Direction(str, Enum):
    PROMOTE = "promote"
    DEMOTE = "demote"


@dataclass(frozen=True)
class RoleTransition:
    current: Role
    new_role: Role
    direction: Direction
    warning: bool = False  # set when an Admin is being demoted


def next_role(current: Role, direction: Direction, requested: Optional[Role] = None) -> RoleTransition:
    """
    Compute the single legal step from ``current`` in ``direction``.

    ``requested`` is the role the admin asked for explicitly, if any. A
    request that would skip a rung (User -> Admin) is rejected rather than
    silently clamped.

    Raises:
        IllegalRoleTransitionError: with a message_key naming the reason.
    """
    if direction == Direction.PROMOTE:
        if current == Role.ADMIN:
            raise IllegalRoleTransitionError("already highest role", message_key="error_role_already_admin")
        target = Role(current + 1)
        if requested is not None:
            if requested == current:
                raise IllegalRoleTransitionError(
                    "already has requested role", message_key="error_role_already_has", role=requested.display_name
                )
            if requested < current:
                raise IllegalRoleTransitionError("not a promotion", message_key="error_role_not_promotion")
            if requested > target:
                raise IllegalRoleTransitionError(
                    "must promote to Moderator first", message_key="error_role_moderator_first"
                )
        return RoleTransition(current=current, new_role=target, direction=direction)

    if current == Role.USER:
        raise IllegalRoleTransitionError("already lowest role", message_key="error_role_already_lowest")
    target = Role(current - 1)
    if requested is not None and requested != target:
        raise IllegalRoleTransitionError(
            "demotion must be single step", message_key="error_role_single_step", role=target.display_name
        )
    return RoleTransition(current=current, new_role=target, direction=direction, warning=current == Role.ADMIN)


def check_role_change(actor: User, target: User, new_role: int, admin_count: int) -> Role:
    """
    Store-side guard for ChangeUserRole. Returns the validated Role.

    Only the acting user's permission and the store invariants are checked
    here; ladder legality is decided by next_role at proposal time.
    """
    if actor.role != Role.ADMIN:
        raise PermissionDeniedError("insufficient permissions")
    if actor.id == target.id:
        raise RoleChangeError("cannot change your own role", message_key="error_role_own")
    if new_role not in Role._value2member_map_:
        raise RoleChangeError("invalid role value", message_key="error_role_invalid")
    role = Role(new_role)
    if target.role == Role.ADMIN and role != Role.ADMIN and admin_count <= 1:
        raise RoleChangeError("cannot demote last admin", message_key="error_role_last_admin")
    return role
