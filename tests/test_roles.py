import pytest

from core.errors import IllegalRoleTransitionError, PermissionDeniedError, RoleChangeError
from models.enums import Role
from models.user import User
from rules.roles import Direction, check_role_change, next_role


def test_promote_moves_one_rung():
    assert next_role(Role.USER, Direction.PROMOTE).new_role == Role.MODERATOR
    assert next_role(Role.MODERATOR, Direction.PROMOTE).new_role == Role.ADMIN


def test_promote_user_straight_to_admin_is_rejected():
    with pytest.raises(IllegalRoleTransitionError) as exc:
        next_role(Role.USER, Direction.PROMOTE, requested=Role.ADMIN)
    assert exc.value.message_key == "error_role_moderator_first"


def test_promote_admin_is_rejected():
    with pytest.raises(IllegalRoleTransitionError) as exc:
        next_role(Role.ADMIN, Direction.PROMOTE)
    assert exc.value.message_key == "error_role_already_admin"


def test_promote_to_current_role_is_rejected():
    with pytest.raises(IllegalRoleTransitionError) as exc:
        next_role(Role.MODERATOR, Direction.PROMOTE, requested=Role.MODERATOR)
    assert exc.value.message_key == "error_role_already_has"
    assert exc.value.params == {"role": "Moderator"}


def test_demote_admin_carries_a_warning():
    transition = next_role(Role.ADMIN, Direction.DEMOTE)
    assert transition.new_role == Role.MODERATOR
    assert transition.warning is True
    assert next_role(Role.MODERATOR, Direction.DEMOTE).warning is False


def test_demote_user_is_rejected():
    with pytest.raises(IllegalRoleTransitionError) as exc:
        next_role(Role.USER, Direction.DEMOTE)
    assert exc.value.message_key == "error_role_already_lowest"


def test_demote_cannot_skip_a_rung():
    with pytest.raises(IllegalRoleTransitionError) as exc:
        next_role(Role.ADMIN, Direction.DEMOTE, requested=Role.USER)
    assert exc.value.message_key == "error_role_single_step"


def test_check_role_change_guards():
    admin = User(id=1, role=Role.ADMIN)
    moderator = User(id=2, role=Role.MODERATOR)
    other_admin = User(id=3, role=Role.ADMIN)

    assert check_role_change(admin, moderator, 3, admin_count=1) == Role.ADMIN

    with pytest.raises(PermissionDeniedError):
        check_role_change(moderator, admin, 1, admin_count=1)
    with pytest.raises(RoleChangeError) as exc:
        check_role_change(admin, admin, 2, admin_count=2)
    assert exc.value.message_key == "error_role_own"
    with pytest.raises(RoleChangeError) as exc:
        check_role_change(admin, moderator, 7, admin_count=1)
    assert exc.value.message_key == "error_role_invalid"
    with pytest.raises(RoleChangeError) as exc:
        check_role_change(admin, other_admin, 2, admin_count=1)
    assert exc.value.message_key == "error_role_last_admin"
    assert check_role_change(admin, other_admin, 2, admin_count=2) == Role.MODERATOR
