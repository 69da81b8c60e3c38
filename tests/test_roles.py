from unittest.mock import MagicMock

import pytest
from firebase_admin import exceptions as firebase_exceptions

from scheduling.errors import Internal, InvalidArgument, PermissionDenied
from scheduling.roles import caller_role, set_user_role, sync_role_claim

ADMIN = {"uid": "root", "role": "admin"}


def test_caller_role_defaults_to_empty():
    assert caller_role(None) == ""
    assert caller_role({"role": "teacher"}) == "teacher"


def test_set_user_role_as_admin():
    auth_client = MagicMock()
    assert set_user_role(auth_client, ADMIN, "u1", "teacher") == {"success": True}
    auth_client.set_custom_user_claims.assert_called_once_with("u1", {"role": "teacher"})


@pytest.mark.parametrize("claims", [None, {}, {"role": "teacher"}])
def test_set_user_role_requires_admin(claims):
    auth_client = MagicMock()
    with pytest.raises(PermissionDenied):
        set_user_role(auth_client, claims, "u1", "teacher")
    auth_client.set_custom_user_claims.assert_not_called()


@pytest.mark.parametrize("user_id, role", [("", "teacher"), ("u1", ""), ("u1", "superuser")])
def test_set_user_role_validates_arguments(user_id, role):
    with pytest.raises(InvalidArgument):
        set_user_role(MagicMock(), ADMIN, user_id, role)


def test_set_user_role_wraps_auth_failures(caplog):
    auth_client = MagicMock()
    auth_client.set_custom_user_claims.side_effect = firebase_exceptions.InternalError("boom")
    with pytest.raises(Internal):
        set_user_role(auth_client, ADMIN, "u1", "student")
    assert "Error setting custom claims" in caplog.text


def test_sync_role_claim_ignores_deletes_and_unchanged_roles():
    auth_client = MagicMock()
    assert sync_role_claim(auth_client, "u1", {"role": "student"}, None) is None
    assert sync_role_claim(auth_client, "u1", {"role": "student"}, {"role": "student"}) is None
    auth_client.set_custom_user_claims.assert_not_called()


def test_sync_role_claim_mirrors_new_role():
    auth_client = MagicMock()
    assert sync_role_claim(auth_client, "u1", None, {"role": "parent"}) == {"success": True}
    auth_client.set_custom_user_claims.assert_called_once_with("u1", {"role": "parent"})


def test_sync_role_claim_reports_failure():
    auth_client = MagicMock()
    auth_client.set_custom_user_claims.side_effect = ValueError("bad uid")
    result = sync_role_claim(auth_client, "u1", {"role": "student"}, {"role": "teacher"})
    assert result == {"success": False, "error": "bad uid"}
