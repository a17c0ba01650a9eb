# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

import pytest
from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from townsquare.api.v1.dependencies import _decode_user_id, get_current_user, raise_http
from townsquare.core.security import create_access_token
from townsquare.services.errors import ForbiddenActionError, NotFoundError


class TestDecodeUserId:
    """Test the _decode_user_id helper function."""

    def test_decode_valid_user_id(self):
        assert _decode_user_id("42") == 42

    def test_decode_invalid_user_id(self):
        with pytest.raises(HTTPException) as exc_info:
            _decode_user_id("not-a-number")
        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert "Could not validate credentials" in exc_info.value.detail


class TestGetCurrentUser:
    """Test the get_current_user dependency function."""

    def test_get_current_user_success(self, db_session, make_user):
        user = make_user()
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer",
            credentials=create_access_token(user.id),
        )
        assert get_current_user(credentials, db_session).id == user.id

    def test_get_current_user_invalid_token(self, db_session):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage")
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(credentials, db_session)
        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    def test_get_current_user_unknown_user(self, db_session):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer",
            credentials=create_access_token(9999),
        )
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(credentials, db_session)
        assert exc_info.value.detail == "User not found"


@pytest.mark.parametrize(
    ("error", "code"),
    [(ForbiddenActionError("nope"), 400), (NotFoundError("missing"), 404)],
)
def test_raise_http_maps_status(error, code):
    with pytest.raises(HTTPException) as exc_info:
        raise_http(error)
    assert exc_info.value.status_code == code
    assert exc_info.value.detail == str(error)
