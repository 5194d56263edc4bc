from datetime import datetime, timedelta, timezone

import jwt
import pytest
from graphql import GraphQLError

from jobhub.config import ALGORITHM, SECRET_KEY
from jobhub.session import SessionContext
from jobhub.utils import (
    decode_token, get_session, is_password_strong, login_user, logout_user, validate_user_email,
)


class FakeRequest:
    def __init__(self, token=None):
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}


class TestPasswordPolicy:
    def test_accepts_strong_password(self):
        assert is_password_strong("Str0ng!Passw0rd", email="owner@acme.example") is True

    @pytest.mark.parametrize("password, message", [
        ("Sh0rt!", "at least 8 characters"),
        ("lowercase1!", "uppercase"),
        ("UPPERCASE1!", "lowercase"),
        ("NoDigits!!", "digit"),
        ("NoSymbols11", "special character"),
    ])
    def test_rejects_weak_passwords(self, password, message):
        with pytest.raises(ValueError, match=message):
            is_password_strong(password)

    def test_rejects_email_prefix(self):
        with pytest.raises(ValueError, match="email address prefix"):
            is_password_strong("Owner#2024x", email="owner@acme.example")


def test_email_is_normalised():
    assert validate_user_email("Owner@Acme.Example") == "owner@acme.example"


def test_email_rejects_garbage():
    with pytest.raises(ValueError, match="Invalid email"):
        validate_user_email("owner-at-acme")


class TestTokens:
    def test_login_issues_token_with_session_claims(self, login):
        login("owner@acme.example", "business", phone="555")

        token, user = login_user("owner@acme.example", "Str0ng!Passw0rd")

        claims = decode_token(token)
        assert claims["sub"] == "owner@acme.example"
        assert claims["user_type"] == "business"
        assert claims["phone"] == "555"
        assert claims["uid"] == user.id

    def test_wrong_password(self, login):
        login("owner@acme.example", "business")

        with pytest.raises(GraphQLError, match="Invalid email or password"):
            login_user("owner@acme.example", "Wr0ng!Password")

    def test_expired_token(self):
        expired = jwt.encode(
            {"uid": 1, "sub": "a@example.com", "user_type": "worker", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            SECRET_KEY, algorithm=ALGORITHM,
        )

        with pytest.raises(GraphQLError, match="expired"):
            decode_token(expired)

    def test_logout_revokes_token(self, login):
        user, token = login("ravi@example.com", "worker")
        context = {"request": FakeRequest(token)}
        session_context = get_session(context)
        assert session_context.user == user

        assert logout_user(session_context) is True

        assert session_context.is_authenticated is False
        with pytest.raises(GraphQLError, match="revoked"):
            get_session({"request": FakeRequest(token)})

    def test_no_header_gives_anonymous_session(self):
        session_context = get_session({"request": FakeRequest()})

        assert isinstance(session_context, SessionContext)
        assert session_context.is_authenticated is False
