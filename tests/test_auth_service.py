# tests/test_auth_service.py
"""Session lookup, login, sign-up, logout and identity checks."""

import pytest

from pinboard.models.auth_models import AuthErrorCode
from pinboard.models.enums import AuthEventType


@pytest.fixture
def auth(services):
    return services["auth_service"]


@pytest.fixture
def events(session):
    seen = []
    session.subscribe(lambda event: seen.append(event.type))
    return seen


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("email", ["", "   ", "no-at-sign", "a@b"])
def test_invalid_emails(auth, email):
    assert not auth.validate_email(email).is_valid


def test_valid_email(auth):
    assert auth.validate_email(" Ana@Example.com ").is_valid


def test_password_minimum_length(auth):
    assert not auth.validate_password("").is_valid
    assert auth.validate_password("12345").error_message == (
        "Password must be at least 6 characters."
    )
    assert auth.validate_password("123456").is_valid


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

def test_no_stored_session(auth, session, events):
    result = auth.get_current_session()
    assert result.success
    assert result.session is None
    assert events == [AuthEventType.INITIAL_SESSION]
    assert not session.is_authenticated


def test_stored_session_is_restored(fake, auth, session):
    fake.sign_in_as("user-9", "nine@example.com")
    result = auth.get_current_session()
    assert result.is_authenticated
    assert session.user_id == "user-9"


def test_provider_failure_is_network_error(fake, auth, session):
    fake.failures["auth.get_session"] = Exception("Name or service not known")
    result = auth.get_current_session()
    assert not result.success
    assert result.error_code == AuthErrorCode.NETWORK_ERROR
    assert not session.is_authenticated


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

def test_login_success_dispatches_signed_in(fake, auth, session, events):
    fake.auth.add_account("ana@example.com", "secret123", user_id="u-ana")

    result = auth.login("  ANA@example.com ", "secret123")

    assert result.is_authenticated
    assert session.user_id == "u-ana"
    assert events == [AuthEventType.SIGNED_IN]


def test_login_with_bound_events_dispatches_once(fake, auth, session, events):
    fake.auth.add_account("ana@example.com", "secret123", user_id="u-ana")
    auth.bind_auth_events()

    auth.login("ana@example.com", "secret123")

    assert events == [AuthEventType.SIGNED_IN]
    auth.unbind_auth_events()
    assert fake.auth.listeners == []


def test_wrong_password(fake, auth, session):
    fake.auth.add_account("ana@example.com", "secret123")
    result = auth.login("ana@example.com", "wrong-password")
    assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
    assert result.error_message == "Incorrect email or password."
    assert not session.is_authenticated


def test_login_validation_skips_network(fake, auth):
    fake.failures["auth.sign_in_with_password"] = AssertionError("must not be called")
    result = auth.login("bad", "secret123")
    assert result.error_code == AuthErrorCode.VALIDATION_ERROR


def test_login_network_failure(fake, auth):
    fake.failures["auth.sign_in_with_password"] = ConnectionError("offline")
    assert auth.login("ana@example.com", "secret123").error_code == AuthErrorCode.NETWORK_ERROR


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def test_register_requiring_confirmation(fake, auth, session, config):
    fake.auth.require_confirmation = True

    result = auth.register("new@example.com", "secret123", username="newbie")

    assert result.success
    assert result.needs_confirmation
    assert not session.is_authenticated
    options = fake.auth.sign_up_calls[0]["options"]
    assert options["email_redirect_to"] == config.AUTH_REDIRECT_URL
    assert options["data"]["username"] == "newbie"


def test_register_with_instant_session_creates_user_row(fake, auth, session):
    result = auth.register("new@example.com", "secret123", first_name=" New ", last_name="User")

    assert result.is_authenticated
    assert session.user_id == result.session.user_id
    row = fake.tables["users"][0]
    assert row["id"] == result.session.user_id
    assert row["username"] == "new"
    assert row["first_name"] == "New"


def test_register_existing_email(fake, auth):
    fake.auth.add_account("ana@example.com", "secret123")
    result = auth.register("ana@example.com", "secret123")
    assert result.error_code == AuthErrorCode.EMAIL_ALREADY_EXISTS


def test_register_short_password(auth):
    result = auth.register("new@example.com", "123")
    assert result.error_code == AuthErrorCode.VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Logout and identity
# ---------------------------------------------------------------------------

def test_logout_clears_session(fake, auth, session, signed_in, events):
    auth.logout()
    assert not session.is_authenticated
    assert fake.auth.session is None
    assert events == [AuthEventType.SIGNED_OUT]


def test_logout_clears_locally_when_server_fails(fake, auth, session, signed_in):
    fake.failures["auth.sign_out"] = Exception("offline")
    auth.logout()
    assert not session.is_authenticated


def test_remote_sign_out_reaches_session(fake, auth, session, signed_in):
    auth.bind_auth_events()
    fake.auth.sign_out()
    assert not session.is_authenticated


def test_verify_identity(fake, auth, signed_in):
    assert auth.verify_identity().is_authenticated
    fake.auth.server_user_id = "intruder"
    assert auth.verify_identity().error_code == AuthErrorCode.SESSION_MISMATCH


def test_verify_identity_signed_out(auth):
    assert auth.verify_identity().error_code == AuthErrorCode.NOT_AUTHENTICATED
