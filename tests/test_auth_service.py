# tests/test_auth_service.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from burnz.repositories.sqlite_user_repository import SQLiteUserRepository
from burnz.services.auth_service import AuthService, LogMailer, hash_password, verify_password
from burnz.services.errors import AuthRequiredError, EmailInUseError, InvalidCredentialsError, InvalidTokenError


@pytest.fixture()
def mailer() -> LogMailer:
    return LogMailer()


@pytest.fixture()
def auth(db_conn, mailer) -> AuthService:
    return AuthService(SQLiteUserRepository(db_conn), mailer)


def test_password_hash_roundtrip():
    encoded = hash_password("s3cret")
    assert encoded.startswith("pbkdf2_sha256$")
    assert verify_password("s3cret", encoded)
    assert not verify_password("wrong", encoded)
    assert not verify_password("s3cret", "garbage")


def test_sign_up_signs_in_and_sends_verification(auth, mailer):
    seen = []
    auth.add_listener(seen.append)
    me = auth.sign_up("ann@example.com", "pw-123456", "Ann")
    assert auth.current == me
    assert me.display_name == "Ann"
    assert me.email_verified is False
    assert seen == [me]
    assert mailer.sent[-1]["to"] == "ann@example.com"
    assert mailer.sent[-1]["subject"] == "Verify your email"


def test_sign_up_duplicate_email(auth):
    auth.sign_up("ann@example.com", "pw", "Ann")
    with pytest.raises(EmailInUseError):
        auth.sign_up("ANN@example.com", "pw", "Other")


def test_sign_in_and_out(auth):
    auth.sign_up("ann@example.com", "pw", "Ann")
    auth.sign_out()
    assert auth.current is None
    with pytest.raises(InvalidCredentialsError):
        auth.sign_in("ann@example.com", "nope")
    with pytest.raises(InvalidCredentialsError):
        auth.sign_in("nobody@example.com", "pw")
    assert auth.sign_in("ann@example.com", "pw").email == "ann@example.com"


def test_update_display_name(auth):
    auth.sign_up("ann@example.com", "pw", "Ann")
    assert auth.update_display_name("Annie").display_name == "Annie"
    auth.sign_out()
    with pytest.raises(AuthRequiredError):
        auth.update_display_name("x")


def test_update_password_requires_current_password(auth):
    auth.sign_up("ann@example.com", "old", "Ann")
    with pytest.raises(InvalidCredentialsError):
        auth.update_password("wrong", "new")
    auth.update_password("old", "new")
    auth.sign_out()
    with pytest.raises(InvalidCredentialsError):
        auth.sign_in("ann@example.com", "old")
    auth.sign_in("ann@example.com", "new")


def _code(mail) -> str:
    return mail["body"].split("code ")[1].split()[0]


class _Clock:
    def __init__(self):
        self.now = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def test_verify_email_with_mailed_code_refreshes_session(auth, mailer):
    auth.sign_up("ann@example.com", "pw", "Ann")
    verified = auth.verify_email(_code(mailer.sent[-1]))
    assert verified.email_verified is True
    assert auth.current.email_verified is True


@pytest.mark.parametrize("code", ["", "not-a-code"])
def test_verify_email_rejects_unknown_code(auth, code):
    auth.sign_up("ann@example.com", "pw", "Ann")
    with pytest.raises(InvalidTokenError):
        auth.verify_email(code)
    assert auth.current.email_verified is False


def test_verify_email_rejects_account_uid_as_code(auth):
    me = auth.sign_up("ann@example.com", "pw", "Ann")
    auth.sign_out()
    auth.sign_up("eve@example.com", "pw", "Eve")
    with pytest.raises(InvalidTokenError):
        auth.verify_email(me.uid)


def test_verify_code_works_once(auth, mailer):
    auth.sign_up("ann@example.com", "pw", "Ann")
    code = _code(mailer.sent[-1])
    auth.verify_email(code)
    with pytest.raises(InvalidTokenError):
        auth.verify_email(code)


def test_verify_code_expires(db_conn, mailer):
    clock = _Clock()
    auth = AuthService(SQLiteUserRepository(db_conn), mailer, clock=clock)
    auth.sign_up("ann@example.com", "pw", "Ann")
    clock.now += timedelta(hours=25)
    with pytest.raises(InvalidTokenError):
        auth.verify_email(_code(mailer.sent[-1]))


def test_reset_password_ignores_unknown_email(auth, mailer):
    auth.reset_password("ghost@example.com")
    assert mailer.sent == []
    auth.sign_up("ann@example.com", "pw", "Ann")
    auth.reset_password("ann@example.com")
    assert mailer.sent[-1]["subject"] == "Reset your password"


def test_confirm_password_reset_replaces_password_once(auth, mailer):
    auth.sign_up("ann@example.com", "old", "Ann")
    auth.sign_out()
    auth.reset_password("ann@example.com")
    code = _code(mailer.sent[-1])
    auth.confirm_password_reset(code, "new")
    with pytest.raises(InvalidCredentialsError):
        auth.sign_in("ann@example.com", "old")
    auth.sign_in("ann@example.com", "new")
    with pytest.raises(InvalidTokenError):
        auth.confirm_password_reset(code, "again")


def test_reset_code_is_not_a_verify_code(auth, mailer):
    auth.sign_up("ann@example.com", "pw", "Ann")
    auth.reset_password("ann@example.com")
    with pytest.raises(InvalidTokenError):
        auth.verify_email(_code(mailer.sent[-1]))


def test_reset_code_expires_after_an_hour(db_conn, mailer):
    clock = _Clock()
    auth = AuthService(SQLiteUserRepository(db_conn), mailer, clock=clock)
    auth.sign_up("ann@example.com", "old", "Ann")
    auth.reset_password("ann@example.com")
    clock.now += timedelta(minutes=61)
    with pytest.raises(InvalidTokenError):
        auth.confirm_password_reset(_code(mailer.sent[-1]), "new")
    auth.sign_out()
    auth.sign_in("ann@example.com", "old")


def test_only_code_digest_is_stored(auth, mailer, db_conn):
    auth.sign_up("ann@example.com", "pw", "Ann")
    code = _code(mailer.sent[-1])
    stored = [r[0] for r in db_conn.execute("SELECT token_hash FROM auth_tokens")]
    assert stored and code not in stored


def test_unsubscribe_listener(auth):
    seen = []
    unsubscribe = auth.add_listener(seen.append)
    unsubscribe()
    auth.sign_up("ann@example.com", "pw", "Ann")
    assert seen == []
