# Rev 0.3.0

"""Local identity provider (Rev 0.3.0)
Sign-up/sign-in/sign-out, profile and password maintenance, and the
verification/reset mail side effects. Holds the current session and tells
listeners when it changes. ProjectService never reads this state; callers hand
it the Identity from `current`.
"""
from __future__ import annotations
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol

from burnz.models.entities import Identity
from burnz.utils.logging_setup import get_logger
from .errors import AuthError, AuthRequiredError, EmailInUseError, InvalidCredentialsError, InvalidTokenError

PBKDF2_ITERATIONS = 260_000
VERIFY_TOKEN_TTL = timedelta(hours=24)
RESET_TOKEN_TTL = timedelta(hours=1)

SessionListener = Callable[[Optional[Identity]], None]


class UserRepository(Protocol):
    def create_user(self, *, email: str, password_hash: str, display_name: Optional[str] = None) -> str: ...
    def get_by_uid(self, uid: str) -> Optional[Dict[str, Any]]: ...
    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]: ...
    def set_display_name(self, uid: str, display_name: str) -> bool: ...
    def set_password_hash(self, uid: str, password_hash: str) -> bool: ...
    def set_email_verified(self, uid: str, verified: bool = True) -> bool: ...
    def add_token(self, *, token_hash: str, uid: str, purpose: str, expires_at: str) -> None: ...
    def get_token(self, token_hash: str, purpose: str) -> Optional[Dict[str, Any]]: ...
    def consume_token(self, token_hash: str, used_at: str) -> bool: ...


class Mailer(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class LogMailer:
    """Writes outgoing mail to the log instead of a mail server."""

    def __init__(self):
        self._log = get_logger("LogMailer")
        self.sent: List[Dict[str, str]] = []

    def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append({"to": to, "subject": subject, "body": body})
        self._log.info("Mail to %s: %s", to, subject)


def hash_password(password: str, *, salt: Optional[str] = None, iterations: Optional[int] = None) -> str:
    iterations = iterations or PBKDF2_ITERATIONS
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), iterations)
    return f"pbkdf2_sha256${iterations}${salt}${digest.hex()}"


def _token_hash(code: str) -> str:
    # Only this digest is persisted
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def verify_password(password: str, encoded: str) -> bool:
    try:
        algo, iterations, salt, _ = encoded.split("$", 3)
    except ValueError:
        return False
    if algo != "pbkdf2_sha256":
        return False
    candidate = hash_password(password, salt=salt, iterations=int(iterations))
    return hmac.compare_digest(candidate, encoded)


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        mailer: Optional[Mailer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._users = users
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._mailer = mailer or LogMailer()
        self._log = get_logger("AuthService")
        self._current: Optional[Identity] = None
        self._listeners: List[SessionListener] = []

    # ---- session
    @property
    def current(self) -> Optional[Identity]:
        return self._current

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register for session changes; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def sign_up(self, email: str, password: str, display_name: str) -> Identity:
        if self._users.get_by_email(email) is not None:
            raise EmailInUseError()
        uid = self._users.create_user(email=email, password_hash=hash_password(password), display_name=display_name)
        self._log.info("User %s signed up", uid)
        self._set_current(self._identity(uid))
        self.send_verification_email()
        return self._current

    def sign_in(self, email: str, password: str) -> Identity:
        rec = self._users.get_by_email(email)
        if rec is None or not verify_password(password, rec["password_hash"]):
            self._log.warning("Failed sign-in for %s", email)
            raise InvalidCredentialsError()
        self._set_current(self._identity(rec["uid"]))
        self._log.info("User %s signed in", rec["uid"])
        return self._current

    def sign_out(self) -> None:
        if self._current is not None:
            self._log.info("User %s signed out", self._current.uid)
        self._set_current(None)

    # ---- profile
    def update_display_name(self, display_name: str) -> Identity:
        uid = self._require_uid()
        self._users.set_display_name(uid, display_name)
        self._set_current(self._identity(uid))
        return self._current

    def update_password(self, current_password: str, new_password: str) -> None:
        """Re-proves the current password before replacing it."""
        uid = self._require_uid()
        rec = self._users.get_by_uid(uid)
        if rec is None or not verify_password(current_password, rec["password_hash"]):
            raise InvalidCredentialsError("Failed to update password. Please check your current password.")
        self._users.set_password_hash(uid, hash_password(new_password))
        self._log.info("Password changed for %s", uid)

    # ---- mail
    def send_verification_email(self) -> None:
        uid = self._require_uid()
        code = self._issue_token(uid, "verify_email", VERIFY_TOKEN_TTL)
        self._mailer.send(
            self._current.email or "",
            "Verify your email",
            f"Confirm your address with code {code} within 24 hours.",
        )

    def verify_email(self, code: str) -> Identity:
        """Marks the code's account verified. The code works once."""
        uid = self._redeem_token(code, "verify_email")
        self._users.set_email_verified(uid, True)
        self._log.info("Email verified for %s", uid)
        identity = self._identity(uid)
        if self._current is not None and self._current.uid == uid:
            self._set_current(identity)
        return identity

    def reset_password(self, email: str) -> None:
        """Unknown addresses are ignored silently."""
        rec = self._users.get_by_email(email)
        if rec is None:
            self._log.info("Password reset requested for unknown email")
            return
        code = self._issue_token(rec["uid"], "reset_password", RESET_TOKEN_TTL)
        self._mailer.send(rec["email"], "Reset your password", f"Use code {code} to choose a new password.")

    def confirm_password_reset(self, code: str, new_password: str) -> None:
        uid = self._redeem_token(code, "reset_password")
        self._users.set_password_hash(uid, hash_password(new_password))
        self._log.info("Password reset for %s", uid)

    # ---- internals
    def _issue_token(self, uid: str, purpose: str, ttl: timedelta) -> str:
        code = secrets.token_urlsafe(24)
        expires_at = (self._clock() + ttl).isoformat(timespec="seconds")
        self._users.add_token(token_hash=_token_hash(code), uid=uid, purpose=purpose, expires_at=expires_at)
        return code

    def _redeem_token(self, code: str, purpose: str) -> str:
        token_hash = _token_hash(code or "")
        rec = self._users.get_token(token_hash, purpose)
        now = self._clock()
        if rec is None or rec["used_at"] is not None or datetime.fromisoformat(rec["expires_at"]) <= now:
            self._log.warning("Rejected %s code", purpose)
            raise InvalidTokenError()
        if not self._users.consume_token(token_hash, now.isoformat(timespec="seconds")):
            raise InvalidTokenError()
        return rec["uid"]

    def _require_uid(self) -> str:
        if self._current is None:
            raise AuthRequiredError("No authenticated user")
        return self._current.uid

    def _identity(self, uid: str) -> Identity:
        rec = self._users.get_by_uid(uid)
        if rec is None:
            raise AuthError("Unknown account.")
        return Identity(
            uid=rec["uid"],
            email=rec.get("email"),
            display_name=rec.get("display_name"),
            email_verified=bool(rec.get("email_verified")),
        )

    def _set_current(self, identity: Optional[Identity]) -> None:
        self._current = identity
        for listener in list(self._listeners):
            listener(identity)
