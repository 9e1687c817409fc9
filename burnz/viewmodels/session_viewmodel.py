# Rev 0.2.0
# burnz/viewmodels/session_viewmodel.py
from __future__ import annotations
from typing import Any, Dict

from PySide6.QtCore import QObject, Signal

from burnz.services.errors import AuthError, AuthRequiredError, PasswordMismatchError


class SessionViewModel(QObject):
    """
    Sign-in / sign-up screen and the verification banner.
    Emits:
      sessionChanged(dict)   # Identity.to_dict(), {} when signed out
      errorRaised(str)
      info(str)
    """
    sessionChanged = Signal(dict)
    errorRaised = Signal(str)
    info = Signal(str)

    def __init__(self, auth_service):
        super().__init__()
        self._auth = auth_service
        self._unsubscribe = auth_service.add_listener(self._on_session)

    def session(self) -> Dict[str, Any]:
        current = self._auth.current
        return current.to_dict() if current else {}

    def needs_verification(self) -> bool:
        current = self._auth.current
        return current is not None and not current.email_verified

    def sign_in(self, email: str, password: str) -> bool:
        try:
            self._auth.sign_in(email, password)
        except AuthError as exc:
            self.errorRaised.emit(str(exc))
            return False
        return True

    def sign_up(self, email: str, password: str, display_name: str) -> bool:
        try:
            self._auth.sign_up(email, password, display_name)
        except AuthError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.info.emit("Account created. Check your inbox to verify your email.")
        return True

    def sign_out(self) -> None:
        self._auth.sign_out()

    def reset_password(self, email: str) -> None:
        self._auth.reset_password(email)
        self.info.emit("Password reset email sent. Check your inbox.")

    def confirm_password_reset(self, code: str, new_password: str, confirm_password: str) -> bool:
        if new_password != confirm_password:
            self.errorRaised.emit(str(PasswordMismatchError()))
            return False
        try:
            self._auth.confirm_password_reset(code.strip(), new_password)
        except AuthError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.info.emit("Password updated. You can sign in now.")
        return True

    def verify_email(self, code: str) -> bool:
        try:
            self._auth.verify_email(code.strip())
        except AuthError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.info.emit("Email verified!")
        return True

    def resend_verification(self) -> bool:
        try:
            self._auth.send_verification_email()
        except AuthRequiredError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.info.emit("Verification email sent!")
        return True

    def dispose(self) -> None:
        self._unsubscribe()

    def _on_session(self, identity) -> None:
        self.sessionChanged.emit(identity.to_dict() if identity else {})
