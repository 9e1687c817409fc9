# Rev 0.1.0
# burnz/viewmodels/profile_viewmodel.py
from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from burnz.services.errors import AuthError, AuthRequiredError, PasswordMismatchError


class ProfileViewModel(QObject):
    succeeded = Signal(str)
    errorRaised = Signal(str)
    busyChanged = Signal(bool)

    def __init__(self, auth_service):
        super().__init__()
        self._auth = auth_service

    def update_display_name(self, name: str) -> bool:
        self.busyChanged.emit(True)
        try:
            self._auth.update_display_name(name)
        except (AuthError, AuthRequiredError):
            self.errorRaised.emit("Failed to update profile")
            return False
        finally:
            self.busyChanged.emit(False)
        self.succeeded.emit("Profile updated successfully!")
        return True

    def update_password(self, current_password: str, new_password: str, confirm_password: str) -> bool:
        if new_password != confirm_password:
            self.errorRaised.emit(str(PasswordMismatchError()))
            return False
        self.busyChanged.emit(True)
        try:
            self._auth.update_password(current_password, new_password)
        except (AuthError, AuthRequiredError):
            self.errorRaised.emit("Failed to update password. Please check your current password.")
            return False
        finally:
            self.busyChanged.emit(False)
        self.succeeded.emit("Password updated successfully!")
        return True
