# Rev 0.3.0
"""Failures surfaced to the presentation layer. str(exc) is the user-facing message."""
from __future__ import annotations


class ProjectError(Exception):
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class AuthRequiredError(ProjectError):
    default_message = "You must be signed in to do that."


class AuthorizationError(ProjectError):
    default_message = "You are not allowed to modify this project."


class NotFoundError(ProjectError):
    default_message = "Project not found."


class FetchError(ProjectError):
    default_message = "Failed to fetch projects. Please try again later."


class PersistError(ProjectError):
    default_message = "Failed to save changes."


class InvalidProjectFieldsError(ProjectError, ValueError):
    default_message = "Some project fields are not valid."


# ---------- identity provider ----------

class AuthError(Exception):
    default_message = "Authentication failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthError):
    default_message = "Invalid email or password."


class EmailInUseError(AuthError):
    default_message = "An account with this email already exists."


class PasswordMismatchError(AuthError):
    default_message = "New passwords do not match"


class InvalidTokenError(AuthError):
    default_message = "Invalid or expired code."
