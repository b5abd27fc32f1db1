"""Error hierarchy for the TixIt API.

Every error carries a stable ``code``, a user-safe ``message`` and the HTTP
status it maps to. Handlers in ``tixit.api.error_handlers`` turn them into
``{"message": ...}`` bodies; nothing internal is ever put in ``message``.
"""

from typing import Any


class TixitError(Exception):
    code = "TIXIT_ERROR"
    http_status = 500

    def __init__(self, message: str, *, http_status: int | None = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message}


# ---- client input (400) ----

class ClientInputError(TixitError):
    code = "CLIENT_INPUT"
    http_status = 400


class ValidationFailed(ClientInputError):
    """Schema violation; ``details`` lists ``{"field", "message"}`` pairs."""

    code = "VALIDATION_FAILED"

    def __init__(self, details: list[dict[str, str]], message: str = "Invalid input"):
        super().__init__(message)
        self.details = details

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.details}


class InjectionDetected(ClientInputError):
    code = "INJECTION_DETECTED"

    def __init__(self, field: str):
        super().__init__("Invalid characters in field: " + field)
        self.field = field

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message, "field": self.field}


class DuplicateAccount(ClientInputError):
    code = "DUPLICATE_ACCOUNT"

    def __init__(self):
        super().__init__("User already exists")


# ---- auth (401, or 400 where the route contract says so) ----

class AuthenticationError(TixitError):
    code = "AUTHENTICATION_FAILED"
    http_status = 401


class InvalidCredentials(AuthenticationError):
    """Wrong email, wrong password, or an account without a password.

    All three share one message so the response never reveals which.
    """

    def __init__(self):
        super().__init__("Invalid credentials", http_status=400)


# ---- missing resources (404) ----

class NotFoundError(TixitError):
    code = "NOT_FOUND"
    http_status = 404


# ---- dependencies: store, identity provider (500) ----

class DependencyError(TixitError):
    """A collaborator failed. ``detail`` is logged, never returned."""

    code = "DEPENDENCY_ERROR"
    http_status = 500

    def __init__(self, detail: str):
        super().__init__("Server error")
        self.detail = detail


class RateLimited(TixitError):
    code = "RATE_LIMITED"
    http_status = 429

    def __init__(self, retry_after: int):
        super().__init__("Too many requests, please try again later.")
        self.retry_after = retry_after
