"""Application error taxonomy.

Every error a service can raise derives from ``AppError``; the Flask error
handler in ``tagjournal.create_app`` turns them into the JSON envelope
``{"ok": false, "error": <code>}`` with the status declared on the class.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional


class AppError(Exception):
    status_code = 500
    code = "unexpected_error"
    message = "could not process request"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.code, "message": self.message}


class InvalidInput(AppError):
    """Malformed or semantically invalid input, rejected before touching the store."""

    status_code = 400
    code = "validation_error"
    message = "invalid input"

    def __init__(self, message: Optional[str] = None, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.details = details or []

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.details:
            body["details"] = self.details
        return body


class NotFound(AppError):
    """Entity absent or owned by someone else; both cases look the same."""

    status_code = 404
    code = "not_found"
    message = "requested resource not found"


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    message = "unauthorized"


class MalformedToken(Unauthorized):
    message = "malformed session token"


class InvalidTokenSignature(Unauthorized):
    message = "invalid session token signature"


class ExpiredToken(Unauthorized):
    message = "session token expired"


class InvalidCredentials(Unauthorized):
    message = "invalid credentials"


class CallerMismatch(Unauthorized):
    """Session subject does not match the user id named in the request path."""

    message = "caller does not match requested user"


class Conflict(AppError):
    status_code = 409
    code = "conflict"
    message = "resource already exists"


class TagsStillUsed(Conflict):
    code = "tags_still_used"

    def __init__(self, tags: Iterable[str]):
        self.tags = sorted(set(tags))
        super().__init__(f"some of the removed tags {self.tags} are still used in journal entries")

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["tags"] = self.tags
        return body


class EventTypeInUse(Conflict):
    code = "event_type_in_use"
    message = "event type is still referenced by journal entries"


class EventTypeValidation(AppError):
    """Referenced event type is missing, not owned, or does not permit the tags."""

    status_code = 422
    code = "event_type_validation"
    message = "event type does not exist or does not allow the given tags"


class InfrastructureError(AppError):
    """Store, credential or signing failures; opaque to the caller."""


class CredentialCorruptError(InfrastructureError):
    message = "stored credential could not be read"


class SigningKeyError(InfrastructureError):
    message = "session signing key unavailable"


__all__ = [
    "AppError",
    "InvalidInput",
    "NotFound",
    "Unauthorized",
    "MalformedToken",
    "InvalidTokenSignature",
    "ExpiredToken",
    "InvalidCredentials",
    "CallerMismatch",
    "Conflict",
    "TagsStillUsed",
    "EventTypeInUse",
    "EventTypeValidation",
    "InfrastructureError",
    "CredentialCorruptError",
    "SigningKeyError",
]
