"""Reusable decorators for controllers."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from functools import wraps
from typing import Callable, TypeVar

from flask import current_app, g, request

from tagjournal.core.auth.tokens import TOKEN_TYPE, validate_token
from tagjournal.core.errors import CallerMismatch, InvalidInput, MalformedToken, Unauthorized

F = TypeVar("F", bound=Callable)

logger = logging.getLogger(__name__)


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if not header:
        raise Unauthorized("missing bearer token")
    if scheme.lower() != TOKEN_TYPE.lower() or not token.strip():
        raise MalformedToken()
    return token.strip()


def current_caller_id() -> uuid.UUID:
    """Caller identity resolved by ``session_required``."""
    return g.caller_id


def session_required(fn: F) -> F:
    """Validate the bearer session token and bind the caller id to ``g``."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        claims = validate_token(
            _bearer_token(),
            datetime.now(timezone.utc),
            current_app.config["JWT_SECRET_KEY"],
            current_app.config.get("JWT_ALGORITHM", "HS256"),
        )
        g.caller_id = claims.subject
        g.session_claims = claims
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def same_user_required(fn: F) -> F:
    """Reject the call when the ``user_id`` path parameter is not the session subject.

    Must be applied beneath ``session_required``.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        raw_user_id = kwargs.get("user_id")
        if raw_user_id is not None:
            try:
                path_user_id = raw_user_id if isinstance(raw_user_id, uuid.UUID) else uuid.UUID(str(raw_user_id))
            except ValueError as exc:
                raise InvalidInput("failed to parse user id from path") from exc
            if path_user_id != current_caller_id():
                logger.debug("User id %s does not match session subject", path_user_id)
                raise CallerMismatch()
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
