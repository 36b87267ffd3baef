"""Stateless session tokens (signed JWT claims).

``issue_token`` and ``validate_token`` take ``now`` explicitly so the
validity window ``iat <= now <= exp`` can be checked deterministically.
There is no revocation list; expiry is the only way a token stops working.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Union

import jwt

from tagjournal.core.errors import (
    ExpiredToken,
    InvalidTokenSignature,
    MalformedToken,
    SigningKeyError,
)

DEFAULT_ALGORITHM = "HS256"
TOKEN_TYPE = "Bearer"

_DECODE_OPTIONS = {
    # Expiry is checked against the caller-supplied ``now`` below.
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "require": ["sub", "iat", "exp"],
}


@dataclass(frozen=True)
class SessionClaims:
    subject: uuid.UUID
    issued_at: datetime
    expires_at: datetime


def _timestamp(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def issue_token(
    user_id: Union[uuid.UUID, str],
    now: datetime,
    ttl: timedelta,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Sign ``{sub, iat, exp}`` for ``user_id`` valid from ``now`` for ``ttl``."""
    if not secret:
        raise SigningKeyError()
    issued_at = _timestamp(now)
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + ttl.total_seconds(),
    }
    try:
        return jwt.encode(claims, secret, algorithm=algorithm)
    except (jwt.InvalidKeyError, NotImplementedError) as exc:
        raise SigningKeyError() from exc


def validate_token(
    token: str,
    now: datetime,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> SessionClaims:
    """Verify signature and expiry, returning the decoded claims.

    Raises ``InvalidTokenSignature``, ``MalformedToken`` or ``ExpiredToken``;
    all three are ``Unauthorized`` at the HTTP boundary.
    """
    if not secret:
        raise SigningKeyError()
    if not token:
        raise MalformedToken()
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm], options=_DECODE_OPTIONS)
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
        raise InvalidTokenSignature() from exc
    except jwt.InvalidTokenError as exc:
        raise MalformedToken() from exc

    try:
        subject = uuid.UUID(str(payload["sub"]))
        issued_at = float(payload["iat"])
        expires_at = float(payload["exp"])
    except (TypeError, ValueError) as exc:
        raise MalformedToken() from exc

    if _timestamp(now) > expires_at:
        raise ExpiredToken()

    return SessionClaims(
        subject=subject,
        issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
    )


__all__ = ["SessionClaims", "TOKEN_TYPE", "issue_token", "validate_token"]
