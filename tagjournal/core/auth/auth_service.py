"""Authentication service layer: registration, login, password rotation."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app

from tagjournal.core.auth.password import hash_password, verify_password
from tagjournal.core.auth.tokens import TOKEN_TYPE, issue_token
from tagjournal.core.errors import InvalidCredentials
from tagjournal.core.users.models import User
from tagjournal.core.users.schemas import LoginResponse, RegisterRequest
from tagjournal.core.users.services import create_user, get_user_by_username, set_password_hash
from tagjournal.core.utils.dates import utcnow

logger = logging.getLogger(__name__)


def register_user(payload: RegisterRequest) -> uuid.UUID:
    """Hash the password on the credential pool and create the user."""
    password_hash = hash_password(payload.password)
    user = create_user(payload.username, password_hash, payload.email)
    logger.info("Registered user %s", user.id)
    return user.id


def authenticate_user(username: str, password: str) -> Optional[User]:
    """Return the user if credentials are valid."""
    user = get_user_by_username(username)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def issue_session(user_id: uuid.UUID, now: Optional[datetime] = None) -> LoginResponse:
    ttl_seconds = int(current_app.config["JWT_EXPIRATION_SECONDS"])
    token = issue_token(
        user_id,
        now or utcnow(),
        timedelta(seconds=ttl_seconds),
        current_app.config["JWT_SECRET_KEY"],
        current_app.config.get("JWT_ALGORITHM", "HS256"),
    )
    return LoginResponse(access_token=token, token_type=TOKEN_TYPE, expires_in=ttl_seconds)


def login(username: str, password: str, now: Optional[datetime] = None) -> LoginResponse:
    """Exchange credentials for a bearer session token.

    Unknown usernames and wrong passwords both raise ``InvalidCredentials``.
    """
    user = authenticate_user(username, password)
    if user is None:
        logger.info("Failed login for username %r", username)
        raise InvalidCredentials()
    return issue_session(user.id, now)


def update_password(user_id: uuid.UUID, new_password: str) -> bool:
    password_hash = hash_password(new_password)
    return set_password_hash(user_id, password_hash)
