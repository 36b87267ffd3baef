"""User service layer."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError

from tagjournal.core.errors import Conflict
from tagjournal.core.users.models import User
from tagjournal.core.utils.transaction import atomic


def get_user_by_username(username: str) -> Optional[User]:
    return User.query.filter_by(username=username).first()


def create_user(username: str, password_hash: str, email: str) -> User:
    user = User(username=username, password_hash=password_hash, email=email)
    try:
        with atomic() as session:
            session.add(user)
            session.flush()
    except IntegrityError as exc:
        raise Conflict("username or email already registered") from exc
    return user


def set_password_hash(user_id: uuid.UUID, password_hash: str) -> bool:
    with atomic() as session:
        updated = (
            session.query(User)
            .filter(User.id == user_id)
            .update({"password_hash": password_hash})
        )
    return updated > 0
