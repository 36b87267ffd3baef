"""Password hashing helpers.

Argon2id is deliberately expensive, so request handlers never run it on
their own thread: ``hash_password`` and ``verify_password`` hand the work to
a bounded ``ThreadPoolExecutor`` owned by the credential engine and wait for
the result. Other requests keep being served by the web workers meanwhile,
and at most ``HASH_POOL_WORKERS`` hashes run at once per process.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from flask import current_app, has_app_context

from tagjournal.core.errors import CredentialCorruptError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "credential_engine"


class CredentialEngine:
    """Pure argon2id hash/verify plus the pool the work is offloaded to."""

    def __init__(
        self,
        *,
        time_cost: int = 3,
        memory_cost: int = 64 * 1024,
        parallelism: int = 4,
        max_workers: int = 4,
    ):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="credential-hash"
        )

    @classmethod
    def from_config(cls, config) -> "CredentialEngine":
        return cls(
            time_cost=config.get("ARGON2_TIME_COST", 3),
            memory_cost=config.get("ARGON2_MEMORY_COST", 64 * 1024),
            parallelism=config.get("ARGON2_PARALLELISM", 4),
            max_workers=config.get("HASH_POOL_WORKERS", 4),
        )

    def hash(self, plain_password: str) -> str:
        """Return an encoded argon2id credential with a fresh random salt."""
        return self._hasher.hash(plain_password)

    def verify(self, plain_password: str, credential: str) -> bool:
        """Check a password against a stored credential.

        A well-formed credential that does not match yields ``False``; a
        credential that cannot be parsed raises ``CredentialCorruptError``.
        """
        try:
            return self._hasher.verify(credential, plain_password)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            logger.error("Stored credential could not be verified: %s", exc)
            raise CredentialCorruptError() from exc

    def hash_offloaded(self, plain_password: str) -> str:
        return self._executor.submit(self.hash, plain_password).result()

    def verify_offloaded(self, plain_password: str, credential: str) -> bool:
        return self._executor.submit(self.verify, plain_password, credential).result()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


_default_engine: Optional[CredentialEngine] = None


def init_credential_engine(app) -> CredentialEngine:
    engine = CredentialEngine.from_config(app.config)
    app.extensions[EXTENSION_KEY] = engine
    return engine


def get_credential_engine() -> CredentialEngine:
    """Engine bound to the current app, or a process default outside one."""
    global _default_engine
    if has_app_context():
        engine = current_app.extensions.get(EXTENSION_KEY)
        if engine is not None:
            return engine
    if _default_engine is None:
        _default_engine = CredentialEngine()
    return _default_engine


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password on the credential pool."""
    return get_credential_engine().hash_offloaded(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Validate a plaintext password against a stored hash on the credential pool."""
    return get_credential_engine().verify_offloaded(plain_password, hashed_password)
