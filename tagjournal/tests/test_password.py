"""Credential engine: argon2id hashing offloaded to the hashing pool."""

from __future__ import annotations

import threading

import pytest

pytestmark = pytest.mark.unit

from tagjournal.core.auth.password import CredentialEngine, hash_password, verify_password
from tagjournal.core.errors import CredentialCorruptError


@pytest.fixture
def engine():
    engine = CredentialEngine(time_cost=1, memory_cost=8, parallelism=1, max_workers=2)
    yield engine
    engine.shutdown()


def test_hash_then_verify(engine):
    credential = engine.hash("correct horse")
    assert credential.startswith("$argon2id$")
    assert engine.verify("correct horse", credential) is True


def test_wrong_password_is_false_not_error(engine):
    credential = engine.hash("correct horse")
    assert engine.verify("battery staple", credential) is False


def test_same_password_gets_distinct_salts(engine):
    assert engine.hash("same-password") != engine.hash("same-password")


def test_unreadable_credential_raises(engine):
    with pytest.raises(CredentialCorruptError):
        engine.verify("anything", "not-an-argon2-hash")


def test_offloaded_calls_run_on_pool_threads(engine):
    seen = []
    original = engine.hash

    def spy(password):
        seen.append(threading.current_thread().name)
        return original(password)

    engine.hash = spy
    credential = engine.hash_offloaded("pooled-password")
    assert engine.verify_offloaded("pooled-password", credential) is True
    assert seen and seen[0].startswith("credential-hash")
    assert seen[0] != threading.current_thread().name


@pytest.mark.integration
def test_module_helpers_use_app_engine(app):
    credential = hash_password("app-bound-password")
    assert verify_password("app-bound-password", credential) is True
    assert verify_password("other-password", credential) is False
