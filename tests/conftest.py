"""
Shared fixtures.

Everything runs against the in-memory store and auth backend; no test
touches the network.
"""

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.config import get_settings
from finance_tracker.orchestrator import DashboardFlow, EntryEditor
from finance_tracker.services.auth import InMemoryAuthBackend
from finance_tracker.services.storage import create_memory_store
from finance_tracker.session import SessionGate
from tests.helpers import USER_EMAIL, USER_PASSWORD, run


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store():
    return create_memory_store()


@pytest.fixture
def auth():
    backend = InMemoryAuthBackend()
    backend.add_account(USER_EMAIL, USER_PASSWORD)
    return backend


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def session(auth, audit_logger):
    gate = SessionGate(auth, audit_logger=audit_logger)
    run(gate.start())
    yield gate
    gate.stop()


@pytest.fixture
def signed_in(session):
    run(session.sign_in(USER_EMAIL, USER_PASSWORD))
    return session


@pytest.fixture
def editor(store, session, audit_logger):
    return EntryEditor(store, session, audit_logger=audit_logger)


@pytest.fixture
def dashboard(store, session, audit_logger):
    return DashboardFlow(store, session, audit_logger=audit_logger)
