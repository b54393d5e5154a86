"""
tests/conftest.py -- Shared test fixtures for Lampshop Admin tests.

This module provides:
  - TEST_SECRET: fixed signing key so tests can mint and forge tokens
  - RecordingNotifier / FailingNotifier: in-process ChangeNotifier doubles
  - _patch_lifespan(): wires test objects into app.state, bypassing real startup
  - api_client: TestClient over empty stores plus a valid admin token

The DEBUG env var must be set before any api/ or core/ import so
get_settings() auto-generates SECRET_KEY in dev mode rather than raising
ValueError. Seeding is disabled so every test starts from empty stores and
identifiers start at 1.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SEED_DEMO_DATA", "false")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.credentials import StaticCredentialProvider
from auth.tokens import AuthGate
from catalog.models import OrderStatus
from catalog.notifier import NotificationError
from catalog.reference import CategoryCatalog
from catalog.store import OrderStore, ProductStore

TEST_SECRET = "test-secret-key-with-at-least-32-characters"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "password123"


# ---------------------------------------------------------------------------
# Notifier doubles
# ---------------------------------------------------------------------------


class RecordingNotifier:
    def __init__(self) -> None:
        self.calls: list[tuple[int, OrderStatus]] = []

    def notify_order_status_change(self, order_id: int, status: OrderStatus) -> None:
        self.calls.append((order_id, status))


class FailingNotifier:
    def __init__(self) -> None:
        self.attempts = 0

    def notify_order_status_change(self, order_id: int, status: OrderStatus) -> None:
        self.attempts += 1
        raise NotificationError("downstream unavailable")


# ---------------------------------------------------------------------------
# App wiring
# ---------------------------------------------------------------------------


def make_gate(secret: str = TEST_SECRET, ttl_seconds: int = 7200) -> AuthGate:
    return AuthGate(
        secret_key=secret,
        credentials=StaticCredentialProvider(ADMIN_USERNAME, ADMIN_PASSWORD),
        ttl_seconds=ttl_seconds,
    )


@dataclass
class AppState:
    """The objects a test run wires into app.state, kept for direct inspection."""

    gate: AuthGate
    products: ProductStore = field(default_factory=ProductStore)
    orders: OrderStore = field(default_factory=OrderStore)
    catalog: CategoryCatalog = field(default_factory=CategoryCatalog)
    notifier: object = field(default_factory=RecordingNotifier)


def _patch_lifespan(state: AppState):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.auth_gate = state.gate
        app.state.products = state.products
        app.state.orders = state.orders
        app.state.catalog = state.catalog
        app.state.notifier = state.notifier
        yield

    return test_lifespan


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    """Rate-limit counters are process-wide; clear them so tests don't interact."""
    limiter.reset()


@pytest.fixture
def app_state() -> AppState:
    return AppState(gate=make_gate())


@pytest.fixture
def api_client(app_state: AppState) -> Generator[tuple[TestClient, str, AppState], None, None]:
    """Yield (client, token, state) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers, real middleware and real exception handlers but
    use fresh, empty stores. token is a valid bearer token for the admin.
    """
    token = app_state.gate.create_access_token(ADMIN_USERNAME)
    app.router.lifespan_context = _patch_lifespan(app_state)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, app_state