"""
Pytest fixtures for the khata kernel test suite.

Provides:
- Structured logging configured for every test, plus ``captured_logs``
- A deterministic clock and sequential id generator
- A bootstrapped store with the admin user and a counter at 8000
- Services and selectors wired to that store
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from khata_kernel.domain.clock import DeterministicClock
from khata_kernel.domain.records import Actor
from khata_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from khata_kernel.selectors.bill_selector import BillSelector
from khata_kernel.selectors.history_selector import HistorySelector
from khata_kernel.selectors.ledger_selector import LedgerSelector
from khata_kernel.services.billing_service import BillingService
from khata_kernel.services.party_service import PartyService
from khata_kernel.services.settings_service import SettingsService
from khata_kernel.services.store import KhataStore
from khata_kernel.services.transaction_service import TransactionService
from khata_kernel.services.user_service import UserService
from khata_kernel.utils.ids import SequentialIdGenerator

ADMIN_ID = "admin-001"
STARTING_SERIAL = 8000


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture khata_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, billing, actor):
            billing.generate_bill(...)
            logs = captured_logs()
            assert any(r["message"] == "bill_generated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("khata_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Determinism
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2025, 3, 5, 10, 30, tzinfo=timezone.utc))


@pytest.fixture
def ids() -> SequentialIdGenerator:
    return SequentialIdGenerator()


@pytest.fixture
def actor() -> Actor:
    return Actor(user_id=ADMIN_ID, user_name="Admin")


# =============================================================================
# Store, services, selectors
# =============================================================================


@pytest.fixture
def store(clock, ids) -> KhataStore:
    return KhataStore.bootstrap(
        shop_name="Al Mehran Radiator",
        shop_address="Main Road, Hyderabad",
        admin_phone="0300-0000000",
        admin_email="admin@almehran.com",
        admin_name="Admin",
        admin_id=ADMIN_ID,
        starting_serial=STARTING_SERIAL,
        clock=clock,
        ids=ids,
    )


@pytest.fixture
def parties(store, clock, ids) -> PartyService:
    return PartyService(store, clock, ids)


@pytest.fixture
def transactions(store, clock, ids) -> TransactionService:
    return TransactionService(store, clock, ids)


@pytest.fixture
def billing(store, clock, ids) -> BillingService:
    return BillingService(store, clock, ids)


@pytest.fixture
def settings_service(store, clock, ids) -> SettingsService:
    return SettingsService(store, clock, ids)


@pytest.fixture
def users(store, clock, ids) -> UserService:
    return UserService(store, clock, ids)


@pytest.fixture
def ledger(store) -> LedgerSelector:
    return LedgerSelector(store)


@pytest.fixture
def bills(store) -> BillSelector:
    return BillSelector(store)


@pytest.fixture
def history(store) -> HistorySelector:
    return HistorySelector(store)


@pytest.fixture
def customer(parties, actor):
    """A customer named "Sample Customer" with no transactions."""
    return parties.add_customer("Sample Customer", "0300-1234567", actor)


@pytest.fixture
def company(parties, actor):
    return parties.add_company("Sample Company", "021-9876543", actor)
