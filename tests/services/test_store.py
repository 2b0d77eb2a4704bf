"""Store bootstrap, versions and demo data."""

from decimal import Decimal

from khata_kernel.domain.records import UserRole
from khata_kernel.selectors.ledger_selector import LedgerSelector
from khata_kernel.services.demo import load_demo_data
from khata_kernel.services.store import SYSTEM_ACTOR


def test_bootstrap(store):
    state = store.state
    assert store.version == 0
    assert state.settings.last_bill_serial == 8000
    assert state.settings.created_by == SYSTEM_ACTOR.user_id
    (admin,) = state.users
    assert admin.id == "admin-001"
    assert admin.role is UserRole.ADMIN


def test_each_commit_bumps_version(store, parties, actor):
    parties.add_customer("A", "1", actor)
    parties.add_customer("B", "2", actor)
    assert store.version == 2


def test_demo_data(store, actor, clock, ids):
    load_demo_data(store, actor, clock=clock, ids=ids)
    state = store.state
    ledger = LedgerSelector(store)
    (customer,) = state.customers
    (company,) = state.companies
    assert customer.name == "Sample Customer"
    assert state.bills[0].serial_no == "AMR-8001"
    assert state.bills[0].total_amount == Decimal("1500")
    assert ledger.customer_balance(customer.id) == Decimal("0")
    assert ledger.company_balance(company.id) == Decimal("-2500")
    assert {p.name for p in state.products} == {"Radiator Core", "Cooling Fan"}
