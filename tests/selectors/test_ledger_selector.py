"""Derived balances, statements and ledger hash."""

from datetime import datetime, timezone
from decimal import Decimal

from khata_kernel.domain.records import RecordKind


def _pay(transactions, owner, actor, amount, kind, day=5):
    return transactions.record_customer_transaction(
        owner.id,
        actor,
        amount=amount,
        type=kind,
        payment_mode="Cash",
        date=datetime(2025, 3, day, tzinfo=timezone.utc),
    )


def test_summary_and_statement(transactions, ledger, customer, actor):
    _pay(transactions, customer, actor, "500", "debit", day=6)
    _pay(transactions, customer, actor, "1500", "credit", day=5)
    summary = ledger.customer_summary(customer.id)
    assert summary.balance == Decimal("1000")
    assert summary.transaction_count == 2
    statement = ledger.customer_statement(customer.id)
    assert [line.running_balance for line in statement] == [Decimal("1500"), Decimal("1000")]
    assert [t.amount for t in ledger.transactions_for(customer.id)] == [
        Decimal("500"),
        Decimal("1500"),
    ]


def test_totals(transactions, parties, ledger, customer, company, actor):
    other = parties.add_customer("Other", "2", actor)
    _pay(transactions, customer, actor, "300", "credit")
    _pay(transactions, other, actor, "100", "debit")
    transactions.record_company_transaction(
        company.id, actor, amount="2500", type="debit", payment_mode="Bank Transfer"
    )
    assert ledger.total_receivable() == Decimal("300")
    assert ledger.total_payable() == Decimal("2500")
    assert len(ledger.customer_balances()) == 2


def test_deleted_owner_leaves_orphans(transactions, parties, ledger, customer, actor):
    txn = _pay(transactions, customer, actor, "300", "credit")
    parties.delete_customer(customer.id, actor)
    assert ledger.orphaned_transactions() == (txn,)
    assert ledger.total_receivable() == Decimal("0")
    assert ledger.customer_balances() == ()


def test_transaction_rows(transactions, ledger, customer, actor):
    _pay(transactions, customer, actor, "300", "debit")
    (row,) = ledger.transaction_rows(customer.id)
    assert row["owner_kind"] == RecordKind.CUSTOMER.value
    assert row["signed_amount"] == Decimal("-300")
    assert row["date"] == "2025-03-05"


def test_canonical_hash_tracks_ledger(transactions, ledger, customer, actor):
    empty = ledger.canonical_hash()
    txn = _pay(transactions, customer, actor, "300", "credit")
    recorded = ledger.canonical_hash()
    assert recorded != empty
    assert ledger.canonical_hash() == recorded
    transactions.update_transaction(
        txn.id, actor, date=txn.date, amount="301", type="credit",
        payment_mode="Cash", bill_id=txn.bill_id,
    )
    assert ledger.canonical_hash() != recorded
