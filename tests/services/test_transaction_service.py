"""Recording, editing and clearing transactions."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from khata_kernel.domain.records import HistoryAction, RecordKind, TransactionType
from khata_kernel.domain.values import CurrencyValue, NumberValue
from khata_kernel.exceptions import (
    InvalidValueError,
    MissingFieldError,
    NonPositiveValueError,
    RecordNotFoundError,
)


def test_credit_then_debit_balance(transactions, ledger, customer, actor):
    transactions.record_customer_transaction(
        customer.id, actor, amount="1500", type="credit", payment_mode="Cash"
    )
    assert ledger.customer_balance(customer.id) == Decimal("1500")
    transactions.record_customer_transaction(
        customer.id, actor, amount=Decimal("500"), type=TransactionType.DEBIT,
        payment_mode="Cash",
    )
    assert ledger.customer_balance(customer.id) == Decimal("1000")


def test_defaults(transactions, customer, actor, clock):
    txn = transactions.record_customer_transaction(
        customer.id, actor, amount=10, type="credit", payment_mode="Cash", bill_id="  "
    )
    assert txn.bill_id.startswith("ref-")
    assert txn.date == clock.now()
    assert txn.quantity == Decimal("1")
    assert txn.history[0].changes == "Transaction recorded - credit of 10"


def test_company_transaction(transactions, ledger, company, actor, store):
    txn = transactions.record_company_transaction(
        company.id, actor, amount="2500", type="debit", payment_mode="Bank Transfer",
        bill_id="PO-17",
    )
    assert txn.company_id == company.id and txn.customer_id is None
    assert store.state.company_transactions == (txn,)
    assert ledger.company_balance(company.id) == Decimal("-2500")


@pytest.mark.parametrize(
    "amount,error",
    [(None, MissingFieldError), ("", MissingFieldError), (0, NonPositiveValueError),
     ("-5", NonPositiveValueError)],
)
def test_amount_validation(transactions, customer, actor, store, amount, error):
    with pytest.raises(error):
        transactions.record_customer_transaction(
            customer.id, actor, amount=amount, type="credit", payment_mode="Cash"
        )
    assert store.state.customer_transactions == ()


def test_payment_mode_required(transactions, customer, actor):
    with pytest.raises(MissingFieldError) as exc_info:
        transactions.record_customer_transaction(
            customer.id, actor, amount=5, type="credit", payment_mode=" "
        )
    assert exc_info.value.field == "payment_mode"


def test_unknown_owner(transactions, actor):
    with pytest.raises(RecordNotFoundError):
        transactions.record_customer_transaction(
            "cust-404", actor, amount=5, type="credit", payment_mode="Cash"
        )


def test_update_replaces_fields(transactions, ledger, customer, actor, clock):
    txn = transactions.record_customer_transaction(
        customer.id, actor, amount=100, type="credit", payment_mode="Cash", bill_id="AMR-1"
    )
    clock.advance(5)
    updated = transactions.update_transaction(
        txn.id,
        actor,
        date=datetime(2025, 3, 6, tzinfo=timezone.utc),
        amount="80",
        type="debit",
        payment_mode="Cheque",
        bill_id="AMR-1",
    )
    assert updated.customer_id == customer.id
    assert ledger.customer_balance(customer.id) == Decimal("-80")
    entry = updated.history[0]
    assert entry.action is HistoryAction.UPDATED
    assert entry.old_values["amount"] == CurrencyValue(Decimal("100"))
    assert entry.new_values["amount"] == CurrencyValue(Decimal("80"))
    assert len(updated.history) == 2


def test_clear_records(transactions, ledger, customer, actor, store, parties):
    for amount in ("100", "50"):
        transactions.record_customer_transaction(
            customer.id, actor, amount=amount, type="credit", payment_mode="Cash"
        )
    removed = transactions.clear_records(RecordKind.CUSTOMER, customer.id, actor)
    assert removed == 2
    assert store.state.customer_transactions == ()
    assert ledger.customer_balance(customer.id) == Decimal("0")
    entry = parties.get_customer(customer.id).history[0]
    assert entry.changes == "Cleared 2 transaction records"
    assert entry.old_values["transactions"] == NumberValue(Decimal("2"))
    assert entry.new_values["balance"] == CurrencyValue(Decimal("0"))


def test_clear_leaves_other_owners(transactions, parties, ledger, customer, actor):
    other = parties.add_customer("Other", "1", actor)
    transactions.record_customer_transaction(
        other.id, actor, amount=7, type="credit", payment_mode="Cash"
    )
    transactions.clear_records("customer", customer.id, actor)
    assert ledger.customer_balance(other.id) == Decimal("7")


@pytest.mark.parametrize("date", [datetime(2025, 3, 1, 9, 0), "2025-03-01"])
def test_date_must_be_timezone_aware(transactions, customer, actor, store, date):
    with pytest.raises(InvalidValueError) as exc_info:
        transactions.record_customer_transaction(
            customer.id, actor, amount=10, type="credit", payment_mode="Cash", date=date
        )
    assert exc_info.value.field == "date"
    assert store.state.customer_transactions == ()


def test_backdated_credit_sorts_with_bill_debit(transactions, billing, ledger, customer, actor):
    billing.generate_bill(customer.name, [("Radiator Core", 1, "1200")], actor)
    transactions.record_customer_transaction(
        customer.id, actor, amount=200, type="credit", payment_mode="Cash",
        date=datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc),
    )
    statement = ledger.customer_statement(customer.id)
    assert [line.transaction.amount for line in statement] == [Decimal("200"), Decimal("1200")]
    assert ledger.customer_balance(customer.id) == Decimal("-1000")


def test_update_rejects_naive_or_missing_date(transactions, customer, actor):
    txn = transactions.record_customer_transaction(
        customer.id, actor, amount=10, type="credit", payment_mode="Cash"
    )
    fields = dict(amount=10, type="credit", payment_mode="Cash", bill_id="AMR-1")
    with pytest.raises(InvalidValueError):
        transactions.update_transaction(txn.id, actor, date=datetime(2025, 3, 1), **fields)
    with pytest.raises(MissingFieldError):
        transactions.update_transaction(txn.id, actor, date=None, **fields)
    assert transactions.store.state.customer_transactions == (txn,)
