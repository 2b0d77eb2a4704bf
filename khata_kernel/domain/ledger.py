"""
Ledger -- Balance derivation over transaction history.

Responsibility:
    Computes a customer's or company's balance, totals and running
    statement from the transactions that reference it. There are no
    stored balances anywhere in the kernel; every figure here is derived
    at call time.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Called by selectors.ledger_selector for every balance query.

Invariants enforced:
    - Derived balance: ``balance == sum(credit) - sum(debit)`` over the
      entity's transactions, starting from Decimal 0.
    - Order independence: the balance does not depend on the order of
      the input sequence.
    - No memoisation: callers pass the current transaction collection on
      every query.

Failure modes:
    - None. An entity with no transactions has balance 0; a negative
      balance is valid.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from khata_kernel.domain.records import Transaction, TransactionType
from khata_kernel.domain.values import ZERO


class BalanceTone(str, Enum):
    """How a balance should be presented. Negative balances stand out."""

    NEGATIVE = "negative"
    NON_NEGATIVE = "non_negative"


def belongs_to(transaction: Transaction, entity_id: str) -> bool:
    return transaction.customer_id == entity_id or transaction.company_id == entity_id


def signed_amount(transaction: Transaction) -> Decimal:
    """``+amount`` for credit, ``-amount`` for debit."""
    return transaction.signed_amount


def balance_of(entity_id: str, transactions: Iterable[Transaction]) -> Decimal:
    """
    Current balance of a customer or company.

    Postconditions:
        - Returns ``Decimal("0")`` when no transaction references
          ``entity_id``.
    """
    total = ZERO
    for transaction in transactions:
        if belongs_to(transaction, entity_id):
            total += transaction.signed_amount
    return total


@dataclass(frozen=True)
class EntityBalance:
    """Credit/debit totals of one entity and the balance they yield."""

    entity_id: str
    credit_total: Decimal
    debit_total: Decimal
    transaction_count: int

    @property
    def balance(self) -> Decimal:
        return self.credit_total - self.debit_total

    @property
    def is_negative(self) -> bool:
        return self.balance < 0

    @property
    def tone(self) -> BalanceTone:
        return BalanceTone.NEGATIVE if self.is_negative else BalanceTone.NON_NEGATIVE


def summarize(entity_id: str, transactions: Iterable[Transaction]) -> EntityBalance:
    credit_total = ZERO
    debit_total = ZERO
    count = 0
    for transaction in transactions:
        if not belongs_to(transaction, entity_id):
            continue
        count += 1
        if transaction.type is TransactionType.CREDIT:
            credit_total += transaction.amount
        else:
            debit_total += transaction.amount
    return EntityBalance(
        entity_id=entity_id,
        credit_total=credit_total,
        debit_total=debit_total,
        transaction_count=count,
    )


@dataclass(frozen=True)
class StatementLine:
    """A transaction together with the balance right after it."""

    transaction: Transaction
    running_balance: Decimal

    @property
    def date(self) -> datetime:
        return self.transaction.date


def running_balances(
    entity_id: str,
    transactions: Iterable[Transaction],
) -> tuple[StatementLine, ...]:
    """
    Statement of an entity in date order with a running balance.

    Ties on ``date`` are broken by ``created_at``. The last line's
    ``running_balance`` equals ``balance_of(entity_id, transactions)``.
    """
    own = sorted(
        (t for t in transactions if belongs_to(t, entity_id)),
        key=lambda t: (t.date, t.created_at),
    )
    lines = []
    running = ZERO
    for transaction in own:
        running += transaction.signed_amount
        lines.append(StatementLine(transaction=transaction, running_balance=running))
    return tuple(lines)
