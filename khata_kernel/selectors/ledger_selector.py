"""
Module: khata_kernel.selectors.ledger_selector
Responsibility: Read-only balance queries for customers and companies:
    current balance, credit/debit summary, running statement, dashboard
    totals, orphaned transactions, and a canonical ledger hash.
    Balances are a derived view over the transaction collections -- there
    are no stored balances anywhere in the kernel.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - ``balance == sum(credit) - sum(debit)`` over the entity's
      transactions, recomputed on every call.
    - A transaction whose owner was deleted counts toward no balance.
    - canonical_hash() is deterministic: the same transactions always
      produce the same hash regardless of collection order.
"""

import hashlib
import json
from decimal import Decimal
from typing import Any

from khata_kernel.domain.ledger import (
    EntityBalance,
    StatementLine,
    balance_of,
    belongs_to,
    running_balances,
    summarize,
)
from khata_kernel.domain.records import Company, Customer, RecordKind, Transaction
from khata_kernel.domain.values import ZERO
from khata_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector):
    """
    Selector for balance queries.

    Guarantees:
        - All balance methods return Decimal (never float).
        - An unknown or deleted entity has balance ``Decimal("0")``.
    """

    def customer_balance(self, customer_id: str) -> Decimal:
        return balance_of(customer_id, self.state.customer_transactions)

    def company_balance(self, company_id: str) -> Decimal:
        return balance_of(company_id, self.state.company_transactions)

    def customer_summary(self, customer_id: str) -> EntityBalance:
        return summarize(customer_id, self.state.customer_transactions)

    def company_summary(self, company_id: str) -> EntityBalance:
        return summarize(company_id, self.state.company_transactions)

    def customer_statement(self, customer_id: str) -> tuple[StatementLine, ...]:
        return running_balances(customer_id, self.state.customer_transactions)

    def company_statement(self, company_id: str) -> tuple[StatementLine, ...]:
        return running_balances(company_id, self.state.company_transactions)

    def transactions_for(self, owner_id: str) -> tuple[Transaction, ...]:
        """Transactions of one customer or company, newest ``date`` first."""
        own = [t for t in self.state.transactions if belongs_to(t, owner_id)]
        own.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return tuple(own)

    def customer_balances(self) -> tuple[tuple[Customer, EntityBalance], ...]:
        transactions = self.state.customer_transactions
        return tuple((c, summarize(c.id, transactions)) for c in self.state.customers)

    def company_balances(self) -> tuple[tuple[Company, EntityBalance], ...]:
        transactions = self.state.company_transactions
        return tuple((c, summarize(c.id, transactions)) for c in self.state.companies)

    def total_receivable(self) -> Decimal:
        """Sum of positive customer balances; orphans excluded."""
        return sum(
            (s.balance for _, s in self.customer_balances() if s.balance > 0),
            ZERO,
        )

    def total_payable(self) -> Decimal:
        """Sum of negative company balances, as a positive amount."""
        return -sum(
            (s.balance for _, s in self.company_balances() if s.balance < 0),
            ZERO,
        )

    def orphaned_transactions(self) -> tuple[Transaction, ...]:
        """Transactions whose customer or company no longer exists."""
        state = self.state
        customer_ids = {c.id for c in state.customers}
        company_ids = {c.id for c in state.companies}
        return tuple(
            t
            for t in state.transactions
            if (t.owner_kind is RecordKind.CUSTOMER and t.owner_id not in customer_ids)
            or (t.owner_kind is RecordKind.COMPANY and t.owner_id not in company_ids)
        )

    def transaction_rows(self, owner_id: str | None = None) -> list[dict[str, Any]]:
        """Flat rows for display or export, in statement order."""
        transactions = self.state.transactions
        if owner_id is not None:
            transactions = tuple(t for t in transactions if belongs_to(t, owner_id))
        ordered = sorted(transactions, key=lambda t: (t.date, t.created_at))
        return [
            {
                "id": t.id,
                "owner_kind": t.owner_kind.value,
                "owner_id": t.owner_id,
                "date": t.date.date().isoformat(),
                "type": t.type.value,
                "amount": t.amount,
                "signed_amount": t.signed_amount,
                "payment_mode": t.payment_mode,
                "bill_id": t.bill_id,
                "quantity": t.quantity,
                "purchase_description": t.purchase_description,
                "additional_notes": t.additional_notes,
            }
            for t in ordered
        ]

    def canonical_hash(self) -> str:
        """
        Deterministic SHA-256 over every transaction, sorted by id.

        Two states with the same transactions hash identically; any edit,
        addition or removal changes the hash.
        """
        rows = sorted(
            (
                [
                    t.id,
                    t.owner_kind.value,
                    t.owner_id,
                    t.date.isoformat(),
                    t.type.value,
                    str(t.amount),
                    t.payment_mode,
                    t.bill_id,
                    str(t.quantity),
                ]
                for t in self.state.transactions
            ),
            key=lambda row: row[0],
        )
        payload = json.dumps(rows, separators=(",", ":"), sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
