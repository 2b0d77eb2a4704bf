"""
State -- The whole shop's data as one immutable value.

Responsibility:
    ``KhataState`` bundles every collection plus the Settings singleton.
    Commands compute the next state with the helpers below and hand it to
    ``services.store.KhataStore.commit``; a state value is never edited.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Exactly one Settings record.
    - Collections keep insertion order; replacing a record keeps its slot.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import TypeVar

from khata_kernel.domain.records import (
    AuditedRecord,
    Bill,
    BillItem,
    Company,
    Customer,
    Product,
    RecordKind,
    Settings,
    Transaction,
    User,
)
from khata_kernel.exceptions import RecordNotFoundError

R = TypeVar("R", bound=AuditedRecord)


def find_by_id(records: Iterable[R], record_id: str) -> R | None:
    for record in records:
        if record.id == record_id:
            return record
    return None


def replace_record(records: tuple[R, ...], record: R) -> tuple[R, ...]:
    """Swap the record with ``record.id`` for ``record``, keeping its position."""
    if find_by_id(records, record.id) is None:
        raise RecordNotFoundError(record.kind.value, record.id)
    return tuple(record if r.id == record.id else r for r in records)


def remove_where(records: tuple[R, ...], predicate: Callable[[R], bool]) -> tuple[R, ...]:
    return tuple(r for r in records if not predicate(r))


# Collection attribute holding each record kind.
_COLLECTIONS: dict[RecordKind, str] = {
    RecordKind.USER: "users",
    RecordKind.CUSTOMER: "customers",
    RecordKind.COMPANY: "companies",
    RecordKind.BILL: "bills",
    RecordKind.BILL_ITEM: "bill_items",
    RecordKind.PRODUCT: "products",
}


@dataclass(frozen=True)
class KhataState:
    settings: Settings
    users: tuple[User, ...] = ()
    customers: tuple[Customer, ...] = ()
    companies: tuple[Company, ...] = ()
    customer_transactions: tuple[Transaction, ...] = ()
    company_transactions: tuple[Transaction, ...] = ()
    bills: tuple[Bill, ...] = ()
    bill_items: tuple[BillItem, ...] = ()
    products: tuple[Product, ...] = ()

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self.customer_transactions + self.company_transactions

    def transactions_of(self, owner_kind: RecordKind) -> tuple[Transaction, ...]:
        if owner_kind is RecordKind.CUSTOMER:
            return self.customer_transactions
        if owner_kind is RecordKind.COMPANY:
            return self.company_transactions
        raise ValueError(f"Transactions belong to customers or companies, not {owner_kind.value}")

    def collection(self, kind: RecordKind) -> tuple[AuditedRecord, ...]:
        if kind is RecordKind.SETTINGS:
            return (self.settings,)
        if kind is RecordKind.TRANSACTION:
            return self.transactions
        return getattr(self, _COLLECTIONS[kind])

    def find(self, kind: RecordKind, record_id: str) -> AuditedRecord | None:
        return find_by_id(self.collection(kind), record_id)

    def get(self, kind: RecordKind, record_id: str) -> AuditedRecord:
        record = self.find(kind, record_id)
        if record is None:
            raise RecordNotFoundError(kind.value, record_id)
        return record

    def with_transaction(self, transaction: Transaction) -> KhataState:
        """Append or replace ``transaction`` in its owner's collection."""
        attr = (
            "customer_transactions"
            if transaction.owner_kind is RecordKind.CUSTOMER
            else "company_transactions"
        )
        current: tuple[Transaction, ...] = getattr(self, attr)
        if find_by_id(current, transaction.id) is None:
            updated = current + (transaction,)
        else:
            updated = replace_record(current, transaction)
        return replace(self, **{attr: updated})
