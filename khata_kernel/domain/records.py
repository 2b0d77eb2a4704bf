"""
Records -- Frozen domain records carrying the audit-trail contract.

Responsibility:
    Defines every record the shop keeps (users, customers, companies,
    transactions, bills, bill items, products, settings), the history
    entry attached to each of them, and the actor who causes changes.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Records are plain frozen dataclasses. Services replace them wholesale
    (``dataclasses.replace``) and commit the new copy; nothing mutates a
    record in place.

Invariants enforced:
    - History is a tuple, newest entry first, extended only by
      ``domain.audit.record_change``.
    - HistoryEntry snapshots are read-only mappings of tagged DiffValues.
    - A Transaction belongs to exactly one customer or one company, and its
      amount is strictly positive.
    - BillItem.amount is always quantity * price; it is not an init field,
      so every ``replace(item, quantity=..., price=...)`` recomputes it.

Failure modes:
    - OwnershipError when a Transaction has both or neither owner.
    - NonPositiveValueError for non-positive transaction amounts or bill
      item quantity/price.
    - TypeError / ValueError from ``to_decimal`` for invalid amounts.

Audit relevance:
    No record stores a balance. Customer and Company balances come from
    ``domain.ledger`` over the transaction collection only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import ClassVar

from khata_kernel.domain.values import DiffValue, tag_value, to_decimal
from khata_kernel.exceptions import NonPositiveValueError, OwnershipError


class RecordKind(str, Enum):
    """Collections a record can live in."""

    USER = "user"
    CUSTOMER = "customer"
    COMPANY = "company"
    TRANSACTION = "transaction"
    BILL = "bill"
    BILL_ITEM = "bill_item"
    PRODUCT = "product"
    SETTINGS = "settings"


class HistoryAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"


class TransactionType(str, Enum):
    """
    Direction of a transaction.

    CREDIT adds to the owner's balance, DEBIT subtracts from it.
    """

    CREDIT = "credit"
    DEBIT = "debit"


class BillStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


def _freeze_snapshot(
    values: Mapping[str, object] | None,
) -> Mapping[str, DiffValue] | None:
    if values is None:
        return None
    return MappingProxyType({k: tag_value(v) for k, v in values.items()})


@dataclass(frozen=True)
class Actor:
    """The user a mutation is attributed to, supplied by the session layer."""

    user_id: str
    user_name: str

    @classmethod
    def from_user(cls, user: User) -> Actor:
        return cls(user_id=user.id, user_name=user.name)


@dataclass(frozen=True)
class HistoryEntry:
    """
    One immutable audit record describing a single mutation.

    Contract:
        ``old_values`` / ``new_values`` are either both None or both
        read-only mappings with the same keys (checked by
        ``domain.audit.record_change``, which is the only producer).
    """

    action: HistoryAction
    timestamp: datetime
    user_id: str
    user_name: str
    changes: str
    old_values: Mapping[str, DiffValue] | None = field(default=None, hash=False)
    new_values: Mapping[str, DiffValue] | None = field(default=None, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "old_values", _freeze_snapshot(self.old_values))
        object.__setattr__(self, "new_values", _freeze_snapshot(self.new_values))

    @property
    def has_snapshots(self) -> bool:
        return self.old_values is not None and self.new_values is not None


@dataclass(frozen=True)
class AuditedRecord:
    """
    Fields shared by every record that participates in the audit trail.

    ``history`` is newest-first. ``updated_at`` / ``updated_by`` are
    rewritten together with every history append.
    """

    kind: ClassVar[RecordKind]

    id: str
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str
    history: tuple[HistoryEntry, ...]


@dataclass(frozen=True)
class User(AuditedRecord):
    kind: ClassVar[RecordKind] = RecordKind.USER

    email: str
    name: str
    role: UserRole = UserRole.USER
    phone: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class Customer(AuditedRecord):
    kind: ClassVar[RecordKind] = RecordKind.CUSTOMER

    name: str
    phone: str
    address: str | None = None
    nic_number: str | None = None


@dataclass(frozen=True)
class Company(AuditedRecord):
    kind: ClassVar[RecordKind] = RecordKind.COMPANY

    name: str
    contact_number: str
    address: str | None = None


@dataclass(frozen=True)
class Transaction(AuditedRecord):
    """
    A credit or debit against one customer or one company.

    ``bill_id`` is a bill *reference*: the serial number printed on the
    bill (``AMR-8001``) or whatever the user typed. It is not a Bill's
    primary id; ``BillSelector.bill_for_transaction`` resolves it.
    """

    kind: ClassVar[RecordKind] = RecordKind.TRANSACTION

    date: datetime
    amount: Decimal
    type: TransactionType
    payment_mode: str
    bill_id: str
    customer_id: str | None = None
    company_id: str | None = None
    quantity: Decimal = Decimal("1")
    purchase_description: str | None = None
    additional_notes: str | None = None

    def __post_init__(self) -> None:
        if (self.customer_id is None) == (self.company_id is None):
            raise OwnershipError(self.customer_id, self.company_id)
        amount = to_decimal(self.amount, "amount")
        if amount <= 0:
            raise NonPositiveValueError("amount", amount)
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "quantity", to_decimal(self.quantity, "quantity"))
        object.__setattr__(self, "type", TransactionType(self.type))

    @property
    def owner_id(self) -> str:
        return self.customer_id if self.customer_id is not None else self.company_id

    @property
    def owner_kind(self) -> RecordKind:
        return RecordKind.CUSTOMER if self.customer_id is not None else RecordKind.COMPANY

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type is TransactionType.CREDIT else -self.amount


@dataclass(frozen=True)
class Bill(AuditedRecord):
    """
    An issued bill. ``total_amount`` is fixed at creation from the items
    and is not recomputed when an item is edited later.
    """

    kind: ClassVar[RecordKind] = RecordKind.BILL

    serial_no: str
    customer_name: str
    admin_phone: str
    date: datetime
    total_amount: Decimal
    status: BillStatus = BillStatus.COMPLETED


@dataclass(frozen=True)
class BillItem(AuditedRecord):
    """A line on a bill. ``bill_id`` is the owning Bill's primary id."""

    kind: ClassVar[RecordKind] = RecordKind.BILL_ITEM

    bill_id: str
    product_name: str
    quantity: Decimal
    price: Decimal
    amount: Decimal = field(init=False)

    def __post_init__(self) -> None:
        quantity = to_decimal(self.quantity, "quantity")
        price = to_decimal(self.price, "price")
        if quantity <= 0:
            raise NonPositiveValueError("quantity", quantity)
        if price <= 0:
            raise NonPositiveValueError("price", price)
        object.__setattr__(self, "quantity", quantity)
        object.__setattr__(self, "price", price)
        object.__setattr__(self, "amount", quantity * price)


@dataclass(frozen=True)
class Product(AuditedRecord):
    kind: ClassVar[RecordKind] = RecordKind.PRODUCT

    name: str
    last_price: Decimal
    usage_count: int = 0


@dataclass(frozen=True)
class Settings(AuditedRecord):
    """Shop profile plus the bill serial counter (singleton)."""

    kind: ClassVar[RecordKind] = RecordKind.SETTINGS

    shop_name: str
    shop_address: str
    admin_phone: str
    last_bill_serial: int
