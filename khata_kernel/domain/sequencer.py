"""
Sequencer -- Bill serial allocation and bill generation.

Responsibility:
    Turns a customer name and a list of bill lines into a Bill, its
    BillItems, an optional debit Transaction for a known customer, and
    the Settings record with its serial counter advanced. Also edits a
    single BillItem, recomputing its amount.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Called by services.billing_service, which commits every record of a
    BillGeneration in one store swap.

Invariants enforced:
    - Serial monotonicity: the next serial is always
      ``settings.last_bill_serial + 1``. The counter in Settings is the
      sole source of truth; the highest existing bill is never scanned to
      derive it.
    - All-or-nothing: every input is validated before any record is
      built, so a rejected request produces nothing.
    - ``Bill.total_amount == sum(item.amount)`` at creation.

Failure modes:
    - MissingFieldError: blank customer name, product name, quantity or
      price.
    - InvalidValueError: a quantity or price that is not a number.
    - EmptyBillError: no items.
    - NonPositiveValueError: an item with quantity or price <= 0.
    - MissingActorError: no actor.

Audit relevance:
    The bill, each item, the transaction and the settings counter each get
    their own history entry, attributed to the same actor and timestamp.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from khata_kernel.domain.audit import (
    create_record,
    record_change,
    require_actor,
    snapshot,
    snapshot_fields,
)
from khata_kernel.domain.clock import Clock
from khata_kernel.domain.records import (
    Actor,
    Bill,
    BillItem,
    Customer,
    HistoryAction,
    Settings,
    Transaction,
    TransactionType,
)
from khata_kernel.domain.values import ZERO, parse_decimal
from khata_kernel.exceptions import (
    EmptyBillError,
    MissingFieldError,
    NonPositiveValueError,
)
from khata_kernel.utils.ids import (
    BILL_ITEM_PREFIX,
    BILL_PREFIX,
    CUSTOMER_TRANSACTION_PREFIX,
    IdGenerator,
)

DEFAULT_SERIAL_PREFIX = "AMR"
DEFAULT_BILL_PAYMENT_MODE = "Bill"

_EDITABLE_ITEM_FIELDS = ("product_name", "quantity", "price", "amount")


def format_serial(number: int, prefix: str = DEFAULT_SERIAL_PREFIX) -> str:
    """``8001`` -> ``AMR-8001``."""
    return f"{prefix}-{number}"


def parse_serial(serial_no: str, prefix: str = DEFAULT_SERIAL_PREFIX) -> int:
    """
    ``AMR-8001`` -> ``8001``.

    Raises:
        ValueError: If ``serial_no`` is not ``<prefix>-<digits>``.
    """
    head, sep, tail = serial_no.strip().rpartition("-")
    if not sep or head != prefix or not tail.isdigit():
        raise ValueError(f"Not a {prefix} bill serial: {serial_no!r}")
    return int(tail)


@dataclass(frozen=True)
class BillLine:
    """One requested line of a bill, before it becomes a BillItem."""

    product_name: str
    quantity: Decimal
    price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "quantity", parse_decimal(self.quantity, "quantity", "bill item")
        )
        object.__setattr__(self, "price", parse_decimal(self.price, "price", "bill item"))

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.price


@dataclass(frozen=True)
class BillGeneration:
    """Everything one bill generation produces, committed together."""

    bill: Bill
    bill_items: tuple[BillItem, ...]
    transaction: Transaction | None
    settings: Settings

    @property
    def serial_no(self) -> str:
        return self.bill.serial_no


def match_customer(customers: Iterable[Customer], name: str) -> Customer | None:
    """First customer whose name equals ``name`` ignoring case and outer spaces."""
    wanted = name.strip().casefold()
    for customer in customers:
        if customer.name.strip().casefold() == wanted:
            return customer
    return None


def validate_bill_request(customer_name: str | None, items: Sequence[BillLine]) -> str:
    """
    Check a bill request before anything is built.

    Returns:
        The customer name with outer whitespace removed.
    """
    name = (customer_name or "").strip()
    if not name:
        raise MissingFieldError("customer_name", "bill")
    if not items:
        raise EmptyBillError(name)
    for item in items:
        if not item.product_name or not item.product_name.strip():
            raise MissingFieldError("product_name", "bill item")
        if item.quantity <= 0:
            raise NonPositiveValueError("quantity", item.quantity)
        if item.price <= 0:
            raise NonPositiveValueError("price", item.price)
    return name


def generate_bill(
    customer_name: str,
    items: Sequence[BillLine],
    settings: Settings,
    actor: Actor,
    customers: Iterable[Customer],
    *,
    clock: Clock,
    ids: IdGenerator,
    serial_prefix: str = DEFAULT_SERIAL_PREFIX,
    payment_mode: str = DEFAULT_BILL_PAYMENT_MODE,
) -> BillGeneration:
    """
    Issue the next bill.

    Preconditions:
        - ``customer_name`` is not blank and ``items`` is not empty.
        - Every item has a product name, ``quantity > 0`` and ``price > 0``.

    Postconditions:
        - ``bill.serial_no == format_serial(settings.last_bill_serial + 1)``
        - ``result.settings.last_bill_serial == settings.last_bill_serial + 1``
        - One BillItem per line with ``amount == quantity * price`` and
          ``bill_id == bill.id``.
        - If a customer's name matches, a DEBIT transaction of
          ``bill.total_amount`` whose ``bill_id`` is the bill's serial.
    """
    require_actor(actor, "generate bill")
    name = validate_bill_request(customer_name, items)

    serial = settings.last_bill_serial + 1
    serial_no = format_serial(serial, serial_prefix)
    total = sum((line.amount for line in items), ZERO)
    issued_at = clock.now()

    bill = create_record(
        Bill,
        record_id=ids.new_id(BILL_PREFIX),
        actor=actor,
        summary="Bill generated",
        clock=clock,
        serial_no=serial_no,
        customer_name=name,
        admin_phone=settings.admin_phone,
        date=issued_at,
        total_amount=total,
    )

    bill_items = tuple(
        create_record(
            BillItem,
            record_id=ids.new_id(BILL_ITEM_PREFIX),
            actor=actor,
            summary="Bill item added",
            clock=clock,
            bill_id=bill.id,
            product_name=line.product_name.strip(),
            quantity=line.quantity,
            price=line.price,
        )
        for line in items
    )

    transaction = None
    customer = match_customer(customers, name)
    if customer is not None:
        transaction = create_record(
            Transaction,
            record_id=ids.new_id(CUSTOMER_TRANSACTION_PREFIX),
            actor=actor,
            summary=f"Transaction recorded - debit of {total} for bill {serial_no}",
            clock=clock,
            customer_id=customer.id,
            date=issued_at,
            amount=total,
            type=TransactionType.DEBIT,
            payment_mode=payment_mode,
            bill_id=serial_no,
            quantity=sum((line.quantity for line in items), ZERO),
            purchase_description=", ".join(item.product_name for item in bill_items),
        )

    advanced = record_change(
        replace(settings, last_bill_serial=serial),
        HistoryAction.UPDATED,
        actor,
        f"Bill serial advanced to {serial_no}",
        snapshot(last_bill_serial=settings.last_bill_serial),
        snapshot(last_bill_serial=serial),
        clock=clock,
    )

    return BillGeneration(
        bill=bill,
        bill_items=bill_items,
        transaction=transaction,
        settings=advanced,
    )


def edit_bill_item(
    item: BillItem,
    actor: Actor,
    *,
    clock: Clock,
    product_name: str | None = None,
    quantity: Decimal | int | str | None = None,
    price: Decimal | int | str | None = None,
) -> BillItem:
    """
    Edit a bill item's product, quantity or price.

    ``amount`` is recomputed from the new quantity and price; the owning
    bill's ``total_amount`` is left as issued.
    """
    require_actor(actor, "update bill_item")
    changes: dict[str, object] = {}
    if product_name is not None:
        if not product_name.strip():
            raise MissingFieldError("product_name", "bill item")
        changes["product_name"] = product_name.strip()
    if quantity is not None:
        new_quantity = parse_decimal(quantity, "quantity", "bill item")
        if new_quantity <= 0:
            raise NonPositiveValueError("quantity", new_quantity)
        changes["quantity"] = new_quantity
    if price is not None:
        new_price = parse_decimal(price, "price", "bill item")
        if new_price <= 0:
            raise NonPositiveValueError("price", new_price)
        changes["price"] = new_price

    updated = replace(item, **changes)
    return record_change(
        updated,
        HistoryAction.UPDATED,
        actor,
        "Bill item updated",
        snapshot_fields(item, _EDITABLE_ITEM_FIELDS),
        snapshot_fields(updated, _EDITABLE_ITEM_FIELDS),
        clock=clock,
    )
