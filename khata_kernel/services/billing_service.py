"""
BillingService -- Bill generation, item edits and bill status.

Responsibility:
    Issues bills through ``domain.sequencer.generate_bill``, updates the
    product catalogue from the billed lines, and commits the bill, its
    items, the optional customer debit, the advanced serial counter and
    the catalogue as one state swap.

Architecture position:
    Kernel > Services -- imperative shell, owns the store commit.

Invariants enforced:
    - Serial monotonicity: the counter in Settings is read and advanced
      in the same commit, so two bills never share a serial.
    - All-or-nothing: every record of a generation is committed together
      or none is.

Failure modes:
    - MissingFieldError / InvalidValueError / EmptyBillError /
      NonPositiveValueError: the request was rejected before any serial
      was consumed. A blank customer name is reported before any line
      is parsed.
    - RecordNotFoundError: unknown bill or bill item.
    - MissingActorError: no actor.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from decimal import Decimal

from khata_kernel.domain import catalog, sequencer
from khata_kernel.domain.audit import record_change, require_actor, snapshot
from khata_kernel.domain.clock import Clock
from khata_kernel.domain.records import (
    Actor,
    Bill,
    BillItem,
    BillStatus,
    HistoryAction,
    Product,
    RecordKind,
)
from khata_kernel.domain.sequencer import (
    DEFAULT_BILL_PAYMENT_MODE,
    DEFAULT_SERIAL_PREFIX,
    BillGeneration,
    BillLine,
)
from khata_kernel.domain.state import replace_record
from khata_kernel.exceptions import MissingFieldError
from khata_kernel.logging_config import get_logger
from khata_kernel.services.base import BaseService
from khata_kernel.services.store import KhataStore
from khata_kernel.utils.ids import IdGenerator

logger = get_logger("services.billing")

BillLineInput = BillLine | Mapping[str, object] | tuple[str, Decimal | int | str, Decimal | int | str]


def to_bill_line(line: BillLineInput) -> BillLine:
    """Accept a BillLine, a ``{product_name, quantity, price}`` mapping or a 3-tuple."""
    if isinstance(line, BillLine):
        return line
    if isinstance(line, Mapping):
        return BillLine(
            product_name=str(line.get("product_name") or ""),
            quantity=line.get("quantity"),
            price=line.get("price"),
        )
    product_name, quantity, price = line
    return BillLine(product_name=product_name or "", quantity=quantity, price=price)


class BillingService(BaseService):
    """Commands over bills, bill items and the serial counter."""

    _logger = logger

    def __init__(
        self,
        store: KhataStore,
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
        *,
        serial_prefix: str = DEFAULT_SERIAL_PREFIX,
        payment_mode: str = DEFAULT_BILL_PAYMENT_MODE,
    ):
        super().__init__(store, clock, ids)
        self.serial_prefix = serial_prefix
        self.payment_mode = payment_mode

    def generate_bill(
        self,
        customer_name: str,
        items: Iterable[BillLineInput],
        actor: Actor,
    ) -> BillGeneration:
        """
        Issue the next bill and commit everything it produces.

        Postconditions:
            - ``settings.last_bill_serial`` advanced by exactly one.
            - Bill, items, products, and a DEBIT transaction when the
              customer name matches a customer, all visible in the next
              state.
        """
        with self._command("generate_bill", actor):
            require_actor(actor, "generate bill")
            if not (customer_name or "").strip():
                raise MissingFieldError("customer_name", "bill")
            lines = [to_bill_line(item) for item in items]
            state = self.store.state
            generation = sequencer.generate_bill(
                customer_name,
                lines,
                state.settings,
                actor,
                state.customers,
                clock=self._clock,
                ids=self._ids,
                serial_prefix=self.serial_prefix,
                payment_mode=self.payment_mode,
            )
            products: tuple[Product, ...] = catalog.record_usage(
                state.products, lines, actor, clock=self._clock, ids=self._ids
            )

            next_state = replace(
                state,
                settings=generation.settings,
                bills=state.bills + (generation.bill,),
                bill_items=state.bill_items + generation.bill_items,
                products=products,
            )
            if generation.transaction is not None:
                next_state = next_state.with_transaction(generation.transaction)
            self.store.commit(next_state)

        logger.info(
            "bill_generated",
            extra={
                "serial_no": generation.serial_no,
                "bill_id": generation.bill.id,
                "total_amount": generation.bill.total_amount,
                "item_count": len(generation.bill_items),
                "customer_matched": generation.transaction is not None,
            },
        )
        return generation

    def edit_bill_item(
        self,
        item_id: str,
        actor: Actor,
        *,
        product_name: str | None = None,
        quantity: Decimal | int | str | None = None,
        price: Decimal | int | str | None = None,
    ) -> BillItem:
        """Edit one item; its amount is recomputed, the bill total is not."""
        with self._command("edit_bill_item", actor, item_id):
            state = self.store.state
            current: BillItem = state.get(RecordKind.BILL_ITEM, item_id)
            updated = sequencer.edit_bill_item(
                current,
                actor,
                clock=self._clock,
                product_name=product_name,
                quantity=quantity,
                price=price,
            )
            self.store.commit(
                replace(state, bill_items=replace_record(state.bill_items, updated))
            )

        logger.info(
            "bill_item_updated",
            extra={"bill_item_id": item_id, "bill_id": updated.bill_id, "amount": updated.amount},
        )
        return updated

    def change_bill_status(
        self,
        bill_id: str,
        status: BillStatus | str,
        actor: Actor,
    ) -> Bill:
        """
        Move a bill to ``status``.

        Setting the status a bill already has is a no-op and records no
        history.
        """
        status = BillStatus(status)
        with self._command("change_bill_status", actor, bill_id):
            require_actor(actor, "change bill status")
            state = self.store.state
            current: Bill = state.get(RecordKind.BILL, bill_id)
            if current.status is status:
                logger.debug(
                    "bill_status_unchanged",
                    extra={"bill_id": bill_id, "status": status},
                )
                return current

            updated = record_change(
                replace(current, status=status),
                HistoryAction.STATUS_CHANGED,
                actor,
                f"Bill {current.serial_no} marked {status.value}",
                snapshot(status=current.status),
                snapshot(status=status),
                clock=self._clock,
            )
            self.store.commit(replace(state, bills=replace_record(state.bills, updated)))

        logger.info(
            "bill_status_changed",
            extra={
                "bill_id": bill_id,
                "serial_no": updated.serial_no,
                "from_status": current.status,
                "to_status": status,
            },
        )
        return updated

    def bill_items_for(self, bill_id: str) -> tuple[BillItem, ...]:
        return tuple(item for item in self.store.state.bill_items if item.bill_id == bill_id)
