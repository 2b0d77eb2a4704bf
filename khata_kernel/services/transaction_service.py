"""
TransactionService -- Credits and debits against customers and companies.

Responsibility:
    Records, edits and bulk-clears the transactions that balances are
    derived from. The service never stores a balance; it only appends to
    or replaces records in the owner's transaction collection.

Architecture position:
    Kernel > Services -- imperative shell, owns the store commit.

Invariants enforced:
    - Single owner: every transaction references exactly one existing
      customer or company at creation, and an edit cannot move it.
    - ``amount > 0``; direction is carried by ``type``.
    - A blank bill reference is replaced with a generated ``ref-`` id so
      every transaction carries one.
    - Transactions are never deleted one at a time; ``clear_records``
      removes all of one owner's transactions and records that on the
      owner's history.

Failure modes:
    - MissingFieldError: amount or payment mode missing.
    - NonPositiveValueError: amount or quantity <= 0.
    - InvalidValueError: a date that is not a timezone-aware datetime,
      or an amount that is not a number.
    - RecordNotFoundError: unknown owner or transaction id.
    - MissingActorError: no actor.

Audit relevance:
    Every edit records snapshots of all editable fields. Clearing records
    snapshots the owner's transaction count and balance before and after.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from khata_kernel.domain.audit import (
    create_record,
    record_change,
    require_actor,
    snapshot,
    snapshot_fields,
)
from khata_kernel.domain.ledger import belongs_to, summarize
from khata_kernel.domain.records import (
    Actor,
    AuditedRecord,
    HistoryAction,
    RecordKind,
    Transaction,
    TransactionType,
)
from khata_kernel.domain.state import KhataState, remove_where, replace_record
from khata_kernel.domain.values import ZERO, parse_decimal
from khata_kernel.exceptions import (
    InvalidValueError,
    MissingFieldError,
    NonPositiveValueError,
)
from khata_kernel.logging_config import get_logger
from khata_kernel.services.base import BaseService
from khata_kernel.utils.ids import (
    BILL_REFERENCE_PREFIX,
    COMPANY_TRANSACTION_PREFIX,
    CUSTOMER_TRANSACTION_PREFIX,
)

logger = get_logger("services.transaction")

TRANSACTION_FIELDS = (
    "date",
    "amount",
    "type",
    "payment_mode",
    "bill_id",
    "quantity",
    "purchase_description",
    "additional_notes",
)

_OWNER_COLLECTIONS = {
    RecordKind.CUSTOMER: ("customers", "customer_transactions"),
    RecordKind.COMPANY: ("companies", "company_transactions"),
}


def _positive(value: Decimal | int | str | None, field: str) -> Decimal:
    amount = parse_decimal(value, field, "transaction")
    if amount <= 0:
        raise NonPositiveValueError(field, amount)
    return amount


def _aware(value: object) -> datetime:
    if not isinstance(value, datetime):
        raise InvalidValueError("date", value, "expected a datetime")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidValueError("date", value, "timezone required")
    return value


def _text(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


class TransactionService(BaseService):
    """Commands over customer and company transactions."""

    _logger = logger

    def record_customer_transaction(
        self,
        customer_id: str,
        actor: Actor,
        *,
        amount: Decimal | int | str,
        type: TransactionType | str,
        payment_mode: str,
        date: datetime | None = None,
        bill_id: str | None = None,
        quantity: Decimal | int | str = 1,
        purchase_description: str | None = None,
        additional_notes: str | None = None,
    ) -> Transaction:
        with self._command("record_customer_transaction", actor, customer_id):
            return self._record(
                RecordKind.CUSTOMER,
                customer_id,
                actor,
                amount=amount,
                type=type,
                payment_mode=payment_mode,
                date=date,
                bill_id=bill_id,
                quantity=quantity,
                purchase_description=purchase_description,
                additional_notes=additional_notes,
            )

    def record_company_transaction(
        self,
        company_id: str,
        actor: Actor,
        *,
        amount: Decimal | int | str,
        type: TransactionType | str,
        payment_mode: str,
        date: datetime | None = None,
        bill_id: str | None = None,
        quantity: Decimal | int | str = 1,
        purchase_description: str | None = None,
        additional_notes: str | None = None,
    ) -> Transaction:
        with self._command("record_company_transaction", actor, company_id):
            return self._record(
                RecordKind.COMPANY,
                company_id,
                actor,
                amount=amount,
                type=type,
                payment_mode=payment_mode,
                date=date,
                bill_id=bill_id,
                quantity=quantity,
                purchase_description=purchase_description,
                additional_notes=additional_notes,
            )

    def _record(
        self,
        owner_kind: RecordKind,
        owner_id: str,
        actor: Actor,
        *,
        amount,
        type,
        payment_mode,
        date,
        bill_id,
        quantity,
        purchase_description,
        additional_notes,
    ) -> Transaction:
        require_actor(actor, f"create {owner_kind.value} transaction")
        state = self.store.state
        state.get(owner_kind, owner_id)

        value = _positive(amount, "amount")
        mode = _text(payment_mode)
        if mode is None:
            raise MissingFieldError("payment_mode", "transaction")
        kind = TransactionType(type)
        reference = _text(bill_id) or self._ids.new_id(BILL_REFERENCE_PREFIX)

        if owner_kind is RecordKind.CUSTOMER:
            prefix, owner = CUSTOMER_TRANSACTION_PREFIX, {"customer_id": owner_id}
        else:
            prefix, owner = COMPANY_TRANSACTION_PREFIX, {"company_id": owner_id}

        transaction = create_record(
            Transaction,
            record_id=self._ids.new_id(prefix),
            actor=actor,
            summary=f"Transaction recorded - {kind.value} of {value}",
            clock=self._clock,
            date=self._clock.now() if date is None else _aware(date),
            amount=value,
            type=kind,
            payment_mode=mode,
            bill_id=reference,
            quantity=_positive(quantity, "quantity"),
            purchase_description=_text(purchase_description),
            additional_notes=_text(additional_notes),
            **owner,
        )
        self.store.commit(state.with_transaction(transaction))

        logger.info(
            "transaction_recorded",
            extra={
                "transaction_id": transaction.id,
                "owner_id": owner_id,
                "owner_kind": owner_kind,
                "transaction_type": kind,
                "amount": value,
            },
        )
        return transaction

    def update_transaction(
        self,
        transaction_id: str,
        actor: Actor,
        *,
        date: datetime,
        amount: Decimal | int | str,
        type: TransactionType | str,
        payment_mode: str,
        bill_id: str,
        quantity: Decimal | int | str = 1,
        purchase_description: str | None = None,
        additional_notes: str | None = None,
    ) -> Transaction:
        """
        Replace every editable field of a transaction.

        The owner is fixed; a transaction cannot be moved to another
        customer or company.
        """
        with self._command("update_transaction", actor, transaction_id):
            require_actor(actor, "update transaction")
            state = self.store.state
            current: Transaction = state.get(RecordKind.TRANSACTION, transaction_id)

            if date is None:
                raise MissingFieldError("date", "transaction")
            mode = _text(payment_mode)
            if mode is None:
                raise MissingFieldError("payment_mode", "transaction")
            edited = replace(
                current,
                date=_aware(date),
                amount=_positive(amount, "amount"),
                type=TransactionType(type),
                payment_mode=mode,
                bill_id=_text(bill_id) or current.bill_id,
                quantity=_positive(quantity, "quantity"),
                purchase_description=_text(purchase_description),
                additional_notes=_text(additional_notes),
            )
            updated = record_change(
                edited,
                HistoryAction.UPDATED,
                actor,
                "Transaction updated",
                snapshot_fields(current, TRANSACTION_FIELDS),
                snapshot_fields(edited, TRANSACTION_FIELDS),
                clock=self._clock,
            )
            self.store.commit(state.with_transaction(updated))

        logger.info(
            "transaction_updated",
            extra={"transaction_id": transaction_id, "owner_id": updated.owner_id},
        )
        return updated

    def clear_records(self, owner_kind: RecordKind, owner_id: str, actor: Actor) -> int:
        """
        Remove every transaction of one customer or company.

        The owner stays and gets an ``updated`` history entry whose
        snapshots show the transaction count and balance dropping to zero.

        Returns:
            The number of transactions removed.
        """
        owner_kind = RecordKind(owner_kind)
        with self._command("clear_records", actor, owner_id):
            require_actor(actor, f"clear {owner_kind.value} records")
            if owner_kind not in _OWNER_COLLECTIONS:
                raise ValueError(
                    f"Transactions belong to customers or companies, not {owner_kind.value}"
                )
            parties_attr, transactions_attr = _OWNER_COLLECTIONS[owner_kind]
            state = self.store.state
            owner: AuditedRecord = state.get(owner_kind, owner_id)
            transactions = state.transactions_of(owner_kind)
            before = summarize(owner_id, transactions)

            updated_owner = record_change(
                owner,
                HistoryAction.UPDATED,
                actor,
                f"Cleared {before.transaction_count} transaction records",
                snapshot(transactions=before.transaction_count, balance=before.balance),
                snapshot(transactions=0, balance=ZERO),
                clock=self._clock,
            )
            self.store.commit(self._without_owner_transactions(
                state, parties_attr, transactions_attr, updated_owner
            ))

        logger.info(
            "transactions_cleared",
            extra={
                "owner_id": owner_id,
                "owner_kind": owner_kind,
                "removed_count": before.transaction_count,
            },
        )
        return before.transaction_count

    @staticmethod
    def _without_owner_transactions(
        state: KhataState,
        parties_attr: str,
        transactions_attr: str,
        owner: AuditedRecord,
    ) -> KhataState:
        return replace(
            state,
            **{
                parties_attr: replace_record(getattr(state, parties_attr), owner),
                transactions_attr: remove_where(
                    getattr(state, transactions_attr),
                    lambda t: belongs_to(t, owner.id),
                ),
            },
        )
