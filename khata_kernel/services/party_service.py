"""
PartyService -- Customers and companies.

Responsibility:
    Adds, edits and deletes the two kinds of party a transaction can
    belong to. Edits are full replacements of the editable fields and are
    recorded with before/after snapshots of those fields.

Architecture position:
    Kernel > Services -- imperative shell, owns the store commit.

Invariants enforced:
    - Name and phone (contact number for a company) are required.
    - A party's transactions are left in place when the party is deleted;
      they stay in their collection as orphans and never count toward any
      existing party's balance.

Failure modes:
    - MissingFieldError: blank name or phone.
    - RecordNotFoundError: unknown customer or company id.
    - MissingActorError: no actor.
"""

from __future__ import annotations

from dataclasses import replace

from khata_kernel.domain.audit import (
    create_record,
    record_change,
    require_actor,
    snapshot_fields,
)
from khata_kernel.domain.ledger import belongs_to
from khata_kernel.domain.records import (
    Actor,
    Company,
    Customer,
    HistoryAction,
    RecordKind,
)
from khata_kernel.domain.sequencer import match_customer
from khata_kernel.domain.state import remove_where, replace_record
from khata_kernel.exceptions import MissingFieldError
from khata_kernel.logging_config import get_logger
from khata_kernel.services.base import BaseService
from khata_kernel.utils.ids import COMPANY_PREFIX, CUSTOMER_PREFIX

logger = get_logger("services.party")

CUSTOMER_FIELDS = ("name", "phone", "address", "nic_number")
COMPANY_FIELDS = ("name", "contact_number", "address")


def _required(value: str | None, field: str, record_kind: str) -> str:
    text = (value or "").strip()
    if not text:
        raise MissingFieldError(field, record_kind)
    return text


def _optional(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


class PartyService(BaseService):
    """Commands over customers and companies."""

    _logger = logger

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def get_customer(self, customer_id: str) -> Customer:
        return self.store.state.get(RecordKind.CUSTOMER, customer_id)

    def find_customer_by_name(self, name: str) -> Customer | None:
        """Case-insensitive exact match, the same rule bill generation uses."""
        return match_customer(self.store.state.customers, name)

    def add_customer(
        self,
        name: str,
        phone: str,
        actor: Actor,
        *,
        address: str | None = None,
        nic_number: str | None = None,
    ) -> Customer:
        with self._command("add_customer", actor):
            require_actor(actor, "create customer")
            customer = create_record(
                Customer,
                record_id=self._ids.new_id(CUSTOMER_PREFIX),
                actor=actor,
                summary="Customer added",
                clock=self._clock,
                name=_required(name, "name", "customer"),
                phone=_required(phone, "phone", "customer"),
                address=_optional(address),
                nic_number=_optional(nic_number),
            )
            state = self.store.state
            self.store.commit(replace(state, customers=state.customers + (customer,)))

        logger.info("customer_added", extra={"customer_id": customer.id})
        return customer

    def update_customer(
        self,
        customer_id: str,
        actor: Actor,
        *,
        name: str,
        phone: str,
        address: str | None = None,
        nic_number: str | None = None,
    ) -> Customer:
        """
        Replace the customer's editable fields.

        The history entry carries snapshots of all four editable fields,
        changed or not; only the changed ones are shown when rendered.
        """
        with self._command("update_customer", actor, customer_id):
            require_actor(actor, "update customer")
            current = self.get_customer(customer_id)
            edited = replace(
                current,
                name=_required(name, "name", "customer"),
                phone=_required(phone, "phone", "customer"),
                address=_optional(address),
                nic_number=_optional(nic_number),
            )
            updated = record_change(
                edited,
                HistoryAction.UPDATED,
                actor,
                "Customer details updated",
                snapshot_fields(current, CUSTOMER_FIELDS),
                snapshot_fields(edited, CUSTOMER_FIELDS),
                clock=self._clock,
            )
            state = self.store.state
            self.store.commit(
                replace(state, customers=replace_record(state.customers, updated))
            )

        logger.info("customer_updated", extra={"customer_id": customer_id})
        return updated

    def delete_customer(self, customer_id: str, actor: Actor) -> Customer:
        """
        Remove the customer from the collection.

        Returns:
            The removed record with its final ``deleted`` history entry.
        """
        with self._command("delete_customer", actor, customer_id):
            require_actor(actor, "delete customer")
            current = self.get_customer(customer_id)
            removed = record_change(
                current,
                HistoryAction.DELETED,
                actor,
                f"Customer {current.name} deleted",
                clock=self._clock,
            )
            state = self.store.state
            self.store.commit(
                replace(
                    state,
                    customers=remove_where(state.customers, lambda c: c.id == customer_id),
                )
            )

        orphaned = sum(
            1 for t in self.store.state.customer_transactions if belongs_to(t, customer_id)
        )
        logger.info(
            "customer_deleted",
            extra={"customer_id": customer_id, "orphaned_count": orphaned},
        )
        return removed

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    def get_company(self, company_id: str) -> Company:
        return self.store.state.get(RecordKind.COMPANY, company_id)

    def add_company(
        self,
        name: str,
        contact_number: str,
        actor: Actor,
        *,
        address: str | None = None,
    ) -> Company:
        with self._command("add_company", actor):
            require_actor(actor, "create company")
            company = create_record(
                Company,
                record_id=self._ids.new_id(COMPANY_PREFIX),
                actor=actor,
                summary="Company added",
                clock=self._clock,
                name=_required(name, "name", "company"),
                contact_number=_required(contact_number, "contact_number", "company"),
                address=_optional(address),
            )
            state = self.store.state
            self.store.commit(replace(state, companies=state.companies + (company,)))

        logger.info("company_added", extra={"company_id": company.id})
        return company

    def update_company(
        self,
        company_id: str,
        actor: Actor,
        *,
        name: str,
        contact_number: str,
        address: str | None = None,
    ) -> Company:
        with self._command("update_company", actor, company_id):
            require_actor(actor, "update company")
            current = self.get_company(company_id)
            edited = replace(
                current,
                name=_required(name, "name", "company"),
                contact_number=_required(contact_number, "contact_number", "company"),
                address=_optional(address),
            )
            updated = record_change(
                edited,
                HistoryAction.UPDATED,
                actor,
                "Company details updated",
                snapshot_fields(current, COMPANY_FIELDS),
                snapshot_fields(edited, COMPANY_FIELDS),
                clock=self._clock,
            )
            state = self.store.state
            self.store.commit(
                replace(state, companies=replace_record(state.companies, updated))
            )

        logger.info("company_updated", extra={"company_id": company_id})
        return updated

    def delete_company(self, company_id: str, actor: Actor) -> Company:
        with self._command("delete_company", actor, company_id):
            require_actor(actor, "delete company")
            current = self.get_company(company_id)
            removed = record_change(
                current,
                HistoryAction.DELETED,
                actor,
                f"Company {current.name} deleted",
                clock=self._clock,
            )
            state = self.store.state
            self.store.commit(
                replace(
                    state,
                    companies=remove_where(state.companies, lambda c: c.id == company_id),
                )
            )

        orphaned = sum(
            1 for t in self.store.state.company_transactions if belongs_to(t, company_id)
        )
        logger.info(
            "company_deleted",
            extra={"company_id": company_id, "orphaned_count": orphaned},
        )
        return removed
