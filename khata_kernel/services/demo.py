"""Sample records for a fresh install, created through the regular commands."""

from __future__ import annotations

from decimal import Decimal

from khata_kernel.domain.clock import Clock
from khata_kernel.domain.records import Actor, TransactionType
from khata_kernel.domain.sequencer import BillLine
from khata_kernel.logging_config import get_logger
from khata_kernel.services.billing_service import BillingService
from khata_kernel.services.party_service import PartyService
from khata_kernel.services.store import KhataStore
from khata_kernel.services.transaction_service import TransactionService
from khata_kernel.utils.ids import IdGenerator

logger = get_logger("services.demo")


def load_demo_data(
    store: KhataStore,
    actor: Actor,
    *,
    clock: Clock,
    ids: IdGenerator,
    billing: BillingService | None = None,
) -> None:
    """
    Add one customer, one company and one bill.

    The bill is issued to the sample customer, so it also records their
    debit; a matching cash payment then settles the customer's balance.
    """
    parties = PartyService(store, clock, ids)
    transactions = TransactionService(store, clock, ids)
    billing = billing or BillingService(store, clock, ids)

    customer = parties.add_customer(
        "Sample Customer",
        "0300-1234567",
        actor,
        address="Main Market",
    )
    company = parties.add_company(
        "Sample Company",
        "021-9876543",
        actor,
        address="Industrial Area",
    )
    generation = billing.generate_bill(
        customer.name,
        [
            BillLine("Radiator Core", Decimal("1"), Decimal("1200")),
            BillLine("Cooling Fan", Decimal("1"), Decimal("300")),
        ],
        actor,
    )
    transactions.record_customer_transaction(
        customer.id,
        actor,
        amount=generation.bill.total_amount,
        type=TransactionType.CREDIT,
        payment_mode="Cash",
        bill_id=generation.serial_no,
        purchase_description="Payment received",
    )
    transactions.record_company_transaction(
        company.id,
        actor,
        amount=Decimal("2500"),
        type=TransactionType.DEBIT,
        payment_mode="Bank Transfer",
        purchase_description="Radiator cores",
    )
    logger.info("demo_data_loaded", extra={"serial_no": generation.serial_no})
