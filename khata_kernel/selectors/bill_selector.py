"""
Module: khata_kernel.selectors.bill_selector
Responsibility: Read-only bill lookups and revenue figures.
Architecture position: Kernel > Selectors.

A transaction's ``bill_id`` is a bill reference, normally the serial
printed on the bill; ``bill_for_transaction`` resolves it by serial.
"""

from decimal import Decimal
from typing import Any

from khata_kernel.domain.records import Bill, BillItem, BillStatus, RecordKind, Transaction
from khata_kernel.domain.values import ZERO
from khata_kernel.selectors.base import BaseSelector


class BillSelector(BaseSelector):
    def get_bill(self, bill_id: str) -> Bill:
        return self.state.get(RecordKind.BILL, bill_id)

    def bill_by_serial(self, serial_no: str) -> Bill | None:
        wanted = serial_no.strip()
        for bill in self.state.bills:
            if bill.serial_no == wanted:
                return bill
        return None

    def items_for(self, bill_id: str) -> tuple[BillItem, ...]:
        return tuple(item for item in self.state.bill_items if item.bill_id == bill_id)

    def bill_for_transaction(self, transaction: Transaction) -> Bill | None:
        """The bill a transaction references, if its reference is a serial."""
        return self.bill_by_serial(transaction.bill_id)

    def bills_for_customer(self, customer_name: str) -> tuple[Bill, ...]:
        wanted = customer_name.strip().casefold()
        return tuple(b for b in self.state.bills if b.customer_name.casefold() == wanted)

    def total_revenue(self) -> Decimal:
        """Sum of ``total_amount`` over bills that are not cancelled."""
        return sum(
            (b.total_amount for b in self.state.bills if b.status is not BillStatus.CANCELLED),
            ZERO,
        )

    def bill_rows(self) -> list[dict[str, Any]]:
        """Newest bill first."""
        bills = sorted(self.state.bills, key=lambda b: (b.date, b.created_at), reverse=True)
        return [
            {
                "id": b.id,
                "serial_no": b.serial_no,
                "customer_name": b.customer_name,
                "date": b.date.date().isoformat(),
                "total_amount": b.total_amount,
                "status": b.status.value,
                "item_count": len(self.items_for(b.id)),
            }
            for b in bills
        ]
