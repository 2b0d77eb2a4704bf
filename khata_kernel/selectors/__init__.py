"""Read-only selectors over the store."""

from khata_kernel.selectors.base import BaseSelector
from khata_kernel.selectors.bill_selector import BillSelector
from khata_kernel.selectors.history_selector import (
    HistorySelector,
    TimelineDay,
    TimelineEntry,
)
from khata_kernel.selectors.ledger_selector import LedgerSelector

__all__ = [
    "BaseSelector",
    "BillSelector",
    "HistorySelector",
    "LedgerSelector",
    "TimelineDay",
    "TimelineEntry",
]
