"""
Module: khata_kernel.selectors.history_selector
Responsibility: A record's audit trail, grouped by calendar day with the
    changed fields of each entry rendered for display.
Architecture position: Kernel > Selectors.
"""

from dataclasses import dataclass
from datetime import date

from khata_kernel.domain.audit import (
    DEFAULT_CURRENCY_SYMBOL,
    FieldChange,
    changed_fields,
    group_by_day,
)
from khata_kernel.domain.records import HistoryEntry, RecordKind
from khata_kernel.selectors.base import BaseSelector
from khata_kernel.services.store import KhataStore


@dataclass(frozen=True)
class TimelineEntry:
    entry: HistoryEntry
    changes: tuple[FieldChange, ...]


@dataclass(frozen=True)
class TimelineDay:
    day: date
    label: str
    entries: tuple[TimelineEntry, ...]


class HistorySelector(BaseSelector):
    def __init__(self, store: KhataStore, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL):
        super().__init__(store)
        self.currency_symbol = currency_symbol

    def history_for(self, kind: RecordKind | str, record_id: str) -> tuple[HistoryEntry, ...]:
        """Newest-first history of one record."""
        return self.state.get(RecordKind(kind), record_id).history

    def timeline(self, kind: RecordKind | str, record_id: str) -> tuple[TimelineDay, ...]:
        return tuple(
            TimelineDay(
                day=day.day,
                label=day.label,
                entries=tuple(
                    TimelineEntry(entry, changed_fields(entry, self.currency_symbol))
                    for entry in day.entries
                ),
            )
            for day in group_by_day(self.history_for(kind, record_id))
        )
