"""
Pure domain layer.

Records, balance derivation, history recording and bill sequencing with
NO dependencies on:
- Storage
- Time (a Clock is always passed in)
- Id generation (an IdGenerator is always passed in)
- I/O

All records are frozen; every operation returns new records.
"""

from khata_kernel.domain.audit import (
    FieldChange,
    HistoryDay,
    changed_fields,
    create_record,
    group_by_day,
    record_change,
    snapshot,
    snapshot_fields,
)
from khata_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from khata_kernel.domain.ledger import (
    BalanceTone,
    EntityBalance,
    StatementLine,
    balance_of,
    running_balances,
    summarize,
)
from khata_kernel.domain.records import (
    Actor,
    AuditedRecord,
    Bill,
    BillItem,
    BillStatus,
    Company,
    Customer,
    HistoryAction,
    HistoryEntry,
    Product,
    RecordKind,
    Settings,
    Transaction,
    TransactionType,
    User,
    UserRole,
)
from khata_kernel.domain.sequencer import (
    BillGeneration,
    BillLine,
    edit_bill_item,
    format_serial,
    generate_bill,
    parse_serial,
)
from khata_kernel.domain.state import KhataState
from khata_kernel.domain.values import (
    CurrencyValue,
    DateValue,
    DiffValue,
    NoValue,
    NumberValue,
    TextValue,
)

__all__ = [
    # Records
    "Actor",
    "AuditedRecord",
    "Bill",
    "BillItem",
    "BillStatus",
    "Company",
    "Customer",
    "HistoryAction",
    "HistoryEntry",
    "Product",
    "RecordKind",
    "Settings",
    "Transaction",
    "TransactionType",
    "User",
    "UserRole",
    "KhataState",
    # Snapshot values
    "CurrencyValue",
    "DateValue",
    "DiffValue",
    "NoValue",
    "NumberValue",
    "TextValue",
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Ledger
    "BalanceTone",
    "EntityBalance",
    "StatementLine",
    "balance_of",
    "running_balances",
    "summarize",
    # Audit
    "FieldChange",
    "HistoryDay",
    "changed_fields",
    "create_record",
    "group_by_day",
    "record_change",
    "snapshot",
    "snapshot_fields",
    # Sequencer
    "BillGeneration",
    "BillLine",
    "edit_bill_item",
    "format_serial",
    "generate_bill",
    "parse_serial",
]
