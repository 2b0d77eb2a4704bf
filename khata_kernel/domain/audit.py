"""
Audit -- History recording and diff rendering.

Responsibility:
    ``record_change`` is the one place history entries are produced. It
    returns a copy of the record with the new entry prepended and
    ``updated_at`` / ``updated_by`` restamped. ``create_record`` builds a
    new record with its ``created`` entry. The rendering helpers turn
    snapshots into per-field before/after text for history views.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Called by domain.sequencer, domain.catalog and every service command,
    synchronously and once per mutated record.

Invariants enforced:
    - Append-only, newest-first history: the new entry is always index 0
      and existing entries are carried over untouched.
    - ``updated_at`` / ``updated_by`` change together with history.
    - Snapshot symmetry: old/new values both present or both absent,
      with identical keys.

Failure modes:
    - MissingEntityError when asked to record against ``None``.
    - MissingActorError when the actor is absent or blank.
    - SnapshotMismatchError for unpaired snapshots.

Audit relevance:
    ``len(record.history)`` equals the number of mutations applied to
    that record, because no command can change a record without going
    through ``record_change``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

from khata_kernel.domain.clock import Clock
from khata_kernel.domain.records import (
    Actor,
    AuditedRecord,
    HistoryAction,
    HistoryEntry,
)
from khata_kernel.domain.values import (
    CurrencyValue,
    DateValue,
    DiffValue,
    NoValue,
    NumberValue,
    TextValue,
    tag_value,
)
from khata_kernel.exceptions import (
    MissingActorError,
    MissingEntityError,
    SnapshotMismatchError,
)
from khata_kernel.logging_config import get_logger

logger = get_logger("domain.audit")

R = TypeVar("R", bound=AuditedRecord)

# Decimal fields that are counts, not money.
NUMERIC_FIELDS: frozenset[str] = frozenset({"quantity", "usage_count", "last_bill_serial"})

DEFAULT_CURRENCY_SYMBOL = "Rs"


def require_actor(actor: Actor | None, operation: str) -> Actor:
    """Return ``actor`` or raise MissingActorError if absent or blank."""
    if actor is None or not actor.user_id or not actor.user_name:
        raise MissingActorError(operation)
    return actor


def record_change(
    entity: R | None,
    action: HistoryAction | str,
    actor: Actor | None,
    summary: str,
    old_values: Mapping[str, Any] | None = None,
    new_values: Mapping[str, Any] | None = None,
    *,
    clock: Clock,
) -> R:
    """
    Append one history entry to ``entity`` and restamp it.

    Preconditions:
        - ``entity`` is a record (not None).
        - ``actor`` carries a non-empty id and name.
        - ``old_values`` and ``new_values`` are both None or both mappings
          with the same keys.

    Postconditions:
        - ``len(result.history) == len(entity.history) + 1``
        - ``result.history[0]`` is the new entry; ``result.history[1:]``
          is ``entity.history`` unchanged.
        - ``result.updated_at == clock.now()`` and
          ``result.updated_by == actor.user_id``.

    Returns:
        A new record; ``entity`` itself is untouched.
    """
    action = HistoryAction(action)
    if entity is None:
        raise MissingEntityError(action.value)
    require_actor(actor, f"{action.value} {entity.kind.value}")

    if (old_values is None) != (new_values is None):
        raise SnapshotMismatchError(
            sorted(old_values) if old_values is not None else None,
            sorted(new_values) if new_values is not None else None,
        )
    if old_values is not None and set(old_values) != set(new_values):
        raise SnapshotMismatchError(sorted(old_values), sorted(new_values))

    now = clock.now()
    entry = HistoryEntry(
        action=action,
        timestamp=now,
        user_id=actor.user_id,
        user_name=actor.user_name,
        changes=summary,
        old_values=old_values,
        new_values=new_values,
    )
    return replace(
        entity,
        history=(entry,) + entity.history,
        updated_at=now,
        updated_by=actor.user_id,
    )


def create_record(
    record_type: type[R],
    *,
    record_id: str,
    actor: Actor | None,
    summary: str,
    clock: Clock,
    **fields: Any,
) -> R:
    """Build a new record stamped by ``actor`` with its ``created`` entry."""
    actor = require_actor(actor, f"create {record_type.kind.value}")
    now = clock.now()
    record = record_type(
        id=record_id,
        created_at=now,
        updated_at=now,
        created_by=actor.user_id,
        updated_by=actor.user_id,
        history=(),
        **fields,
    )
    return record_change(record, HistoryAction.CREATED, actor, summary, clock=clock)


def snapshot(**fields: Any) -> dict[str, DiffValue]:
    """Tag keyword values for use as ``old_values`` / ``new_values``."""
    return {name: _tag_field(name, value) for name, value in fields.items()}


def snapshot_fields(record: AuditedRecord, names: Iterable[str]) -> dict[str, DiffValue]:
    """Snapshot selected attributes of ``record``."""
    return {name: _tag_field(name, getattr(record, name)) for name in names}


def _tag_field(name: str, value: Any) -> DiffValue:
    if name in NUMERIC_FIELDS and isinstance(value, (Decimal, int)) and not isinstance(value, bool):
        return NumberValue(Decimal(value))
    return tag_value(value)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldChange:
    """One changed field of a history entry, ready for display."""

    field: str
    label: str
    old_text: str
    new_text: str


@dataclass(frozen=True)
class HistoryDay:
    """History entries of one calendar day, newest first."""

    day: date
    label: str
    entries: tuple[HistoryEntry, ...]


def field_label(name: str) -> str:
    """``last_bill_serial`` -> ``Last bill serial``."""
    spaced = name.replace("_", " ")
    return spaced[:1].upper() + spaced[1:]


def render_value(value: DiffValue, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    match value:
        case CurrencyValue(amount=amount):
            return f"{currency_symbol} {amount:,.2f}"
        case NumberValue(number=number):
            if number == number.to_integral_value():
                return str(int(number))
            return f"{number.normalize():f}"
        case TextValue(text=text):
            return text or "N/A"
        case DateValue(when=when):
            return when.strftime("%Y-%m-%d")
        case NoValue():
            return "N/A"
    raise TypeError(f"Not a DiffValue: {value!r}")


def changed_fields(
    entry: HistoryEntry,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> tuple[FieldChange, ...]:
    """
    Per-field before/after text for the fields an entry actually changed.

    Fields are listed in ``new_values`` order; unchanged fields are
    skipped. A key missing from one side renders ``N/A`` there and is
    reported as a data-quality warning.
    """
    if not entry.has_snapshots:
        return ()
    old_values, new_values = entry.old_values, entry.new_values

    unpaired = set(old_values) ^ set(new_values)
    if unpaired:
        logger.warning(
            "history_snapshot_mismatch",
            extra={
                "unpaired_fields": sorted(unpaired),
                "history_action": entry.action.value,
                "history_timestamp": entry.timestamp,
            },
        )

    changes = []
    for name, new_value in new_values.items():
        old_value = old_values.get(name, NoValue())
        if old_value == new_value:
            continue
        changes.append(
            FieldChange(
                field=name,
                label=field_label(name),
                old_text=render_value(old_value, currency_symbol),
                new_text=render_value(new_value, currency_symbol),
            )
        )
    return tuple(changes)


def day_label(day: date) -> str:
    """``date(2025, 3, 5)`` -> ``March 5, 2025``."""
    return f"{day:%B} {day.day}, {day.year}"


def group_by_day(history: Iterable[HistoryEntry]) -> tuple[HistoryDay, ...]:
    """Group newest-first history by calendar day, keeping the order."""
    days: dict[date, list[HistoryEntry]] = {}
    for entry in history:
        days.setdefault(entry.timestamp.date(), []).append(entry)
    return tuple(
        HistoryDay(day=day, label=day_label(day), entries=tuple(entries))
        for day, entries in days.items()
    )
