"""
Values -- Immutable value objects for amounts and history snapshots.

Responsibility:
    Decimal coercion for every amount, quantity and price that enters the
    kernel, and the tagged ``DiffValue`` variants stored in history
    snapshots (``old_values`` / ``new_values``).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module.

Invariants enforced:
    - Amounts are Decimal, never float. Floats are rejected at the
      boundary instead of being silently rounded.
    - Snapshot values are one of CurrencyValue, NumberValue, TextValue,
      DateValue or NoValue, so the history renderer matches on the
      variant instead of inspecting runtime types.

Failure modes:
    - TypeError when a float or bool is offered as an amount.
    - ValueError when a string does not parse as a finite Decimal.
    - MissingFieldError / InvalidValueError from ``parse_decimal``, the
      entry point for user-supplied numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union

from khata_kernel.exceptions import InvalidValueError, MissingFieldError

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str, field: str = "amount") -> Decimal:
    """
    Coerce an amount to Decimal.

    Preconditions:
        - ``value`` is a Decimal, an int, or a numeric string.

    Raises:
        TypeError: For floats, bools and other types.
        ValueError: For unparsable or non-finite strings.
    """
    if isinstance(value, bool):
        raise TypeError(f"{field} must be Decimal, int or str, got bool")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid {field}: {value!r}") from e
    else:
        raise TypeError(
            f"{field} must be Decimal, int or str, got {type(value).__name__}"
        )
    if not result.is_finite():
        raise ValueError(f"Invalid {field}: {value!r}")
    return result


def parse_decimal(
    value: Decimal | int | str | None, field: str, record_kind: str
) -> Decimal:
    """
    Coerce user input for a required numeric field.

    Raises:
        MissingFieldError: For None or a blank string.
        InvalidValueError: For anything ``to_decimal`` rejects.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingFieldError(field, record_kind)
    try:
        return to_decimal(value, field)
    except (TypeError, ValueError) as e:
        raise InvalidValueError(field, value, "not a number") from e


# ---------------------------------------------------------------------------
# Tagged snapshot values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CurrencyValue:
    """A monetary amount, rendered with the shop's currency symbol."""

    amount: Decimal


@dataclass(frozen=True, slots=True)
class NumberValue:
    """A plain number (quantity, bill counter), rendered without currency."""

    number: Decimal


@dataclass(frozen=True, slots=True)
class TextValue:
    text: str


@dataclass(frozen=True, slots=True)
class DateValue:
    when: datetime | date


@dataclass(frozen=True, slots=True)
class NoValue:
    """An optional field that was empty."""


DiffValue = Union[CurrencyValue, NumberValue, TextValue, DateValue, NoValue]

_DIFF_TYPES = (CurrencyValue, NumberValue, TextValue, DateValue, NoValue)


def tag_value(value: Any) -> DiffValue:
    """
    Wrap a plain field value in its DiffValue variant.

    Decimal -> CurrencyValue, int -> NumberValue, str/Enum -> TextValue,
    date/datetime -> DateValue, None or "" -> NoValue. Values that are
    already tagged pass through unchanged.

    Raises:
        TypeError: For floats, bools and unsupported types.
    """
    if isinstance(value, _DIFF_TYPES):
        return value
    if value is None or value == "":
        return NoValue()
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Cannot snapshot {type(value).__name__} value {value!r}")
    if isinstance(value, Enum):
        return TextValue(str(value.value))
    if isinstance(value, Decimal):
        return CurrencyValue(value)
    if isinstance(value, int):
        return NumberValue(Decimal(value))
    if isinstance(value, str):
        return TextValue(value)
    if isinstance(value, (datetime, date)):
        return DateValue(value)
    raise TypeError(f"Cannot snapshot {type(value).__name__} value {value!r}")
