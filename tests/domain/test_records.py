"""Record construction and value coercion."""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

import pytest

from khata_kernel.domain.audit import create_record
from khata_kernel.domain.records import Actor, BillItem, HistoryAction, HistoryEntry, User
from khata_kernel.domain.sequencer import BillLine
from khata_kernel.domain.values import (
    CurrencyValue,
    DateValue,
    NoValue,
    NumberValue,
    TextValue,
    parse_decimal,
    tag_value,
    to_decimal,
)
from khata_kernel.exceptions import (
    InvalidValueError,
    MissingFieldError,
    NonPositiveValueError,
)


class TestToDecimal:
    def test_accepts_decimal_int_and_str(self):
        assert to_decimal(Decimal("1.5")) == Decimal("1.5")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(" 2.25 ") == Decimal("2.25")

    @pytest.mark.parametrize("value", [1.5, True, None, object()])
    def test_rejects_other_types(self, value):
        with pytest.raises(TypeError):
            to_decimal(value)

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", ""])
    def test_rejects_bad_strings(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


class TestTagValue:
    def test_variants(self):
        class Colour(Enum):
            RED = "red"

        assert tag_value(Decimal("5")) == CurrencyValue(Decimal("5"))
        assert tag_value(5) == NumberValue(Decimal("5"))
        assert tag_value("x") == TextValue("x")
        assert tag_value(Colour.RED) == TextValue("red")
        assert tag_value(date(2025, 3, 5)) == DateValue(date(2025, 3, 5))
        assert tag_value(None) == NoValue()
        assert tag_value("") == NoValue()
        assert tag_value(TextValue("y")) == TextValue("y")

    def test_rejects_float(self):
        with pytest.raises(TypeError):
            tag_value(2.0)


class TestBillItem:
    def _item(self, clock, actor, quantity, price):
        return create_record(
            BillItem,
            record_id="billitem-1",
            actor=actor,
            summary="Bill item added",
            clock=clock,
            bill_id="bill-1",
            product_name="Core",
            quantity=quantity,
            price=price,
        )

    def test_amount_is_computed(self, clock, actor):
        assert self._item(clock, actor, "2", "750").amount == Decimal("1500")

    def test_rejects_non_positive(self, clock, actor):
        with pytest.raises(NonPositiveValueError):
            self._item(clock, actor, "1", "0")


def test_bill_line_amount():
    assert BillLine("Core", 2, "750.50").amount == Decimal("1501.00")


def test_actor_from_user(clock, actor):
    user = create_record(
        User,
        record_id="user-9",
        actor=actor,
        summary="User registered",
        clock=clock,
        email="clerk@example.com",
        name="Clerk",
    )
    assert Actor.from_user(user) == Actor("user-9", "Clerk")


class TestParseDecimal:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        with pytest.raises(MissingFieldError) as exc_info:
            parse_decimal(value, "quantity", "bill item")
        assert exc_info.value.field == "quantity"

    @pytest.mark.parametrize("value", ["abc", 1.5, True, "Infinity"])
    def test_invalid(self, value):
        with pytest.raises(InvalidValueError):
            parse_decimal(value, "price", "bill item")

    def test_valid(self):
        assert parse_decimal(" 12.50 ", "price", "bill item") == Decimal("12.50")


class TestBillLineValidation:
    def test_missing_quantity(self):
        with pytest.raises(MissingFieldError):
            BillLine("Core", None, "5")

    def test_invalid_price(self):
        with pytest.raises(InvalidValueError):
            BillLine("Core", 1, "five")


def test_history_entries_are_hashable():
    when = datetime(2025, 3, 5, tzinfo=timezone.utc)
    entry = HistoryEntry(
        action=HistoryAction.UPDATED,
        timestamp=when,
        user_id="admin-001",
        user_name="Admin",
        changes="Customer details updated",
        old_values={"name": "A"},
        new_values={"name": "B"},
    )
    twin = HistoryEntry(
        HistoryAction.UPDATED, when, "admin-001", "Admin", "Customer details updated",
        {"name": "A"}, {"name": "B"},
    )
    assert entry == twin
    assert hash(entry) == hash(twin)
    assert len({entry, twin}) == 1
