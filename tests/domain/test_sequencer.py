"""
Bill generation tests.

The next serial is always the Settings counter plus one; a rejected
request consumes nothing.
"""

from decimal import Decimal

import pytest

from khata_kernel.domain.audit import create_record
from khata_kernel.domain.records import (
    BillItem,
    Customer,
    HistoryAction,
    Settings,
    TransactionType,
)
from khata_kernel.domain.sequencer import (
    BillLine,
    edit_bill_item,
    format_serial,
    generate_bill,
    match_customer,
    parse_serial,
)
from khata_kernel.domain.values import NumberValue
from khata_kernel.exceptions import (
    EmptyBillError,
    MissingActorError,
    MissingFieldError,
    NonPositiveValueError,
)


@pytest.fixture
def shop_settings(clock, actor) -> Settings:
    return create_record(
        Settings,
        record_id="settings-1",
        actor=actor,
        summary="Shop settings initialized",
        clock=clock,
        shop_name="Al Mehran Radiator",
        shop_address="Main Road",
        admin_phone="0300-0000000",
        last_bill_serial=8000,
    )


@pytest.fixture
def alice(clock, actor) -> Customer:
    return create_record(
        Customer,
        record_id="cust-1",
        actor=actor,
        summary="Customer added",
        clock=clock,
        name="Alice",
        phone="0300-1111111",
    )


LINES = [
    BillLine("Radiator Core", Decimal("2"), Decimal("750")),
    BillLine("Cooling Fan", Decimal("1"), Decimal("500")),
]


class TestSerials:
    def test_format_and_parse(self):
        assert format_serial(8001) == "AMR-8001"
        assert parse_serial("AMR-8001") == 8001
        assert format_serial(1, "INV") == "INV-1"

    @pytest.mark.parametrize("bad", ["AMR8001", "XYZ-8001", "AMR-", "AMR-80a1", ""])
    def test_parse_rejects(self, bad):
        with pytest.raises(ValueError):
            parse_serial(bad)


class TestGenerateBill:
    def test_two_line_bill(self, shop_settings, actor, clock, ids):
        result = generate_bill(
            "Walk-in", LINES, shop_settings, actor, [], clock=clock, ids=ids
        )
        assert result.serial_no == "AMR-8001"
        assert result.bill.total_amount == Decimal("2000")
        assert result.settings.last_bill_serial == 8001
        assert [i.amount for i in result.bill_items] == [Decimal("1500"), Decimal("500")]
        assert all(i.bill_id == result.bill.id for i in result.bill_items)
        assert result.bill.admin_phone == "0300-0000000"
        assert result.transaction is None

    def test_settings_history_records_counter(self, shop_settings, actor, clock, ids):
        result = generate_bill("Walk-in", LINES, shop_settings, actor, [], clock=clock, ids=ids)
        entry = result.settings.history[0]
        assert entry.action is HistoryAction.UPDATED
        assert entry.old_values["last_bill_serial"] == NumberValue(Decimal("8000"))
        assert entry.new_values["last_bill_serial"] == NumberValue(Decimal("8001"))

    def test_consecutive_bills(self, shop_settings, actor, clock, ids):
        first = generate_bill("A", LINES, shop_settings, actor, [], clock=clock, ids=ids)
        second = generate_bill("B", LINES, first.settings, actor, [], clock=clock, ids=ids)
        assert (first.serial_no, second.serial_no) == ("AMR-8001", "AMR-8002")

    def test_matched_customer_gets_debit(self, shop_settings, alice, actor, clock, ids):
        result = generate_bill(
            "  alice ", LINES, shop_settings, actor, [alice], clock=clock, ids=ids
        )
        txn = result.transaction
        assert txn is not None
        assert txn.customer_id == alice.id
        assert txn.type is TransactionType.DEBIT
        assert txn.amount == Decimal("2000")
        assert txn.bill_id == "AMR-8001"
        assert txn.payment_mode == "Bill"
        assert txn.quantity == Decimal("3")
        assert txn.purchase_description == "Radiator Core, Cooling Fan"

    def test_custom_prefix_and_payment_mode(self, shop_settings, alice, actor, clock, ids):
        result = generate_bill(
            "Alice",
            LINES,
            shop_settings,
            actor,
            [alice],
            clock=clock,
            ids=ids,
            serial_prefix="INV",
            payment_mode="Credit Bill",
        )
        assert result.serial_no == "INV-8001"
        assert result.transaction.payment_mode == "Credit Bill"

    def test_empty_bill_rejected(self, shop_settings, actor, clock, ids):
        with pytest.raises(EmptyBillError):
            generate_bill("Alice", [], shop_settings, actor, [], clock=clock, ids=ids)
        assert shop_settings.last_bill_serial == 8000

    def test_blank_customer_rejected(self, shop_settings, actor, clock, ids):
        with pytest.raises(MissingFieldError) as exc_info:
            generate_bill("   ", LINES, shop_settings, actor, [], clock=clock, ids=ids)
        assert exc_info.value.field == "customer_name"

    @pytest.mark.parametrize(
        "line",
        [
            BillLine("Core", Decimal("0"), Decimal("10")),
            BillLine("Core", Decimal("1"), Decimal("-1")),
        ],
    )
    def test_non_positive_line_rejected(self, line, shop_settings, actor, clock, ids):
        with pytest.raises(NonPositiveValueError):
            generate_bill("Alice", [line], shop_settings, actor, [], clock=clock, ids=ids)

    def test_blank_product_rejected(self, shop_settings, actor, clock, ids):
        with pytest.raises(MissingFieldError):
            generate_bill(
                "Alice",
                [BillLine(" ", Decimal("1"), Decimal("1"))],
                shop_settings,
                actor,
                [],
                clock=clock,
                ids=ids,
            )

    def test_requires_actor(self, shop_settings, clock, ids):
        with pytest.raises(MissingActorError):
            generate_bill("Alice", LINES, shop_settings, None, [], clock=clock, ids=ids)


class TestEditBillItem:
    @pytest.fixture
    def item(self, clock, actor) -> BillItem:
        return create_record(
            BillItem,
            record_id="billitem-1",
            actor=actor,
            summary="Bill item added",
            clock=clock,
            bill_id="bill-1",
            product_name="Radiator Core",
            quantity=Decimal("2"),
            price=Decimal("750"),
        )

    def test_amount_recomputed(self, item, actor, clock):
        updated = edit_bill_item(item, actor, clock=clock, quantity="3", price=Decimal("800"))
        assert updated.amount == Decimal("2400")
        entry = updated.history[0]
        assert entry.changes == "Bill item updated"
        assert set(entry.new_values) == {"product_name", "quantity", "price", "amount"}

    def test_rejects_zero_quantity(self, item, actor, clock):
        with pytest.raises(NonPositiveValueError):
            edit_bill_item(item, actor, clock=clock, quantity=0)


def test_match_customer_ignores_case_and_spaces(alice):
    assert match_customer([alice], " ALICE ") is alice
    assert match_customer([alice], "Alicia") is None
