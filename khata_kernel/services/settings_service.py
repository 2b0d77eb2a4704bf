"""
SettingsService -- The shop profile and the bill serial counter.

Edits replace every field of the Settings singleton. The counter may be
moved forward freely, e.g. to continue a paper bill book, but never below
a serial that an existing bill already carries.
"""

from __future__ import annotations

from dataclasses import replace

from khata_kernel.domain.audit import record_change, require_actor, snapshot_fields
from khata_kernel.domain.clock import Clock
from khata_kernel.domain.records import Actor, HistoryAction, Settings
from khata_kernel.domain.sequencer import DEFAULT_SERIAL_PREFIX, parse_serial
from khata_kernel.domain.state import KhataState
from khata_kernel.exceptions import (
    InvalidValueError,
    MissingFieldError,
    SerialRegressionError,
)
from khata_kernel.logging_config import get_logger
from khata_kernel.services.base import BaseService
from khata_kernel.services.store import KhataStore
from khata_kernel.utils.ids import IdGenerator

logger = get_logger("services.settings")

SETTINGS_FIELDS = ("shop_name", "shop_address", "admin_phone", "last_bill_serial")


def coerce_serial(value: int | str) -> int:
    """A non-negative whole number, given as int or digit string."""
    if isinstance(value, bool):
        raise InvalidValueError("last_bill_serial", value, "must be a whole number")
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise InvalidValueError("last_bill_serial", value, "must be a whole number")
        return int(text)
    if not isinstance(value, int):
        raise InvalidValueError("last_bill_serial", value, "must be a whole number")
    if value < 0:
        raise InvalidValueError("last_bill_serial", value, "must not be negative")
    return value


def highest_issued_serial(state: KhataState, prefix: str = DEFAULT_SERIAL_PREFIX) -> int | None:
    """Largest serial number among bills carrying ``prefix``; others are ignored."""
    highest = None
    for bill in state.bills:
        try:
            number = parse_serial(bill.serial_no, prefix)
        except ValueError:
            continue
        if highest is None or number > highest:
            highest = number
    return highest


class SettingsService(BaseService):
    _logger = logger

    def __init__(
        self,
        store: KhataStore,
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
        *,
        serial_prefix: str = DEFAULT_SERIAL_PREFIX,
    ):
        super().__init__(store, clock, ids)
        self.serial_prefix = serial_prefix

    def get_settings(self) -> Settings:
        return self.store.state.settings

    def update_settings(
        self,
        actor: Actor,
        *,
        shop_name: str,
        shop_address: str,
        admin_phone: str,
        last_bill_serial: int | str,
    ) -> Settings:
        with self._command("update_settings", actor):
            require_actor(actor, "update settings")
            values = {
                "shop_name": (shop_name or "").strip(),
                "shop_address": (shop_address or "").strip(),
                "admin_phone": (admin_phone or "").strip(),
            }
            for field_name, text in values.items():
                if not text:
                    raise MissingFieldError(field_name, "settings")
            serial = coerce_serial(last_bill_serial)

            state = self.store.state
            highest = highest_issued_serial(state, self.serial_prefix)
            if highest is not None and serial < highest:
                raise SerialRegressionError(serial, highest)

            current = state.settings
            edited = replace(current, last_bill_serial=serial, **values)
            updated = record_change(
                edited,
                HistoryAction.UPDATED,
                actor,
                "Shop settings updated",
                snapshot_fields(current, SETTINGS_FIELDS),
                snapshot_fields(edited, SETTINGS_FIELDS),
                clock=self._clock,
            )
            self.store.commit(replace(state, settings=updated))

        logger.info(
            "settings_updated",
            extra={
                "last_bill_serial": serial,
                "serial_moved": serial != current.last_bill_serial,
            },
        )
        return updated
