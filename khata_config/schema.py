"""
KhataConfig schema.

The human-authored shop configuration, parsed from YAML by the loader.
Every type is a frozen dataclass; nothing here knows about the kernel.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ShopProfile:
    """Printed on every bill."""

    name: str
    address: str
    admin_phone: str


@dataclass(frozen=True)
class BillingConfig:
    serial_prefix: str = "AMR"
    starting_serial: int = 8000
    default_payment_mode: str = "Bill"


@dataclass(frozen=True)
class DisplayConfig:
    currency_symbol: str = "Rs"


@dataclass(frozen=True)
class AdminProfile:
    """The user seeded on first start; mutations default to this actor."""

    email: str
    name: str
    phone: str
    id: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class KhataConfig:
    config_id: str
    version: int
    shop: ShopProfile
    billing: BillingConfig
    display: DisplayConfig
    admin: AdminProfile
    demo_data: bool = False
    checksum: str = ""
