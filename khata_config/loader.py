"""
Configuration Loader (``khata_config.loader``).

Responsibility
--------------
Loads the shop YAML file and parses it into typed
``khata_config.schema`` dataclass instances. Runtime callers go through
``khata_config.get_active_config()``.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Negative starting serial, blank prefix or symbol  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from khata_config.schema import (
    AdminProfile,
    BillingConfig,
    DisplayConfig,
    KhataConfig,
    ShopProfile,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _text(data: dict[str, Any], key: str) -> str:
    value = data[key]
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"Configuration key {key!r} must not be blank")
    return text


def _optional_text(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    text = str(value).strip() if value is not None else ""
    return text or None


def parse_shop(data: dict[str, Any]) -> ShopProfile:
    return ShopProfile(
        name=_text(data, "name"),
        address=_text(data, "address"),
        admin_phone=_text(data, "admin_phone"),
    )


def parse_billing(data: dict[str, Any]) -> BillingConfig:
    """Parse billing settings; every key is optional."""
    defaults = BillingConfig()
    starting_serial = data.get("starting_serial", defaults.starting_serial)
    if isinstance(starting_serial, bool) or not isinstance(starting_serial, int):
        raise ValueError(f"starting_serial must be an integer, got {starting_serial!r}")
    if starting_serial < 0:
        raise ValueError(f"starting_serial must not be negative, got {starting_serial}")
    prefix = str(data.get("serial_prefix", defaults.serial_prefix)).strip()
    if not prefix or "-" in prefix:
        raise ValueError(f"serial_prefix must be non-blank without '-', got {prefix!r}")
    payment_mode = str(data.get("default_payment_mode", defaults.default_payment_mode)).strip()
    if not payment_mode:
        raise ValueError("default_payment_mode must not be blank")
    return BillingConfig(
        serial_prefix=prefix,
        starting_serial=starting_serial,
        default_payment_mode=payment_mode,
    )


def parse_display(data: dict[str, Any]) -> DisplayConfig:
    symbol = str(data.get("currency_symbol", DisplayConfig().currency_symbol)).strip()
    if not symbol:
        raise ValueError("currency_symbol must not be blank")
    return DisplayConfig(currency_symbol=symbol)


def parse_admin(data: dict[str, Any]) -> AdminProfile:
    return AdminProfile(
        email=_text(data, "email"),
        name=_text(data, "name"),
        phone=_text(data, "phone"),
        id=_optional_text(data, "id"),
        address=_optional_text(data, "address"),
    )


def parse_config(data: dict[str, Any]) -> KhataConfig:
    """
    Parse a whole configuration document.

    ``shop`` and ``admin`` are required; ``billing`` and ``display`` fall
    back to their defaults.
    """
    return KhataConfig(
        config_id=str(data.get("config_id", "khata")),
        version=int(data.get("version", 1)),
        shop=parse_shop(data["shop"]),
        billing=parse_billing(data.get("billing") or {}),
        display=parse_display(data.get("display") or {}),
        admin=parse_admin(data["admin"]),
        demo_data=bool(data.get("demo_data", False)),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> KhataConfig:
    return parse_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
