"""Configuration loading and the config-to-kernel bridge."""

from pathlib import Path

import pytest
import yaml

from khata_config import DEFAULT_CONFIG_PATH, get_active_config
from khata_config.bridges import (
    build_billing_service,
    build_history_selector,
    build_store,
)
from khata_config.loader import compute_checksum, load_yaml_file, parse_config
from khata_kernel.domain.records import UserRole
from khata_kernel.selectors.ledger_selector import LedgerSelector


def _base() -> dict:
    return load_yaml_file(DEFAULT_CONFIG_PATH)


def test_default_config():
    config = get_active_config()
    assert config.shop.name == "Al Mehran Radiator"
    assert config.billing.serial_prefix == "AMR"
    assert config.billing.starting_serial == 8000
    assert config.display.currency_symbol == "Rs"
    assert config.admin.id == "admin-001"
    assert config.checksum == compute_checksum(_base())


def test_config_trace_logged(captured_logs):
    get_active_config()
    traces = [r for r in captured_logs() if r["message"] == "KHATA_CONFIG_TRACE"]
    assert traces and traces[0]["config_id"] == "khata-default"


def test_env_var_path(tmp_path: Path, monkeypatch):
    data = _base()
    data["billing"]["serial_prefix"] = "INV"
    path = tmp_path / "shop.yaml"
    path.write_text(yaml.safe_dump(data))
    monkeypatch.setenv("KHATA_CONFIG", str(path))
    assert get_active_config().billing.serial_prefix == "INV"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_active_config(tmp_path / "absent.yaml")


def test_missing_required_section():
    data = _base()
    del data["shop"]
    with pytest.raises(KeyError):
        parse_config(data)


@pytest.mark.parametrize(
    "key,value",
    [("starting_serial", -1), ("starting_serial", "8000"), ("serial_prefix", ""),
     ("serial_prefix", "A-B")],
)
def test_invalid_billing(key, value):
    data = _base()
    data["billing"][key] = value
    with pytest.raises(ValueError):
        parse_config(data)


def test_optional_sections_default():
    data = _base()
    del data["billing"], data["display"]
    config = parse_config(data)
    assert config.billing.starting_serial == 8000
    assert config.display.currency_symbol == "Rs"


def test_checksum_is_deterministic():
    assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


def test_build_store_with_demo_data(clock, ids):
    config = get_active_config()
    store = build_store(config, clock, ids)
    state = store.state
    assert state.users[0].role is UserRole.ADMIN
    assert state.settings.shop_name == config.shop.name
    assert state.bills[0].serial_no == "AMR-8001"
    assert state.bills[0].created_by == "admin-001"
    assert LedgerSelector(store).company_balance(state.companies[0].id) < 0


def test_build_store_without_demo_data(clock, ids, actor):
    data = _base()
    data["demo_data"] = False
    data["billing"]["serial_prefix"] = "INV"
    config = parse_config(data)
    store = build_store(config, clock, ids)
    assert store.state.customers == ()
    billing = build_billing_service(store, config, clock, ids)
    assert billing.generate_bill("A", [("Core", 1, 10)], actor).serial_no == "INV-8001"
    assert build_history_selector(store, config).currency_symbol == "Rs"
