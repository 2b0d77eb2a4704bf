"""
Config -> Kernel Bridges.

Functions that turn a KhataConfig into kernel objects. These live in
khata_config because the kernel must NEVER import khata_config.

Usage:
    from khata_config import get_active_config
    from khata_config.bridges import build_store

    config = get_active_config()
    store = build_store(config)
    billing = build_billing_service(store, config)
"""

from __future__ import annotations

from khata_config.schema import KhataConfig
from khata_kernel.domain.clock import Clock, SystemClock
from khata_kernel.domain.records import Actor, UserRole
from khata_kernel.selectors.history_selector import HistorySelector
from khata_kernel.services.billing_service import BillingService
from khata_kernel.services.demo import load_demo_data
from khata_kernel.services.settings_service import SettingsService
from khata_kernel.services.store import KhataStore
from khata_kernel.utils.ids import IdGenerator, SystemIdGenerator


def build_billing_service(
    store: KhataStore,
    config: KhataConfig,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> BillingService:
    return BillingService(
        store,
        clock,
        ids,
        serial_prefix=config.billing.serial_prefix,
        payment_mode=config.billing.default_payment_mode,
    )


def build_settings_service(
    store: KhataStore,
    config: KhataConfig,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> SettingsService:
    return SettingsService(store, clock, ids, serial_prefix=config.billing.serial_prefix)


def build_history_selector(store: KhataStore, config: KhataConfig) -> HistorySelector:
    return HistorySelector(store, currency_symbol=config.display.currency_symbol)


def build_store(
    config: KhataConfig,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> KhataStore:
    """
    Seed a store from configuration.

    Postconditions:
        - Settings carries the shop profile and ``starting_serial``.
        - The admin user exists with role ADMIN.
        - With ``demo_data`` set, the sample records are added by the
          admin through the regular commands.
    """
    clock = clock or SystemClock()
    ids = ids or SystemIdGenerator()
    store = KhataStore.bootstrap(
        shop_name=config.shop.name,
        shop_address=config.shop.address,
        admin_phone=config.shop.admin_phone,
        admin_email=config.admin.email,
        admin_name=config.admin.name,
        admin_id=config.admin.id,
        admin_address=config.admin.address,
        starting_serial=config.billing.starting_serial,
        clock=clock,
        ids=ids,
    )
    if config.demo_data:
        admin = next(u for u in store.state.users if u.role is UserRole.ADMIN)
        load_demo_data(
            store,
            Actor.from_user(admin),
            clock=clock,
            ids=ids,
            billing=build_billing_service(store, config, clock, ids),
        )
    return store
