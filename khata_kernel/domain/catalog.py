"""
Catalog -- Products remembered from issued bills.

Every product name that appears on a bill is kept with the price it was
last billed at and how many bills used it, so the bill form can suggest
names and prefill prices.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from decimal import Decimal

from khata_kernel.domain.audit import create_record, record_change, snapshot_fields
from khata_kernel.domain.clock import Clock
from khata_kernel.domain.records import Actor, HistoryAction, Product
from khata_kernel.domain.sequencer import BillLine
from khata_kernel.utils.ids import PRODUCT_PREFIX, IdGenerator

_USAGE_FIELDS = ("last_price", "usage_count")


def _key(name: str) -> str:
    return name.strip().casefold()


def record_usage(
    products: Sequence[Product],
    lines: Iterable[BillLine],
    actor: Actor,
    *,
    clock: Clock,
    ids: IdGenerator,
) -> tuple[Product, ...]:
    """
    Return the catalogue after one bill.

    Each product used on the bill has ``usage_count`` bumped once and
    ``last_price`` set to the price of its last line on the bill. Names
    are matched case-insensitively; new names are added at the end.
    """
    prices: dict[str, tuple[str, Decimal]] = {}
    for line in lines:
        prices[_key(line.product_name)] = (line.product_name.strip(), line.price)

    catalogue = list(products)
    index = {_key(product.name): i for i, product in enumerate(catalogue)}
    for key, (name, price) in prices.items():
        if key in index:
            current = catalogue[index[key]]
            updated = replace(current, last_price=price, usage_count=current.usage_count + 1)
            catalogue[index[key]] = record_change(
                updated,
                HistoryAction.UPDATED,
                actor,
                "Product billed",
                snapshot_fields(current, _USAGE_FIELDS),
                snapshot_fields(updated, _USAGE_FIELDS),
                clock=clock,
            )
        else:
            catalogue.append(
                create_record(
                    Product,
                    record_id=ids.new_id(PRODUCT_PREFIX),
                    actor=actor,
                    summary="Product added from bill",
                    clock=clock,
                    name=name,
                    last_price=price,
                    usage_count=1,
                )
            )
    return tuple(catalogue)


def suggest(products: Iterable[Product], prefix: str = "", limit: int = 5) -> tuple[Product, ...]:
    """Most-used products whose name starts with ``prefix`` (case-insensitive)."""
    wanted = _key(prefix)
    matches = [p for p in products if _key(p.name).startswith(wanted)]
    matches.sort(key=lambda p: (-p.usage_count, _key(p.name)))
    return tuple(matches[:limit])
