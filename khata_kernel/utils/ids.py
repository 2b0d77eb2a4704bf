"""
Record identifier generation.

Identifiers are opaque strings, unique within their collection. The
production generator follows the ``prefix-<epoch ms>-<9 base36 chars>``
shape; collisions are improbable but not impossible, so nothing in the
kernel relies on ids for ordering.
"""

import secrets
import string
import time
from abc import ABC, abstractmethod
from collections import defaultdict

_BASE36 = string.digits + string.ascii_lowercase

# Prefixes per collection.
USER_PREFIX = "user"
CUSTOMER_PREFIX = "cust"
COMPANY_PREFIX = "comp"
CUSTOMER_TRANSACTION_PREFIX = "ct"
COMPANY_TRANSACTION_PREFIX = "comt"
BILL_PREFIX = "bill"
BILL_ITEM_PREFIX = "billitem"
BILL_REFERENCE_PREFIX = "ref"
PRODUCT_PREFIX = "prod"
SETTINGS_PREFIX = "settings"


class IdGenerator(ABC):
    """Source of fresh record identifiers."""

    @abstractmethod
    def new_id(self, prefix: str) -> str:
        ...


class SystemIdGenerator(IdGenerator):
    """
    Time + randomness based ids.

    Example:
        >>> SystemIdGenerator().new_id("bill")
        'bill-1741170600000-k3x9q0z2a'
    """

    def new_id(self, prefix: str) -> str:
        millis = time.time_ns() // 1_000_000
        suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
        return f"{prefix}-{millis}-{suffix}"


class SequentialIdGenerator(IdGenerator):
    """Deterministic ids (``cust-1``, ``cust-2``, ...) counted per prefix."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)

    def new_id(self, prefix: str) -> str:
        self._counters[prefix] += 1
        return f"{prefix}-{self._counters[prefix]}"
