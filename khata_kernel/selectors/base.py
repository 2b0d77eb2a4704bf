"""
Module: khata_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors form the query side: they read ``store.state`` and return
    derived figures, frozen dataclasses or plain row dicts.
Architecture position: Kernel > Selectors.  May import from domain/.
    MUST NOT import from services/ other than the store type.

Invariants enforced:
    - Read-only access: selectors never call ``store.commit``.
    - No stored balances: every balance is computed from the current
      transaction collections on each call.
"""

from abc import ABC

from khata_kernel.domain.state import KhataState
from khata_kernel.services.store import KhataStore


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept the store from the caller and read the state
        current at call time.  They MUST NOT mutate anything.
    """

    def __init__(self, store: KhataStore):
        self.store = store

    @property
    def state(self) -> KhataState:
        return self.store.state
