"""
KhataStore -- The single holder of the current KhataState.

Responsibility:
    Owns the one mutable reference in the kernel: the current state value.
    Commands read ``store.state``, compute a complete successor state with
    the pure domain functions, and hand it to ``commit``. Nothing else
    writes to the store.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - All-or-nothing: a command validates and builds every record before
      calling ``commit``; a command that raises never reaches it, so the
      previous state stays current.
    - Single writer: commands run one at a time; each commit bumps
      ``version`` by exactly one.
"""

from __future__ import annotations

from khata_kernel.domain.audit import create_record
from khata_kernel.domain.clock import Clock
from khata_kernel.domain.records import Actor, Settings, User, UserRole
from khata_kernel.domain.state import KhataState
from khata_kernel.logging_config import get_logger
from khata_kernel.utils.ids import SETTINGS_PREFIX, USER_PREFIX, IdGenerator

logger = get_logger("services.store")

# Attribution for records the application creates on its own.
SYSTEM_ACTOR = Actor(user_id="system", user_name="System")


class KhataStore:
    """Holds the current state and swaps in successors."""

    def __init__(self, state: KhataState):
        self._state = state
        self._version = 0

    @property
    def state(self) -> KhataState:
        return self._state

    @property
    def version(self) -> int:
        """Number of commits since the store was created."""
        return self._version

    def commit(self, state: KhataState) -> int:
        """Make ``state`` current. Returns the new version."""
        self._state = state
        self._version += 1
        logger.debug("state_committed", extra={"version": self._version})
        return self._version

    @classmethod
    def bootstrap(
        cls,
        *,
        shop_name: str,
        shop_address: str,
        admin_phone: str,
        admin_email: str,
        admin_name: str,
        starting_serial: int,
        clock: Clock,
        ids: IdGenerator,
        admin_id: str | None = None,
        admin_address: str | None = None,
    ) -> KhataStore:
        """
        A store holding only the Settings record and the admin user.

        Both records are attributed to ``SYSTEM_ACTOR``.
        """
        settings = create_record(
            Settings,
            record_id=ids.new_id(SETTINGS_PREFIX),
            actor=SYSTEM_ACTOR,
            summary="Shop settings initialized",
            clock=clock,
            shop_name=shop_name,
            shop_address=shop_address,
            admin_phone=admin_phone,
            last_bill_serial=starting_serial,
        )
        admin = create_record(
            User,
            record_id=admin_id or ids.new_id(USER_PREFIX),
            actor=SYSTEM_ACTOR,
            summary="Admin user created",
            clock=clock,
            email=admin_email,
            name=admin_name,
            role=UserRole.ADMIN,
            phone=admin_phone,
            address=admin_address,
        )
        logger.info(
            "store_bootstrapped",
            extra={"shop_name": shop_name, "last_bill_serial": starting_serial},
        )
        return cls(KhataState(settings=settings, users=(admin,)))
