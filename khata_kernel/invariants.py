"""
Kernel Invariants Contract.

These invariants are structural law. No configuration value may switch
them off.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across domain.ledger, domain.audit,
domain.sequencer, and the services' single commit point.
"""

from enum import Enum, unique


@unique
class KhataInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    DERIVED_BALANCE = "derived_balance"
    """A balance is the signed sum of the owner's transactions, computed on
    every query. No record stores a balance. Enforced by domain.ledger."""

    APPEND_ONLY_HISTORY = "append_only_history"
    """History entries are never edited or removed. Records are frozen and
    history is a tuple that only domain.audit.record_change extends."""

    NEWEST_FIRST_HISTORY = "newest_first_history"
    """history[0] is always the most recent entry. Consumers render without
    re-sorting."""

    SNAPSHOT_SYMMETRY = "snapshot_symmetry"
    """old_values and new_values are both present or both absent, with the
    same key set. Enforced by domain.audit.record_change."""

    SERIAL_MONOTONICITY = "serial_monotonicity"
    """Bill serials are strictly increasing and never reused. The counter in
    Settings is written only through the billing and settings services."""

    SINGLE_OWNER = "single_owner"
    """Every transaction belongs to exactly one customer or one company."""

    ALL_OR_NOTHING = "all_or_nothing"
    """A command commits all of its effects in one store swap, or none."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KhataInvariant] = frozenset(KhataInvariant)

# The kernel package may not import from these packages.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = ("khata_config",)
