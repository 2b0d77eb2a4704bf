"""Utility modules for the khata kernel."""

from khata_kernel.utils.ids import (
    IdGenerator,
    SequentialIdGenerator,
    SystemIdGenerator,
)

__all__ = [
    "IdGenerator",
    "SequentialIdGenerator",
    "SystemIdGenerator",
]
