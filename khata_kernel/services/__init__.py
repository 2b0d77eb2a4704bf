"""
Kernel services -- commands over the store.

Each command validates its input, builds the complete successor state
with the pure domain functions, and commits it in one swap.
"""

from khata_kernel.services.base import BaseService
from khata_kernel.services.billing_service import BillingService, to_bill_line
from khata_kernel.services.party_service import PartyService
from khata_kernel.services.settings_service import SettingsService
from khata_kernel.services.store import SYSTEM_ACTOR, KhataStore
from khata_kernel.services.transaction_service import TransactionService
from khata_kernel.services.user_service import UserService

__all__ = [
    "BaseService",
    "BillingService",
    "KhataStore",
    "PartyService",
    "SYSTEM_ACTOR",
    "SettingsService",
    "TransactionService",
    "UserService",
    "to_bill_line",
]
