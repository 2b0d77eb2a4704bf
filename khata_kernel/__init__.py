"""
Khata Kernel - bookkeeping and billing core

An in-memory, audited ledger for a small shop with:
- Balances derived from transaction history (never stored)
- Append-only, newest-first history on every record
- Monotonic bill serial numbers
- All-or-nothing commands over a single-writer store
"""

__version__ = "0.1.0"
