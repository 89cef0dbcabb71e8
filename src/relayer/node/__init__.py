"""
Ledger Integration Layer.

Provides abstracted access to the destination ledger: tax parameters,
simulation, signing, submission and lookup.
"""

from relayer.node.interface import (
    BroadcastError,
    LedgerClient,
    LedgerConnectionError,
    TransactionSubmitError,
)
from relayer.node.lcd import LCDAdapter

__all__ = [
    "LedgerClient",
    "LCDAdapter",
    "LedgerConnectionError",
    "TransactionSubmitError",
    "BroadcastError",
]
