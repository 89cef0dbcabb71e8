"""
Terra Relayer

Relays cross-chain deposits to a Terra Classic style ledger.
Deposits observed by an upstream monitor are turned into a single signed,
fee-correct transaction per batch, submitted, and later looked up by hash.
"""

__version__ = "0.1.0"

from relayer.config import RelayerConfig
from relayer.core.deposit import ContractAsset, DepositRecord, NativeDenom
from relayer.core.relayer import Relayer
from relayer.core.transaction import SignedTransaction

__all__ = [
    "Relayer",
    "RelayerConfig",
    "DepositRecord",
    "NativeDenom",
    "ContractAsset",
    "SignedTransaction",
]
