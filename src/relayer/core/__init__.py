"""
Core relayer components.

This module contains the data model shared by every component and the
main relayer orchestration (``relayer.core.relayer``).
"""

from relayer.core.coins import Coin, Coins
from relayer.core.deposit import AssetInfo, ContractAsset, DepositRecord, NativeDenom
from relayer.core.messages import (
    ContractMint,
    ContractTransfer,
    MessageBatch,
    OutboundMessage,
    Transfer,
)
from relayer.core.transaction import SignedTransaction

__all__ = [
    "Coin",
    "Coins",
    "AssetInfo",
    "ContractAsset",
    "DepositRecord",
    "NativeDenom",
    "ContractMint",
    "ContractTransfer",
    "MessageBatch",
    "OutboundMessage",
    "Transfer",
    "SignedTransaction",
]
