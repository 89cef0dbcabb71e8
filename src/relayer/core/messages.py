"""
Outbound ledger messages.

The three message kinds the relayer emits, as a tagged union. Both the
message builder and the transaction encoder dispatch over every variant.
"""

from dataclasses import dataclass, field
from typing import List, Union

from relayer.core.coins import Coin, Coins


@dataclass(frozen=True)
class Transfer:
    """Native bank send."""
    from_address: str
    to_address: str
    coin: Coin


@dataclass(frozen=True)
class ContractTransfer:
    """Token contract ``transfer`` execution."""
    from_address: str
    contract: str
    recipient: str
    amount: int

    def execute_msg(self) -> dict:
        return {"transfer": {"recipient": self.recipient, "amount": str(self.amount)}}


@dataclass(frozen=True)
class ContractMint:
    """Wrapped token contract ``mint`` execution."""
    from_address: str
    contract: str
    recipient: str
    amount: int

    def execute_msg(self) -> dict:
        return {"mint": {"recipient": self.recipient, "amount": str(self.amount)}}


OutboundMessage = Union[Transfer, ContractTransfer, ContractMint]


@dataclass
class MessageBatch:
    """
    Output of the message builder for one batch of deposits.

    Attributes:
        messages: Messages in deposit order
        tax: Transfer tax owed per denom across the batch
    """
    messages: List[OutboundMessage] = field(default_factory=list)
    tax: Coins = field(default_factory=Coins)

    @property
    def is_empty(self) -> bool:
        return not self.messages

    @property
    def size(self) -> int:
        return len(self.messages)
