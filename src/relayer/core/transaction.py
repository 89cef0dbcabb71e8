"""
Signed transaction model.

A built relay transaction ready to hand off for broadcasting.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class SignedTransaction:
    """
    A signed, encoded relay transaction.

    Attributes:
        tx: Raw protobuf ``TxRaw`` bytes
        tx_hash: Uppercase hex SHA-256 of ``tx``
        created_at: When the transaction was built
    """
    tx: bytes
    tx_hash: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def tx_base64(self) -> str:
        return base64.b64encode(self.tx).decode("ascii")

    def to_dict(self) -> dict:
        """Convert to the hand-off representation."""
        return {
            "tx": self.tx_base64,
            "txHash": self.tx_hash,
            "createdAt": int(self.created_at.timestamp() * 1000),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SignedTransaction":
        """Restore a transaction previously produced by ``to_dict``."""
        return cls(
            tx=base64.b64decode(data["tx"]),
            tx_hash=data["txHash"],
            created_at=datetime.fromtimestamp(data["createdAt"] / 1000, tz=timezone.utc),
        )
