"""
Abstract interface for destination ledger access.

Defines the contract for ledger access that all ledger adapters must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from relayer.core.coins import Coins
from relayer.core.messages import OutboundMessage


@dataclass(frozen=True)
class SimulationResult:
    """Gas and fee sized by a dry-run of the transaction."""
    gas_limit: int
    fee_amounts: Coins


@dataclass(frozen=True)
class Fee:
    """Fee attached to a signed transaction."""
    gas_limit: int
    amount: Coins


@dataclass(frozen=True)
class AccountInfo:
    """On-chain account state of the relayer wallet."""
    address: str
    account_number: int
    sequence: int


@dataclass(frozen=True)
class BroadcastResult:
    """Result of submitting a transaction to the node's pool."""
    tx_hash: str
    code: int
    raw_log: str = ""

    @property
    def is_error(self) -> bool:
        return self.code != 0


@dataclass
class TxInfo:
    """Included transaction as reported by the ledger."""
    tx_hash: str
    height: int
    code: int
    raw_log: str = ""
    gas_wanted: int = 0
    gas_used: int = 0
    timestamp: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.code == 0


class TxLookupStatus(str, Enum):
    """Outcome of a transaction lookup."""
    FOUND = "found"               # Transaction included on-chain
    NOT_FOUND = "not_found"       # Ledger answered that it does not know the hash
    UNAVAILABLE = "unavailable"   # Ledger could not be asked (transport / server error)


@dataclass
class TxLookup:
    """Transaction lookup that keeps definite absence apart from failure."""
    status: TxLookupStatus
    info: Optional[TxInfo] = None
    error: Optional[str] = None


class LedgerClient(ABC):
    """
    Abstract interface for destination ledger access.

    This interface defines all ledger operations needed by the relayer:
    - Treasury tax parameters
    - Transaction simulation, signing and hashing
    - Transaction submission and lookup
    - Account queries
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the ledger endpoint.

        Raises:
            LedgerConnectionError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the ledger endpoint."""
        pass

    @abstractmethod
    async def tax_rate(self) -> Decimal:
        """
        Get the current transfer tax rate.

        Returns:
            Tax rate as a fraction, e.g. ``Decimal("0.005")``
        """
        pass

    @abstractmethod
    async def tax_cap(self, denom: str) -> Decimal:
        """
        Get the absolute tax cap for a denom.

        Args:
            denom: Native denom, e.g. ``uusd``

        Returns:
            Maximum tax charged per transfer in base units
        """
        pass

    @abstractmethod
    async def simulate(
        self,
        msgs: List[OutboundMessage],
        sequence: int,
        gas_price: Optional[str] = None,
    ) -> SimulationResult:
        """
        Dry-run the messages to size gas and fee.

        Args:
            msgs: Messages to include
            sequence: Account sequence to simulate with
            gas_price: Gas price string, or None for the default price

        Returns:
            Simulated gas limit and fee
        """
        pass

    @abstractmethod
    async def sign_and_assemble(
        self,
        msgs: List[OutboundMessage],
        sequence: int,
        fee: Fee,
    ) -> bytes:
        """
        Sign the messages and return the encoded transaction.

        Args:
            msgs: Messages to include
            sequence: Account sequence to sign with
            fee: Final fee

        Returns:
            Raw transaction bytes
        """
        pass

    @abstractmethod
    def hash(self, tx: bytes) -> str:
        """Compute the canonical transaction hash."""
        pass

    @abstractmethod
    async def broadcast_sync(self, tx: bytes) -> BroadcastResult:
        """
        Submit a transaction for pool admission.

        Args:
            tx: Raw transaction bytes

        Returns:
            Broadcast result carrying the check code and log
        """
        pass

    @abstractmethod
    async def query_by_hash(self, tx_hash: str) -> Optional[TxInfo]:
        """
        Get an included transaction by hash.

        Args:
            tx_hash: Transaction hash

        Returns:
            Transaction details if found, None if the ledger does not know it

        Raises:
            LedgerConnectionError: If the ledger could not be queried
        """
        pass

    @abstractmethod
    async def account_info(self, address: str) -> AccountInfo:
        """
        Get account number and sequence for an address.

        Args:
            address: Bech32 account address

        Returns:
            Account state
        """
        pass


class LedgerConnectionError(Exception):
    """Raised when talking to the ledger fails."""
    pass


class TransactionSubmitError(Exception):
    """Raised when transaction submission fails."""

    def __init__(self, message: str, code: Optional[int] = None, raw_log: str = ""):
        super().__init__(message)
        self.code = code
        self.raw_log = raw_log


class BroadcastError(TransactionSubmitError):
    """Raised when the node rejects a transaction with a non-zero code."""

    def __init__(self, code: int, raw_log: str):
        super().__init__(f"Error while executing: {code} - {raw_log}", code=code, raw_log=raw_log)
