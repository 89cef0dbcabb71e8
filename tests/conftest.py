"""
Pytest configuration and shared fixtures for the test suite.
"""

import hashlib
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from bip_utils import Bech32Encoder

from relayer.config import RelayerConfig
from relayer.core.coins import Coins
from relayer.core.deposit import ContractAsset, DepositRecord, NativeDenom
from relayer.core.messages import OutboundMessage
from relayer.node.interface import (
    AccountInfo,
    BroadcastResult,
    Fee,
    LedgerClient,
    LedgerConnectionError,
    SimulationResult,
    TxInfo,
)


# ============================================================================
# Test Data Generators
# ============================================================================

def generate_test_address(index: int = 0, prefix: str = "terra") -> str:
    """Generate a well-formed account address."""
    payload = hashlib.sha256(f"account-{index}".encode()).digest()[:20]
    return Bech32Encoder.Encode(prefix, payload)


DONATION_ADDRESS = generate_test_address(999)
TOKEN_CONTRACT = generate_test_address(500)
WRAPPED_CONTRACT = generate_test_address(501)


def native_record(to: str, amount: str, denom: str = "uusd") -> DepositRecord:
    return DepositRecord(destination_address=to, raw_amount=amount, asset_info=NativeDenom(denom))


def contract_record(to: str, amount: str, contract: str = TOKEN_CONTRACT, mint: bool = False) -> DepositRecord:
    return DepositRecord(
        destination_address=to,
        raw_amount=amount,
        asset_info=ContractAsset(contract_address=contract, is_wrapped_mint=mint),
    )


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> RelayerConfig:
    """Create a test configuration."""
    return RelayerConfig(
        lcd_url="http://lcd.test",
        chain_id="localterra",
        gas_price="0.15uusd",
        gas_price_endpoint=None,
        gas_adjustment=1.4,
        donation_address=DONATION_ADDRESS,
        log_level="DEBUG",
    )


# ============================================================================
# Mock Ledger Client
# ============================================================================

class MockLedgerClient(LedgerClient):
    """Mock ledger client for testing."""

    def __init__(self):
        self.rate = Decimal("0.005")
        self.caps: Dict[str, Decimal] = {"uusd": Decimal(1_000_000), "ukrw": Decimal(1_500_000_000)}
        self.simulation = SimulationResult(gas_limit=200_000, fee_amounts=Coins({"uusd": 30_000}))
        self.broadcast_code = 0
        self.broadcast_log = ""
        self.lookup_error: Optional[Exception] = None
        self.account = AccountInfo(address="", account_number=42, sequence=7)

        self.transactions: Dict[str, TxInfo] = {}
        self.tax_cap_calls: List[str] = []
        self.calls: List[str] = []
        self.signed: List[tuple] = []
        self.simulated: List[tuple] = []
        self.broadcasted: List[bytes] = []

    async def connect(self) -> None:
        self.calls.append("connect")

    async def disconnect(self) -> None:
        self.calls.append("disconnect")

    async def tax_rate(self) -> Decimal:
        self.calls.append("tax_rate")
        return self.rate

    async def tax_cap(self, denom: str) -> Decimal:
        self.calls.append("tax_cap")
        self.tax_cap_calls.append(denom)
        return self.caps[denom]

    async def simulate(
        self,
        msgs: List[OutboundMessage],
        sequence: int,
        gas_price: Optional[str] = None,
    ) -> SimulationResult:
        self.calls.append("simulate")
        self.simulated.append((list(msgs), sequence, gas_price))
        return self.simulation

    async def sign_and_assemble(self, msgs: List[OutboundMessage], sequence: int, fee: Fee) -> bytes:
        self.calls.append("sign_and_assemble")
        self.signed.append((list(msgs), sequence, fee))
        return f"tx:{sequence}:{len(msgs)}:{fee.gas_limit}".encode()

    def hash(self, tx: bytes) -> str:
        return hashlib.sha256(tx).hexdigest().upper()

    async def broadcast_sync(self, tx: bytes) -> BroadcastResult:
        self.calls.append("broadcast_sync")
        self.broadcasted.append(tx)
        return BroadcastResult(tx_hash=self.hash(tx), code=self.broadcast_code, raw_log=self.broadcast_log)

    async def query_by_hash(self, tx_hash: str) -> Optional[TxInfo]:
        self.calls.append("query_by_hash")
        if self.lookup_error:
            raise self.lookup_error
        return self.transactions.get(tx_hash)

    async def account_info(self, address: str) -> AccountInfo:
        self.calls.append("account_info")
        return AccountInfo(address=address, account_number=self.account.account_number, sequence=self.account.sequence)

    @property
    def network_calls(self) -> List[str]:
        return [c for c in self.calls if c not in ("connect", "disconnect")]


@pytest.fixture
def mock_ledger() -> MockLedgerClient:
    """Create a mock ledger client."""
    return MockLedgerClient()


# ============================================================================
# Test Signer
# ============================================================================

TEST_MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)


@pytest.fixture
def test_signer(test_config):
    """Create a signer with a fixed test mnemonic."""
    from relayer.tx.signer import TransactionSigner
    signer = TransactionSigner(test_config)
    signer.load_mnemonic(TEST_MNEMONIC)
    return signer


@pytest.fixture
def unreachable_lookup() -> LedgerConnectionError:
    return LedgerConnectionError("LCD request failed: connection refused")
