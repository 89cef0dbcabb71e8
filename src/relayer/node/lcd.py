"""
LCD REST adapter for ledger integration.

Provides ledger access via the Cosmos/Terra LCD REST API.
"""

import base64
import hashlib
import math
from decimal import Decimal
from typing import Any, List, Optional

import httpx
import structlog

from relayer.config import RelayerConfig
from relayer.core.coins import Coins
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
from relayer.tx.signer import SignerError, TransactionSigner

logger = structlog.get_logger(__name__)

# gRPC status code NOT_FOUND as echoed by the REST gateway
GRPC_NOT_FOUND = 5


class LCDAdapter(LedgerClient):
    """
    LCD REST adapter.

    Implements the LedgerClient using the ledger's REST gateway. Encoding and
    signing are delegated to the TransactionSigner.
    """

    def __init__(
        self,
        config: RelayerConfig,
        signer: TransactionSigner,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the LCD adapter.

        Args:
            config: Relayer configuration
            signer: Signer holding the relayer key
            client: Pre-built HTTP client (mainly for tests)
        """
        self.config = config
        self.signer = signer
        self.base_url = config.lcd_url.rstrip("/")
        self._client = client
        self._account_number: Optional[int] = None

    async def connect(self) -> None:
        """Establish connection (create HTTP client)."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.config.request_timeout_seconds,
        )
        logger.info("lcd_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("lcd_disconnected")

    async def _request(
        self,
        method: str,
        path: str,
        allow_not_found: bool = False,
        **kwargs,
    ) -> Any:
        """Make an API request."""
        if not self._client:
            await self.connect()

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("lcd_request_error", path=path, error=str(e))
            raise LedgerConnectionError(f"LCD request failed: {e}")

        if allow_not_found and _is_not_found(response):
            return None

        if response.status_code != 200:
            error_msg = response.text
            logger.error(
                "lcd_request_failed",
                path=path,
                status=response.status_code,
                error=error_msg,
            )
            raise LedgerConnectionError(f"LCD API error ({response.status_code}): {error_msg}")

        try:
            return response.json()
        except ValueError as e:
            raise LedgerConnectionError(f"LCD returned invalid JSON for {path}: {e}")

    async def tax_rate(self) -> Decimal:
        """Get the treasury tax rate."""
        data = await self._request("GET", "/terra/treasury/v1beta1/tax_rate")
        return Decimal(data["tax_rate"])

    async def tax_cap(self, denom: str) -> Decimal:
        """Get the treasury tax cap for a denom."""
        data = await self._request("GET", f"/terra/treasury/v1beta1/tax_caps/{denom}")
        return Decimal(data["tax_cap"])

    async def account_info(self, address: str) -> AccountInfo:
        """Get account number and sequence."""
        data = await self._request("GET", f"/cosmos/auth/v1beta1/accounts/{address}")
        account = data["account"]

        # Vesting accounts wrap the base account
        if "base_vesting_account" in account:
            account = account["base_vesting_account"]["base_account"]

        info = AccountInfo(
            address=account.get("address", address),
            account_number=int(account.get("account_number", 0)),
            sequence=int(account.get("sequence", 0)),
        )
        if address == self.signer.address:
            self._account_number = info.account_number
        return info

    async def _get_account_number(self) -> int:
        if not self.signer.is_loaded:
            raise SignerError("No signing key loaded")
        if self._account_number is None:
            await self.account_info(self.signer.address)
        return self._account_number

    async def simulate(
        self,
        msgs: List[OutboundMessage],
        sequence: int,
        gas_price: Optional[str] = None,
    ) -> SimulationResult:
        """Simulate the messages and size gas and fee."""
        account_number = await self._get_account_number()
        tx_bytes = self.signer.encode_transaction(
            msgs,
            sequence,
            Fee(gas_limit=0, amount=Coins()),
            account_number,
            sign=False,
        )

        data = await self._request(
            "POST",
            "/cosmos/tx/v1beta1/simulate",
            json={"tx_bytes": base64.b64encode(tx_bytes).decode("ascii")},
        )

        gas_used = int(data["gas_info"]["gas_used"])
        gas_limit = math.ceil(Decimal(gas_used) * Decimal(str(self.config.gas_adjustment)))
        prices = Coins.from_str(gas_price or self.config.gas_price)
        fee_amounts = prices.mul(gas_limit).to_int_ceil()

        logger.debug(
            "tx_simulated",
            gas_used=gas_used,
            gas_limit=gas_limit,
            fee=repr(fee_amounts),
        )
        return SimulationResult(gas_limit=gas_limit, fee_amounts=fee_amounts)

    async def sign_and_assemble(
        self,
        msgs: List[OutboundMessage],
        sequence: int,
        fee: Fee,
    ) -> bytes:
        """Sign the messages with the relayer key."""
        account_number = await self._get_account_number()
        return self.signer.encode_transaction(msgs, sequence, fee, account_number)

    def hash(self, tx: bytes) -> str:
        """Transaction hash: uppercase hex SHA-256 of the raw bytes."""
        return hashlib.sha256(tx).hexdigest().upper()

    async def broadcast_sync(self, tx: bytes) -> BroadcastResult:
        """Submit a signed transaction in sync mode."""
        data = await self._request(
            "POST",
            "/cosmos/tx/v1beta1/txs",
            json={
                "tx_bytes": base64.b64encode(tx).decode("ascii"),
                "mode": "BROADCAST_MODE_SYNC",
            },
        )
        response = data.get("tx_response", {})

        return BroadcastResult(
            tx_hash=response.get("txhash", self.hash(tx)),
            code=int(response.get("code", 0)),
            raw_log=response.get("raw_log", ""),
        )

    async def query_by_hash(self, tx_hash: str) -> Optional[TxInfo]:
        """Get transaction details."""
        data = await self._request(
            "GET",
            f"/cosmos/tx/v1beta1/txs/{tx_hash}",
            allow_not_found=True,
        )
        if data is None:
            return None

        response = data.get("tx_response") if isinstance(data, dict) else None
        if not isinstance(response, dict):
            raise LedgerConnectionError(f"LCD returned malformed tx payload for {tx_hash}")

        try:
            return TxInfo(
                tx_hash=response.get("txhash") or tx_hash,
                height=int(response.get("height") or 0),
                code=int(response.get("code") or 0),
                raw_log=response.get("raw_log") or "",
                gas_wanted=int(response.get("gas_wanted") or 0),
                gas_used=int(response.get("gas_used") or 0),
                timestamp=response.get("timestamp"),
                raw=data,
            )
        except (TypeError, ValueError) as e:
            raise LedgerConnectionError(f"LCD returned malformed tx payload for {tx_hash}: {e}")


def _is_not_found(response: httpx.Response) -> bool:
    """Whether the gateway answered that the resource does not exist."""
    if response.status_code == 404:
        return True
    if response.status_code == 200:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("code") == GRPC_NOT_FOUND
