"""
Main Relayer orchestrator.

Coordinates message building, fee estimation, signing, broadcasting and
confirmation lookup for deposits relayed to the destination ledger.
"""

import asyncio
from typing import List, Optional

import structlog

from relayer.config import RelayerConfig
from relayer.core.deposit import DepositRecord
from relayer.core.transaction import SignedTransaction
from relayer.fees.oracle import GasPriceOracle
from relayer.node.interface import (
    BroadcastError,
    BroadcastResult,
    LedgerClient,
    LedgerConnectionError,
    TxInfo,
    TxLookup,
    TxLookupStatus,
)
from relayer.node.lcd import LCDAdapter
from relayer.tx.assembler import TransactionAssembler, TransactionBuildError
from relayer.tx.builder import MessageBuilder
from relayer.tx.signer import TransactionSigner

logger = structlog.get_logger(__name__)


class Relayer:
    """
    Main relayer orchestrator.

    Usage:
        ```python
        config = RelayerConfig()
        async with Relayer(config) as relayer:
            sequence = await relayer.load_sequence()
            tx = await relayer.build(records, sequence)
            if tx:
                await relayer.relay(tx)
        ```

    The sequence is owned by the caller. Concurrent builds that share one
    sequence must be serialized by the caller.
    """

    def __init__(
        self,
        config: RelayerConfig,
        ledger: Optional[LedgerClient] = None,
        signer: Optional[TransactionSigner] = None,
        oracle: Optional[GasPriceOracle] = None,
    ):
        """
        Initialize the relayer.

        Args:
            config: Relayer configuration
            ledger: Custom ledger client (LCD adapter if not provided)
            signer: Custom signer (loaded from the configured mnemonic if not provided)
            oracle: Custom gas price oracle
        """
        self.config = config

        if signer is None:
            signer = TransactionSigner(config)
            if config.mnemonic_value:
                signer.load_from_config()
        self.signer = signer

        self.ledger = ledger or LCDAdapter(config, signer)
        self.oracle = oracle or GasPriceOracle(config)

        self._builder = MessageBuilder(self.ledger, signer.address, config)
        self._assembler = TransactionAssembler(self.ledger, config)

    async def __aenter__(self) -> "Relayer":
        await self.ledger.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release HTTP clients."""
        await self.ledger.disconnect()
        await self.oracle.close()

    async def load_sequence(self) -> int:
        """Get the next sequence of the relayer account."""
        if not self.signer.is_loaded:
            raise TransactionBuildError("Signer key not loaded")
        account = await self.ledger.account_info(self.signer.address)
        return account.sequence

    async def build(
        self,
        records: List[DepositRecord],
        sequence: int,
    ) -> Optional[SignedTransaction]:
        """
        Build a signed relay transaction for a batch of deposits.

        Args:
            records: Deposits to relay
            sequence: Account sequence to sign with

        Returns:
            Signed transaction, or None if no deposit is eligible

        Raises:
            TransactionBuildError: If the relayer cannot build at all
            LedgerConnectionError: If simulation or account lookup fails
        """
        if not self.signer.is_loaded:
            raise TransactionBuildError("Signer key not loaded")
        if not self.config.donation_address:
            raise TransactionBuildError("Donation address not configured")

        prepared = self._builder.prepare(records)
        if not prepared:
            logger.info("relay_batch_empty", records=len(records))
            return None

        batch, gas_price = await asyncio.gather(
            self._builder.messages_for(prepared),
            self.oracle.fetch_gas_price(),
        )
        if batch.is_empty:
            logger.info("relay_batch_empty", records=len(records))
            return None

        return await self._assembler.assemble(batch.messages, sequence, gas_price, batch.tax)

    async def relay(self, tx: SignedTransaction) -> BroadcastResult:
        """
        Submit a signed transaction to the node's pool.

        A transaction that is already pending counts as submitted.

        Args:
            tx: Transaction from ``build``

        Returns:
            Broadcast result

        Raises:
            BroadcastError: If the node rejects the transaction
        """
        result = await self.ledger.broadcast_sync(tx.tx)

        if result.code == self.config.duplicate_tx_code:
            logger.info("relay_tx_already_pending", tx_hash=tx.tx_hash)
            return result

        if result.is_error:
            logger.error(
                "relay_tx_rejected",
                tx_hash=tx.tx_hash,
                code=result.code,
                raw_log=result.raw_log,
            )
            raise BroadcastError(result.code, result.raw_log)

        logger.info("relay_tx_submitted", tx_hash=tx.tx_hash)
        return result

    async def lookup_transaction(self, tx_hash: str) -> TxLookup:
        """
        Look up a transaction, keeping "not found" apart from "could not ask".

        Args:
            tx_hash: Transaction hash

        Returns:
            Lookup status with the transaction details when found
        """
        try:
            info = await self.ledger.query_by_hash(tx_hash)
        except (LedgerConnectionError, KeyError, ValueError) as e:
            logger.warning("tx_lookup_unavailable", tx_hash=tx_hash, error=str(e))
            return TxLookup(status=TxLookupStatus.UNAVAILABLE, error=str(e))

        if info is None:
            return TxLookup(status=TxLookupStatus.NOT_FOUND)
        return TxLookup(status=TxLookupStatus.FOUND, info=info)

    async def get_transaction(self, tx_hash: str) -> Optional[TxInfo]:
        """
        Get an included transaction.

        Returns:
            Transaction details, or None when it is unknown or the ledger
            could not be reached; use ``lookup_transaction`` to tell them apart
        """
        lookup = await self.lookup_transaction(tx_hash)
        return lookup.info
