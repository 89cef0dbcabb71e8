"""
Transaction Assembler - simulates, sizes the fee and signs relay transactions.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import structlog

from relayer.config import RelayerConfig
from relayer.core.coins import Coins
from relayer.core.messages import OutboundMessage
from relayer.core.transaction import SignedTransaction
from relayer.node.interface import Fee, LedgerClient, SimulationResult

logger = structlog.get_logger(__name__)


class TransactionBuildError(Exception):
    """Raised when transaction construction fails."""
    pass


def compute_fee(simulation: SimulationResult, tax: Coins, gas_surcharge: int) -> Fee:
    """
    Size the final fee from a simulation.

    Transfers of taxed denoms consume extra gas the dry-run does not see, so
    the gas limit gets a fixed surcharge and the simulated fee is scaled by the
    same proportion. The batch's transfer tax is paid on top.

    Args:
        simulation: Dry-run gas limit and fee
        tax: Tax owed per denom
        gas_surcharge: Extra gas units

    Returns:
        Fee with gas limit ``simulated + surcharge`` and, per denom,
        ``ceil(simulated_fee * (1 + surcharge / simulated_gas)) + tax``
    """
    if simulation.gas_limit <= 0:
        raise TransactionBuildError(f"Simulation returned unusable gas limit {simulation.gas_limit}")

    overhead = 1 + Decimal(gas_surcharge) / Decimal(simulation.gas_limit)
    amount = simulation.fee_amounts.mul(overhead).to_int_ceil().add(tax)

    return Fee(gas_limit=simulation.gas_limit + gas_surcharge, amount=amount)


class TransactionAssembler:
    """
    Builds signed relay transactions.

    The sequence is supplied by the caller and used as-is for both the
    simulation and the signature.
    """

    def __init__(self, ledger: LedgerClient, config: RelayerConfig):
        self.ledger = ledger
        self.config = config

    async def assemble(
        self,
        msgs: List[OutboundMessage],
        sequence: int,
        gas_price: Optional[str],
        tax: Coins,
    ) -> SignedTransaction:
        """
        Simulate, size the fee, sign and hash.

        Args:
            msgs: Messages to include
            sequence: Account sequence to sign with
            gas_price: Oracle gas price, or None for default pricing
            tax: Transfer tax accumulated by the message builder

        Returns:
            The signed transaction

        Raises:
            TransactionBuildError: If the simulation result is unusable
        """
        if not msgs:
            raise TransactionBuildError("Cannot assemble a transaction without messages")

        simulation = await self.ledger.simulate(msgs, sequence, gas_price)
        fee = compute_fee(simulation, tax, self.config.gas_surcharge)

        tx = await self.ledger.sign_and_assemble(msgs, sequence, fee)
        tx_hash = self.ledger.hash(tx)

        logger.info(
            "relay_tx_built",
            tx_hash=tx_hash,
            sequence=sequence,
            messages=len(msgs),
            gas_price=gas_price or self.config.gas_price,
            gas_limit=fee.gas_limit,
            fee=repr(fee.amount),
        )

        return SignedTransaction(tx=tx, tx_hash=tx_hash, created_at=datetime.now(timezone.utc))
