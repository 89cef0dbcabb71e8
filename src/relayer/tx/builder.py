"""
Message Builder - turns deposit records into outbound ledger messages.

Validates and rescales each deposit, looks up the transfer tax for native
denoms, and emits one message per eligible deposit together with the tax the
batch owes.
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import structlog

from relayer.config import RelayerConfig
from relayer.core.address import normalize_address
from relayer.core.coins import Coin, amount_context
from relayer.core.deposit import AssetInfo, ContractAsset, DepositRecord, NativeDenom
from relayer.core.messages import (
    ContractMint,
    ContractTransfer,
    MessageBatch,
    OutboundMessage,
    Transfer,
)
from relayer.node.interface import LedgerClient

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PreparedDeposit:
    """A deposit that passed local validation."""
    recipient: str
    amount: int
    asset_info: AssetInfo


@dataclass(frozen=True)
class TaxParameters:
    """Tax rate and the caps of every denom in a batch."""
    rate: Decimal
    caps: Dict[str, Decimal]

    def tax_for(self, denom: str, amount: int) -> Coin:
        """Tax owed on sending ``amount`` of ``denom``, rounded up to a whole unit."""
        with amount_context():
            owed = min(self.caps[denom], self.rate * amount)
        return Coin(denom, owed).to_int_ceil()


class MessageBuilder:
    """
    Builds outbound messages for a batch of deposits.

    Local validation runs first; the read-only tax lookups (one rate, one cap
    per distinct native denom) are then dispatched concurrently and gathered
    before any message is emitted.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        sender: str,
        config: RelayerConfig,
    ):
        """
        Initialize the message builder.

        Args:
            ledger: Ledger client used for tax lookups
            sender: Relayer account address, the sender of every message
            config: Relayer configuration
        """
        self.ledger = ledger
        self.sender = sender
        self.config = config

    def resolve_recipient(self, address: str) -> str:
        """Return the canonical address, or the donation address if it is malformed."""
        normalized = normalize_address(address, self.config.address_prefix)
        if normalized is not None:
            return normalized

        logger.info(
            "recipient_replaced_by_donation",
            requested=address,
            donation=self.config.donation_address,
        )
        return self.config.donation_address

    def rescale(self, raw_amount: str) -> Optional[int]:
        """
        Convert an 18-decimal amount to 6 decimals by dropping low digits.

        Returns:
            Rescaled amount, or None if the raw amount is not eligible
        """
        if not raw_amount.isascii() or not raw_amount.isdigit():
            return None
        if len(raw_amount) < self.config.min_amount_digits:
            return None

        shift = self.config.decimal_shift
        amount = int(raw_amount[:len(raw_amount) - shift] if shift else raw_amount)
        return amount or None

    def prepare(self, records: List[DepositRecord]) -> List[PreparedDeposit]:
        """
        Validate and rescale deposits without touching the network.

        Args:
            records: Deposits in arrival order

        Returns:
            Eligible deposits, in the same order
        """
        prepared = []
        for record in records:
            amount = self.rescale(record.raw_amount)
            if amount is None:
                logger.debug(
                    "deposit_skipped",
                    reason="amount_precision",
                    raw_amount=record.raw_amount,
                )
                continue

            prepared.append(PreparedDeposit(
                recipient=self.resolve_recipient(record.destination_address),
                amount=amount,
                asset_info=record.asset_info,
            ))
        return prepared

    async def fetch_tax_parameters(self, denoms: List[str]) -> TaxParameters:
        """
        Look up the tax rate and the cap of each denom concurrently.

        Args:
            denoms: Distinct native denoms of the batch
        """
        rate, *caps = await asyncio.gather(
            self.ledger.tax_rate(),
            *(self.ledger.tax_cap(denom) for denom in denoms),
        )
        return TaxParameters(rate=rate, caps=dict(zip(denoms, caps)))

    async def resolve_taxes(self, prepared: List[PreparedDeposit]) -> Optional[TaxParameters]:
        """Tax parameters for the batch, or None when it has no native transfers."""
        denoms = native_denoms(prepared)
        if not denoms:
            return None
        return await self.fetch_tax_parameters(denoms)

    def emit(
        self,
        prepared: List[PreparedDeposit],
        taxes: Optional[TaxParameters],
    ) -> MessageBatch:
        """Create one message per prepared deposit and accumulate tax."""
        batch = MessageBatch()
        for deposit in prepared:
            msg, tax = self._message_for(deposit, taxes)
            if msg is None:
                continue
            batch.messages.append(msg)
            if tax is not None:
                batch.tax = batch.tax.add(tax)
        return batch

    def _message_for(
        self,
        deposit: PreparedDeposit,
        taxes: Optional[TaxParameters],
    ) -> Tuple[Optional[OutboundMessage], Optional[Coin]]:
        info = deposit.asset_info

        if isinstance(info, NativeDenom):
            tax = taxes.tax_for(info.denom, deposit.amount)
            relay_amount = deposit.amount - int(tax.amount)
            if relay_amount <= 0:
                logger.debug(
                    "deposit_skipped",
                    reason="consumed_by_tax",
                    amount=deposit.amount,
                    tax=str(tax),
                )
                return None, None

            msg = Transfer(
                from_address=self.sender,
                to_address=deposit.recipient,
                coin=Coin(info.denom, relay_amount),
            )
            return msg, tax

        if isinstance(info, ContractAsset):
            kind = ContractMint if info.is_wrapped_mint else ContractTransfer
            msg = kind(
                from_address=self.sender,
                contract=info.contract_address,
                recipient=deposit.recipient,
                amount=deposit.amount,
            )
            return msg, None

        raise TypeError(f"Unsupported asset info: {type(info).__name__}")

    async def messages_for(self, prepared: List[PreparedDeposit]) -> MessageBatch:
        """
        Look up the batch's tax parameters and emit its messages.

        Args:
            prepared: Deposits that passed ``prepare``

        Returns:
            Messages and accumulated tax; empty if tax consumed every transfer
        """
        batch = self.emit(prepared, await self.resolve_taxes(prepared))

        logger.info(
            "relay_messages_built",
            deposits=len(prepared),
            messages=batch.size,
            tax=repr(batch.tax),
        )
        return batch

    async def build_messages(self, records: List[DepositRecord]) -> Optional[MessageBatch]:
        """
        Build messages for a batch of deposits.

        Args:
            records: Deposits to relay

        Returns:
            Messages and accumulated tax, or None if no deposit is eligible
        """
        prepared = self.prepare(records)
        if not prepared:
            return None

        batch = await self.messages_for(prepared)
        return None if batch.is_empty else batch


def native_denoms(prepared: List[PreparedDeposit]) -> List[str]:
    """Distinct native denoms, in first-seen order."""
    seen: List[str] = []
    for deposit in prepared:
        info = deposit.asset_info
        if isinstance(info, NativeDenom) and info.denom not in seen:
            seen.append(info.denom)
    return seen
