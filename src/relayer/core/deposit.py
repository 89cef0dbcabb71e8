"""
Deposit Record model.

Represents a single cross-chain deposit observed by the upstream monitor.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class NativeDenom:
    """Asset native to the destination ledger, e.g. ``uusd``."""
    denom: str


@dataclass(frozen=True)
class ContractAsset:
    """
    Token contract on the destination ledger.

    Attributes:
        contract_address: Address of the token contract
        is_wrapped_mint: True when the relayer mints a wrapped token instead
            of transferring from its own balance
    """
    contract_address: str
    is_wrapped_mint: bool = False


AssetInfo = Union[NativeDenom, ContractAsset]


@dataclass(frozen=True)
class DepositRecord:
    """
    A deposit to relay.

    Attributes:
        destination_address: Requested recipient on the destination ledger
        raw_amount: Amount in 18-decimal base units, as a decimal string
        asset_info: What to send
    """
    destination_address: str
    raw_amount: str
    asset_info: AssetInfo

    @classmethod
    def from_dict(cls, data: dict) -> "DepositRecord":
        """
        Create a DepositRecord from a monitoring payload.

        Accepts both the monitor's camelCase shape
        (``to``/``amount``/``terraAssetInfo``) and snake_case keys.

        Raises:
            ValueError: If the asset info names neither a denom nor a contract
        """
        info = data.get("terraAssetInfo") or data.get("asset_info") or {}
        to = data.get("to", data.get("destination_address", ""))
        amount = data.get("amount", data.get("raw_amount", ""))

        if info.get("denom"):
            asset: AssetInfo = NativeDenom(info["denom"])
        elif info.get("contract_address"):
            asset = ContractAsset(
                contract_address=info["contract_address"],
                is_wrapped_mint=bool(info.get("is_eth_asset", info.get("is_wrapped_mint", False))),
            )
        else:
            raise ValueError(f"Deposit asset info has neither denom nor contract: {info!r}")

        return cls(destination_address=str(to), raw_amount=str(amount), asset_info=asset)
