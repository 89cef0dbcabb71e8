"""
Gas price oracle.

Fetches the current gas price from an external price table. Failures never
propagate: the relayer falls back to the configured default price.
"""

from typing import Optional

import httpx
import structlog

from relayer.config import RelayerConfig
from relayer.core.coins import Coin

logger = structlog.get_logger(__name__)


class GasPriceOracle:
    """Reads a ``{denom: price}`` JSON table and forms a gas price string."""

    def __init__(
        self,
        config: RelayerConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.endpoint = config.gas_price_endpoint
        self.denom = config.gas_price_denom
        self._client = client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_gas_price(self) -> Optional[str]:
        """
        Fetch the gas price for the configured denom.

        Returns:
            Price string such as ``"0.15uusd"``, or None to use default pricing
        """
        if not self.endpoint:
            return None

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.request_timeout_seconds)

        try:
            response = await self._client.get(self.endpoint)
            response.raise_for_status()
            price = response.json()[self.denom]
            if price is None or isinstance(price, (dict, list)):
                raise ValueError(f"unusable price {price!r}")
            gas_price = str(Coin.from_str(f"{price}{self.denom}"))
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(
                "gas_price_fallback",
                endpoint=self.endpoint,
                denom=self.denom,
                error=str(e),
            )
            return None

        logger.debug("gas_price_fetched", gas_price=gas_price)
        return gas_price
