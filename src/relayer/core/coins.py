"""
Coin arithmetic.

Denom-qualified decimal amounts used for transfer values, taxes and fees.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal, InvalidOperation, getcontext, localcontext
from typing import Dict, Iterable, Iterator, List, Union

Number = Union[int, str, Decimal]

_COIN_RE = re.compile(r"^(\d+(?:\.\d+)?)([a-zA-Z][a-zA-Z0-9/:._-]{1,127})$")

# Enough significant digits for any 256-bit integer amount
AMOUNT_PRECISION = 78


def amount_context():
    """Decimal context in which amount arithmetic never rounds."""
    ctx = getcontext().copy()
    ctx.prec = max(ctx.prec, AMOUNT_PRECISION)
    return localcontext(ctx)


def _to_decimal(value: Number) -> Decimal:
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid coin amount: {value!r}")


@dataclass(frozen=True)
class Coin:
    """A single denom-qualified amount."""
    denom: str
    amount: Decimal

    def __post_init__(self):
        object.__setattr__(self, "amount", _to_decimal(self.amount))

    @classmethod
    def from_str(cls, text: str) -> "Coin":
        """Parse a coin string such as ``"0.15uusd"``."""
        match = _COIN_RE.match(text.strip())
        if not match:
            raise ValueError(f"Invalid coin string: {text!r}")
        return cls(match.group(2), Decimal(match.group(1)))

    def to_int_ceil(self) -> "Coin":
        """Round the amount up to a whole unit."""
        return Coin(self.denom, self.amount.to_integral_value(rounding=ROUND_CEILING))

    def __str__(self) -> str:
        with amount_context():
            return f"{self.amount.normalize():f}{self.denom}"


class Coins:
    """
    A denom -> amount mapping.

    Used for fee amounts and for the per-batch tax accumulator. Instances are
    treated as values: arithmetic returns a new ``Coins``.
    """

    def __init__(self, coins: Union[Iterable[Coin], Dict[str, Number], None] = None):
        self._amounts: Dict[str, Decimal] = {}
        if coins is None:
            return
        if isinstance(coins, dict):
            coins = [Coin(denom, amount) for denom, amount in coins.items()]
        with amount_context():
            for coin in coins:
                self._amounts[coin.denom] = self._amounts.get(coin.denom, Decimal(0)) + coin.amount

    @classmethod
    def from_str(cls, text: str) -> "Coins":
        """Parse a comma separated coin list such as ``"0.15uusd,0.01uluna"``."""
        parts = [p for p in text.split(",") if p.strip()]
        return cls(Coin.from_str(p) for p in parts)

    def get(self, denom: str) -> Decimal:
        return self._amounts.get(denom, Decimal(0))

    def denoms(self) -> List[str]:
        return sorted(self._amounts)

    def add(self, other: Union["Coins", Coin]) -> "Coins":
        others = [other] if isinstance(other, Coin) else list(other)
        return Coins(list(self) + others)

    def mul(self, factor: Number) -> "Coins":
        factor = _to_decimal(factor)
        with amount_context():
            return Coins([Coin(c.denom, c.amount * factor) for c in self])

    def to_int_ceil(self) -> "Coins":
        return Coins(c.to_int_ceil() for c in self)

    def to_data(self) -> List[dict]:
        """Convert to the LCD/JSON coin list representation."""
        with amount_context():
            return [{"denom": c.denom, "amount": f"{c.amount.normalize():f}"} for c in self]

    def __iter__(self) -> Iterator[Coin]:
        for denom in self.denoms():
            yield Coin(denom, self._amounts[denom])

    def __len__(self) -> int:
        return len(self._amounts)

    def __bool__(self) -> bool:
        return bool(self._amounts)

    def __contains__(self, denom: str) -> bool:
        return denom in self._amounts

    def __eq__(self, other):
        if isinstance(other, Coins):
            return self._amounts == other._amounts
        return False

    def __repr__(self) -> str:
        return f"Coins({','.join(str(c) for c in self)})"
