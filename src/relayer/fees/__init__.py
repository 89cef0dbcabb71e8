"""
Fee estimation.
"""

from relayer.fees.oracle import GasPriceOracle

__all__ = ["GasPriceOracle"]
