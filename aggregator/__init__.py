"""DEX aggregator: best-rate quoting and native-to-token swaps across V2/V3 venues."""

from aggregator.network import DecentralizedExchangeNetwork

__version__ = "0.1.0"
__all__ = ["DecentralizedExchangeNetwork", "__version__"]
