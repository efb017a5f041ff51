"""Host model the aggregator runs against: state, tokens and venues."""

from aggregator.chain.state import ChainState
from aggregator.chain.tokens import Ledger, WrappedNative
from aggregator.chain.venues import V2Factory, V2Router, V3Factory, V3Router, VenueBook
from aggregator.chain.web3_venues import Web3V2Venue, Web3V3Venue, connect_venues

__all__ = [
    "ChainState",
    "Ledger",
    "WrappedNative",
    "V2Factory",
    "V2Router",
    "V3Factory",
    "V3Router",
    "VenueBook",
    # Read-only RPC venues (requires the rpc extra at call time)
    "Web3V2Venue",
    "Web3V3Venue",
    "connect_venues",
]
