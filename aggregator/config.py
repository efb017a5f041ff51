"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from aggregator.constants import (
    DEFAULT_PARTNER_FEE_NUMERATOR,
    DEFAULT_SYSTEM_FEE_NUMERATOR,
    WETH_BASE,
)

# Placeholder identities for a local deployment; override in any real one
DEFAULT_OWNER = "0x00000000000000000000000000000000000000a1"
DEFAULT_PARTNER = "0x00000000000000000000000000000000000000b2"
DEFAULT_SYSTEM_FEE_RECEIVER = "0x00000000000000000000000000000000000000c3"
DEFAULT_PARTNER_FEE_RECEIVER = "0x00000000000000000000000000000000000000d4"

_TRUE_VALUES = ("true", "1", "yes")


def _get_bool(env: Mapping[str, str], name: str, default: str = "false") -> bool:
    return env.get(name, default).lower() in _TRUE_VALUES


def _get_list(env: Mapping[str, str], name: str) -> tuple[str, ...]:
    """Comma-separated values, blanks dropped."""
    return tuple(item.strip() for item in env.get(name, "").split(",") if item.strip())


def _get_api_keys(env: Mapping[str, str], name: str) -> dict[str, str]:
    """Parse `key:address` pairs into a key -> lowercase address map."""
    keys: dict[str, str] = {}
    for entry in _get_list(env, name):
        key, sep, address = entry.partition(":")
        if not sep or not key or not address:
            raise ValueError(f"{name} entries must look like key:address, got {entry!r}")
        keys[key] = address.lower()
    return keys


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from err


@dataclass(frozen=True)
class Settings:
    """Aggregator deployment settings.

    Environment variables (all optional):
    - AGGREGATOR_HOST / AGGREGATOR_PORT: API bind address (0.0.0.0:8000)
    - AGGREGATOR_DEBUG: Enable reload and debug logging (false)
    - AGGREGATOR_LOG_JSON: JSON log lines instead of console output (false)
    - AGGREGATOR_SNAPSHOT: Path to a venue snapshot JSON file (unset)
    - AGGREGATOR_SYSTEM_FEE_NUMERATOR / AGGREGATOR_PARTNER_FEE_NUMERATOR: bps (25 / 50)
    - AGGREGATOR_OWNER, AGGREGATOR_PARTNER, AGGREGATOR_SYSTEM_FEE_RECEIVER,
      AGGREGATOR_PARTNER_FEE_RECEIVER: identities (local placeholders)
    - AGGREGATOR_WRAPPED_NATIVE: Wrapped native token (WETH on Base)
    - AGGREGATOR_SUPPORTED_POOLS: Extra pools to whitelist, comma-separated
    - AGGREGATOR_RPC_URL: JSON-RPC endpoint for read-only venues (unset)
    - AGGREGATOR_RPC_V2_ROUTERS / AGGREGATOR_RPC_V3_ROUTERS: Routers read
      through AGGREGATOR_RPC_URL, comma-separated
    - AGGREGATOR_API_KEYS: `key:address` pairs, comma-separated. A swap
      request is paid by the address its X-API-Key maps to; with no keys
      configured the swap endpoint rejects every request
    """

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_json: bool = False
    snapshot_path: str | None = None
    system_fee_numerator: int = DEFAULT_SYSTEM_FEE_NUMERATOR
    partner_fee_numerator: int = DEFAULT_PARTNER_FEE_NUMERATOR
    owner: str = DEFAULT_OWNER
    partner: str = DEFAULT_PARTNER
    system_fee_receiver: str = DEFAULT_SYSTEM_FEE_RECEIVER
    partner_fee_receiver: str = DEFAULT_PARTNER_FEE_RECEIVER
    wrapped_native: str = WETH_BASE
    supported_pools: tuple[str, ...] = ()
    rpc_url: str | None = None
    rpc_v2_routers: tuple[str, ...] = ()
    rpc_v3_routers: tuple[str, ...] = ()
    api_keys: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from the environment.

        Raises:
            ValueError: If a numeric variable is not an integer or an API
                key entry is malformed
        """
        env = os.environ if env is None else env
        return cls(
            host=env.get("AGGREGATOR_HOST", "0.0.0.0"),
            port=_get_int(env, "AGGREGATOR_PORT", 8000),
            debug=_get_bool(env, "AGGREGATOR_DEBUG"),
            log_json=_get_bool(env, "AGGREGATOR_LOG_JSON"),
            snapshot_path=env.get("AGGREGATOR_SNAPSHOT") or None,
            system_fee_numerator=_get_int(
                env, "AGGREGATOR_SYSTEM_FEE_NUMERATOR", DEFAULT_SYSTEM_FEE_NUMERATOR
            ),
            partner_fee_numerator=_get_int(
                env, "AGGREGATOR_PARTNER_FEE_NUMERATOR", DEFAULT_PARTNER_FEE_NUMERATOR
            ),
            owner=env.get("AGGREGATOR_OWNER", DEFAULT_OWNER),
            partner=env.get("AGGREGATOR_PARTNER", DEFAULT_PARTNER),
            system_fee_receiver=env.get("AGGREGATOR_SYSTEM_FEE_RECEIVER", DEFAULT_SYSTEM_FEE_RECEIVER),
            partner_fee_receiver=env.get(
                "AGGREGATOR_PARTNER_FEE_RECEIVER", DEFAULT_PARTNER_FEE_RECEIVER
            ),
            wrapped_native=env.get("AGGREGATOR_WRAPPED_NATIVE", WETH_BASE),
            supported_pools=_get_list(env, "AGGREGATOR_SUPPORTED_POOLS"),
            rpc_url=env.get("AGGREGATOR_RPC_URL") or None,
            rpc_v2_routers=_get_list(env, "AGGREGATOR_RPC_V2_ROUTERS"),
            rpc_v3_routers=_get_list(env, "AGGREGATOR_RPC_V3_ROUTERS"),
            api_keys=_get_api_keys(env, "AGGREGATOR_API_KEYS"),
        )


__all__ = ["Settings"]
