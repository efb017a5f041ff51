"""Fungible token balances and the wrapped native asset."""

from __future__ import annotations

import structlog

from aggregator.chain.state import ChainState
from aggregator.constants import NATIVE
from aggregator.errors import TransferFailed
from aggregator.models.types import normalize_address

logger = structlog.get_logger()


class Ledger:
    """Balances of every token (and the native asset) by holder.

    The native asset is keyed by NATIVE (the zero address). All writes go
    through the ChainState, so an enclosing atomic() scope covers them.
    """

    def __init__(self, state: ChainState | None = None) -> None:
        self.state = state or ChainState()
        self._native_rejecters: set[str] = set()

    @staticmethod
    def _key(token: str, holder: str) -> tuple[str, str, str]:
        return ("balance", normalize_address(token), normalize_address(holder))

    def balance_of(self, token: str, holder: str) -> int:
        return self.state.get(self._key(token, holder))

    def native_balance(self, holder: str) -> int:
        return self.balance_of(NATIVE, holder)

    def total_supply(self, token: str) -> int:
        return self.state.get(("supply", normalize_address(token)))

    def mint(self, token: str, holder: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount: {amount}")
        self.state.add(self._key(token, holder), amount)
        self.state.add(("supply", normalize_address(token)), amount)

    def burn(self, token: str, holder: str, amount: int) -> None:
        balance = self.balance_of(token, holder)
        if amount < 0 or amount > balance:
            raise TransferFailed(
                f"Cannot burn {amount} of {token} from {holder} (balance {balance})"
            )
        self.state.add(self._key(token, holder), -amount)
        self.state.add(("supply", normalize_address(token)), -amount)

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        """Move amount of token from sender to recipient.

        Raises:
            TransferFailed: On insufficient balance, a negative amount, or a
                recipient that refuses the native asset
        """
        if amount < 0:
            raise TransferFailed(f"Negative transfer amount: {amount}")

        token_norm = normalize_address(token)
        recipient_norm = normalize_address(recipient)
        if token_norm == NATIVE and recipient_norm in self._native_rejecters:
            raise TransferFailed(f"Recipient {recipient_norm} rejected native transfer")

        balance = self.balance_of(token_norm, sender)
        if balance < amount:
            raise TransferFailed(
                f"Insufficient balance of {token_norm} for {sender}: {balance} < {amount}"
            )

        self.state.add(self._key(token_norm, sender), -amount)
        self.state.add(self._key(token_norm, recipient_norm), amount)

    def reject_native(self, address: str) -> None:
        """Make address refuse native transfers (a contract without a receive hook)."""
        self._native_rejecters.add(normalize_address(address))

    def accept_native(self, address: str) -> None:
        self._native_rejecters.discard(normalize_address(address))


class WrappedNative:
    """Wrapped native token: deposit native for an equal token balance."""

    def __init__(self, ledger: Ledger, address: str) -> None:
        self.ledger = ledger
        self.address = normalize_address(address)

    def balance_of(self, holder: str) -> int:
        return self.ledger.balance_of(self.address, holder)

    def deposit(self, holder: str, amount: int) -> None:
        self.ledger.transfer(NATIVE, holder, self.address, amount)
        self.ledger.mint(self.address, holder, amount)
        logger.debug("wrapped_native_deposit", holder=holder, amount=amount)

    def withdraw(self, holder: str, amount: int) -> None:
        self.ledger.burn(self.address, holder, amount)
        self.ledger.transfer(NATIVE, self.address, holder, amount)
        logger.debug("wrapped_native_withdraw", holder=holder, amount=amount)
