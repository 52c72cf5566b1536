"""
bank.py - Custody infrastructure for the deposit pool

The pool only describes transfers; the host moves the funds. This module
provides the query side the pool needs and a small in-memory custody
simulator for tests and demos.

Classes:
- BankQuerier: Protocol (defined in core) for balance queries
- InMemoryBank: Tracks holdings per (address, denom) and applies Responses
"""

from __future__ import annotations
from typing import Dict, Iterable, Optional, Tuple

from .core import Coin, Response, Transfer


class InMemoryBank:
    """
    Custody simulator.

    Typical use in a test:
        bank = InMemoryBank({("alice", "uusd"): 5000})
        bank.send("alice", pool.address, [Coin("uusd", 1000)])
        response = pool.deposit(MessageInfo("alice", (Coin("uusd", 1000),)))
        bank.apply(pool.address, response)
    """

    def __init__(self, holdings: Optional[Dict[Tuple[str, str], int]] = None):
        self.holdings: Dict[Tuple[str, str], int] = dict(holdings or {})

    def query_balance(self, address: str, denom: str) -> int:
        return self.holdings.get((address, denom), 0)

    def mint(self, address: str, coin: Coin) -> None:
        """Create funds out of thin air (test setup, out-of-band arrivals)."""
        if coin.amount <= 0:
            raise ValueError(f"mint amount must be positive, got {coin.amount}")
        key = (address, coin.denom)
        self.holdings[key] = self.holdings.get(key, 0) + coin.amount

    def send(self, source: str, dest: str, coins: Iterable[Coin]) -> None:
        """
        Move coins between addresses, all or nothing.

        Raises:
            ValueError: If the source cannot cover every coin.
        """
        coins = list(coins)
        needed: Dict[str, int] = {}
        for coin in coins:
            needed[coin.denom] = needed.get(coin.denom, 0) + coin.amount
        for denom, amount in needed.items():
            available = self.query_balance(source, denom)
            if available < amount:
                raise ValueError(
                    f"{source} holds {available}{denom}, cannot send {amount}{denom}"
                )
        for coin in coins:
            self.holdings[(source, coin.denom)] -= coin.amount
            dest_key = (dest, coin.denom)
            self.holdings[dest_key] = self.holdings.get(dest_key, 0) + coin.amount

    def apply(self, source: str, response: Response) -> None:
        """Execute every Transfer in `response` from `source`."""
        for transfer in response.transfers:
            self.execute(source, transfer)

    def execute(self, source: str, transfer: Transfer) -> None:
        self.send(source, transfer.to_address, [Coin(transfer.denom, transfer.amount)])

    def __repr__(self) -> str:
        return f"InMemoryBank({len(self.holdings)} holdings)"
