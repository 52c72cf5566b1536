"""
balances.py - Per-account balances and the aggregate total

BalanceStore is the single source of truth for "how much does X hold".

Invariants:
    - An account has no entry (implicitly zero) or a strictly positive entry.
      A balance that reaches zero is deleted, never stored.
    - total() == sum of all stored balances, maintained incrementally.

Each update returns a BalanceChange telling the caller whether the account
entered or left the set of non-zero balances; the caller uses it to keep the
compact index in step.
"""

from __future__ import annotations

from .core import (
    Account, BalanceChange,
    InsufficientBalance, IntegrityError,
    validate_amount,
)
from .storage import Storage, TOTAL_DEPOSITS_KEY, balance_key


class BalanceStore:
    """Balance map plus aggregate total over a Storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def balance_of(self, account: Account) -> int:
        """Stored balance, or 0 if the account has no entry. Never fails."""
        return self.storage.get(balance_key(account), 0)

    def total(self) -> int:
        return self.storage.get(TOTAL_DEPOSITS_KEY, 0)

    def deposit(self, account: Account, amount: int) -> BalanceChange:
        """
        Credit `amount` to `account` and to the aggregate total.

        Returns:
            BalanceChange.INSERTED if the account previously had no balance,
            BalanceChange.UNCHANGED otherwise.

        Raises:
            InvalidAmount: If amount is not a positive integer.
        """
        validate_amount(amount)
        current = self.balance_of(account)
        self.storage.set(balance_key(account), current + amount)
        self.storage.set(TOTAL_DEPOSITS_KEY, self.total() + amount)
        return BalanceChange.INSERTED if current == 0 else BalanceChange.UNCHANGED

    def withdraw(self, account: Account, amount: int) -> BalanceChange:
        """
        Debit `amount` from `account` and from the aggregate total.

        All checks run before any write.

        Returns:
            BalanceChange.REMOVED if the balance reached exactly zero (the
            entry is deleted), BalanceChange.UNCHANGED otherwise.

        Raises:
            InvalidAmount: If amount is not a positive integer.
            InsufficientBalance: If amount exceeds the current balance.
            IntegrityError: If the aggregate total is smaller than the debit.
        """
        validate_amount(amount)
        current = self.balance_of(account)
        if current < amount:
            raise InsufficientBalance()
        total = self.total()
        if total < amount:
            raise IntegrityError(
                f"Aggregate total {total} is below a stored balance being withdrawn ({amount})"
            )

        remaining = current - amount
        if remaining == 0:
            self.storage.delete(balance_key(account))
        else:
            self.storage.set(balance_key(account), remaining)
        self.storage.set(TOTAL_DEPOSITS_KEY, total - amount)
        return BalanceChange.REMOVED if remaining == 0 else BalanceChange.UNCHANGED
