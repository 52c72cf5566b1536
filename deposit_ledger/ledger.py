"""
ledger.py - Indexed deposit ledger

The Ledger composes a BalanceStore and a CompactIndex over one Storage and is
the only component that mutates either. Every balance update reports a
BalanceChange, and the ledger applies the matching index operation, so the
index always holds exactly the accounts with a non-zero balance.

Key responsibilities:
    - deposit(): validate attached funds, credit, insert new accounts
    - withdraw(): debit, remove emptied accounts, describe the payout
    - enumerate(): cursor-based pagination over the compact index
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from .balances import BalanceStore
from .core import (
    Account, BalanceChange, Coin, Config, CursorNotFound, Page, Transfer,
    DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT,
    to_slot, validate_amount, validate_funds,
)
from .index import CompactIndex
from .storage import Storage


def clamp_limit(limit: Optional[int]) -> int:
    """
    Resolve a requested page size.

    None -> DEFAULT_QUERY_LIMIT; anything above MAX_QUERY_LIMIT is clamped
    down, anything below 1 is raised to 1.
    """
    if limit is None:
        return DEFAULT_QUERY_LIMIT
    return max(1, min(limit, MAX_QUERY_LIMIT))


class Ledger:
    """
    Balance map plus compact index, kept consistent under sequential updates.

    The Ledger holds no state of its own; everything lives in `storage`.
    Construct one per call over whichever store (base or staged) the call
    should write to.

    Example:
        ledger = Ledger(MemoryStorage())
        config = Config(owner="owner")
        ledger.deposit(config, "alice", [Coin("uusd", 1000)])
        ledger.balance_of("alice")           # 1000
        ledger.enumerate().entries           # (("alice", 1000),)
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self.balances = BalanceStore(storage)
        self.index = CompactIndex(storage)

    # ========================================================================
    # READS
    # ========================================================================

    def balance_of(self, account: Account) -> int:
        return self.balances.balance_of(account)

    def total(self) -> int:
        return self.balances.total()

    def count(self) -> int:
        return self.index.count

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def deposit(
        self,
        config: Config,
        account: Account,
        funds: Sequence[Coin],
    ) -> Tuple[int, BalanceChange]:
        """
        Credit the attached funds to `account`.

        Args:
            config: Provides the expected denomination.
            account: Depositing account.
            funds: Coins attached to the call; must be exactly one positive
                   amount of config.denom.

        Returns:
            (amount credited, BalanceChange.INSERTED if the account was new)
        """
        amount = validate_funds(funds, config.denom)
        change = self.balances.deposit(account, amount)
        if change is BalanceChange.INSERTED:
            self.index.insert(account)
        return amount, change

    def withdraw(
        self,
        config: Config,
        account: Account,
        amount: int,
    ) -> Tuple[BalanceChange, Transfer]:
        """
        Debit `amount` from `account` and describe the payout.

        Returns:
            (BalanceChange.REMOVED if the account was emptied, the Transfer
            paying `amount` back to `account`)

        Raises:
            InvalidAmount: amount is zero or negative.
            InsufficientBalance: amount exceeds the balance.
        """
        validate_amount(amount)
        change = self.balances.withdraw(account, amount)
        if change is BalanceChange.REMOVED:
            self.index.remove(account)
        return change, Transfer(to_address=account, denom=config.denom, amount=amount)

    # ========================================================================
    # ENUMERATION
    # ========================================================================

    def enumerate(self, cursor: Optional[Account] = None, limit: Optional[int] = None) -> Page:
        """
        Return one page of (account, balance) pairs in slot order.

        Args:
            cursor: Last account of the previous page, or None to start at slot 0.
            limit: Requested page size (see clamp_limit).

        Returns:
            Page whose `next` is the last included account when slots remain
            beyond the page, else None. A full page that ends exactly on the
            last slot has no `next`.

        Raises:
            CursorNotFound: The cursor account is no longer indexed.
        """
        limit = clamp_limit(limit)
        count = self.index.count

        if cursor is None:
            start = 0
        else:
            slot = self.index.slot_of(cursor)
            if slot is None:
                raise CursorNotFound(cursor)
            start = slot + 1

        entries: List[Tuple[Account, int]] = []
        for position in range(start, count):
            account = self.index.account_at(to_slot(position))
            if account is None:
                continue
            balance = self.balances.balance_of(account)
            if balance == 0:
                continue
            entries.append((account, balance))
            if len(entries) >= limit:
                if position + 1 < count:
                    return Page(entries=tuple(entries), next=account)
                break

        return Page(entries=tuple(entries), next=None)

    def iter_all(self, page_size: int = MAX_QUERY_LIMIT):
        """
        Yield every (account, balance) pair by walking pages.

        Only one page is held at a time.
        """
        cursor = None
        while True:
            page = self.enumerate(cursor, page_size)
            yield from page.entries
            if page.next is None:
                return
            cursor = page.next
