"""
index.py - Compact index over accounts with a non-zero balance

The index is an arena-with-handles: a dense forward map slot -> account and
a reverse map account -> slot. Occupied slots are always exactly
0..count-1, so enumeration can walk slots without ever loading the whole
account set.

    insert(C) with A, B already indexed:

        slot:    0   1   2
        account: A   B   C        count = 3

    remove(A) swaps the last account into the vacated slot:

        slot:    0   1
        account: C   B            count = 2

Both operations are O(1).
"""

from __future__ import annotations
from typing import Optional

from .core import (
    Account, IndexConversionFailed, IndexInconsistency, SlotOutOfRange, MAX_SLOT,
)
from .storage import (
    Storage, USER_COUNT_KEY, index_key, reverse_index_key,
)


class CompactIndex:
    """Forward map, reverse map and slot counter over a Storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    # ========================================================================
    # READS
    # ========================================================================

    @property
    def count(self) -> int:
        """Number of occupied slots, as stored."""
        return self.storage.get(USER_COUNT_KEY, 0)

    def account_at(self, slot: int) -> Optional[Account]:
        """Account stored at `slot`, or None if the slot is empty."""
        return self.storage.get(index_key(slot))

    def slot_of(self, account: Account) -> Optional[int]:
        """Slot assigned to `account`, or None if it is not indexed."""
        return self.storage.get(reverse_index_key(account))

    def __contains__(self, account: Account) -> bool:
        return self.storage.has(reverse_index_key(account))

    def check_slot(self, account: Account, expected_slot: int) -> Optional[str]:
        """
        Two-lookup consistency check for a single account.

        Returns None when the forward and reverse entries agree on
        `expected_slot`, otherwise a description of the mismatch.
        """
        reverse = self.slot_of(account)
        if reverse is None:
            return f"User {account} missing in reverse index"
        if reverse != expected_slot:
            return (
                f"Index mismatch: forward index has {expected_slot}, "
                f"reverse index has {reverse}"
            )
        forward = self.account_at(expected_slot)
        if forward is None:
            return f"User {account} missing in forward index at {expected_slot}"
        if forward != account:
            return f"User mismatch at index {expected_slot}: expected {account}, found {forward}"
        return None

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def insert(self, account: Account) -> int:
        """
        Append `account` at slot `count`.

        Returns:
            The assigned slot.

        Raises:
            IndexInconsistency: If the account is already indexed.
            IndexConversionFailed: If the new count would not fit in a slot
                number.
        """
        if account in self:
            raise IndexInconsistency(f"Index inconsistency: {account} is already indexed")
        slot = self.count
        if slot >= MAX_SLOT:
            raise IndexConversionFailed(slot + 1)
        self.storage.set(index_key(slot), account)
        self.storage.set(reverse_index_key(account), slot)
        self.storage.set(USER_COUNT_KEY, slot + 1)
        return slot

    def remove(self, account: Account) -> None:
        """
        Swap-and-remove `account` from the index.

        If the account is not in the last slot, the account in the last slot
        is moved into its place. The last slot is then deleted, the
        account's reverse entry dropped and the counter decremented.

        With an empty index this only clears a stray reverse entry.

        Raises:
            IndexInconsistency: If the account is not indexed, or the last
                slot is unexpectedly empty.
            SlotOutOfRange: If the account's slot lies outside 0..count-1.
        """
        slot = self.slot_of(account)
        if slot is None:
            raise IndexInconsistency(f"Index inconsistency: {account} is not indexed")

        count = self.count
        if count == 0:
            self.storage.delete(reverse_index_key(account))
            return
        if slot >= count:
            raise SlotOutOfRange(slot, count)

        last = count - 1
        if slot != last:
            moved = self.account_at(last)
            if moved is None:
                raise IndexInconsistency()
            self.storage.set(index_key(slot), moved)
            self.storage.set(reverse_index_key(moved), slot)

        self.storage.delete(index_key(last))
        self.storage.delete(reverse_index_key(account))
        self.storage.set(USER_COUNT_KEY, last)
