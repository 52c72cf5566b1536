"""
Pagination Conformance Tests

INVARIANT: Walking pages from cursor=None until next is None visits every
account with a non-zero balance exactly once, in slot order, for any page size.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from deposit_ledger import Config, InsufficientBalance, Ledger, MemoryStorage

from conformance.strategies import operations, forward_entries, stored_balances
from conftest import coins


CONFIG = Config(owner="owner")


class TestPaginationProperties:

    @given(operations, st.integers(min_value=1, max_value=8))
    @settings(max_examples=100)
    def test_pages_cover_every_account_once(self, ops, limit):
        """
        PROPERTY: Concatenated pages equal the forward index in slot order.
        """
        ledger = Ledger(MemoryStorage())
        for kind, account, amount in ops:
            if kind == "deposit":
                ledger.deposit(CONFIG, account, coins(amount))
            else:
                try:
                    ledger.withdraw(CONFIG, account, amount)
                except InsufficientBalance:
                    pass

        seen = []
        cursor = None
        while True:
            page = ledger.enumerate(cursor, limit)
            assert len(page) <= limit
            seen.extend(page.entries)
            if page.next is None:
                break
            assert page.next == page.entries[-1][0]
            cursor = page.next

        forward = forward_entries(ledger)
        assert [a for a, _ in seen] == [forward[s] for s in sorted(forward)]
        assert dict(seen) == stored_balances(ledger)
