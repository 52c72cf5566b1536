"""
Shared hypothesis strategies and model helpers for conformance tests.
"""

from typing import Dict

from hypothesis import strategies as st

from deposit_ledger import Ledger
from deposit_ledger.storage import balance_key, index_key, reverse_index_key


ACCOUNTS = ["alice", "bob", "charlie", "dave", "eve", "frank"]


@st.composite
def operation(draw):
    """A single ("deposit" | "withdraw", account, amount) step."""
    kind = draw(st.sampled_from(["deposit", "withdraw"]))
    account = draw(st.sampled_from(ACCOUNTS))
    amount = draw(st.integers(min_value=1, max_value=1000))
    return kind, account, amount


operations = st.lists(operation(), min_size=1, max_size=60)


def stored_balances(ledger: Ledger) -> Dict[str, int]:
    """Every stored balance, found by direct key lookups (no index involved)."""
    return {
        account: ledger.storage.get(balance_key(account))
        for account in ACCOUNTS
        if ledger.storage.has(balance_key(account))
    }


def forward_entries(ledger: Ledger) -> Dict[int, str]:
    """Forward index entries within the stored range."""
    return {
        slot: ledger.storage.get(index_key(slot))
        for slot in range(ledger.count())
        if ledger.storage.has(index_key(slot))
    }


def reverse_entries(ledger: Ledger) -> Dict[str, int]:
    return {
        account: ledger.storage.get(reverse_index_key(account))
        for account in ACCOUNTS
        if ledger.storage.has(reverse_index_key(account))
    }
