"""
test_balances.py - Unit tests for BalanceStore

Tests:
- Deposits create and grow entries and the aggregate total
- Withdrawals shrink entries and delete them at exactly zero
- Amount validation and insufficient balance
"""

import pytest

from deposit_ledger import (
    BalanceChange, InsufficientBalance, InvalidAmount,
)
from deposit_ledger.storage import balance_key


class TestDeposit:
    """Tests for BalanceStore.deposit()."""

    def test_first_deposit_inserts(self, balances):
        assert balances.deposit("alice", 1000) is BalanceChange.INSERTED
        assert balances.balance_of("alice") == 1000
        assert balances.total() == 1000

    def test_second_deposit_sums(self, balances):
        """Two deposits by the same account sum and report no new entry."""
        balances.deposit("alice", 1000)
        assert balances.deposit("alice", 500) is BalanceChange.UNCHANGED
        assert balances.balance_of("alice") == 1500
        assert balances.total() == 1500

    def test_total_spans_accounts(self, balances):
        balances.deposit("alice", 1000)
        balances.deposit("bob", 2000)
        assert balances.total() == 3000

    def test_large_amounts_do_not_overflow(self, balances):
        big = 2 ** 128 - 1
        balances.deposit("whale", big)
        balances.deposit("whale", 1)
        assert balances.balance_of("whale") == 2 ** 128

    @pytest.mark.parametrize("amount", [0, -1])
    def test_non_positive_amount_rejected(self, balances, amount):
        with pytest.raises(InvalidAmount):
            balances.deposit("alice", amount)
        assert balances.total() == 0

    def test_non_integer_amount_rejected(self, balances):
        with pytest.raises(InvalidAmount):
            balances.deposit("alice", True)


class TestWithdraw:
    """Tests for BalanceStore.withdraw()."""

    def test_partial_withdraw(self, balances):
        balances.deposit("alice", 1000)
        assert balances.withdraw("alice", 400) is BalanceChange.UNCHANGED
        assert balances.balance_of("alice") == 600
        assert balances.total() == 600

    def test_full_withdraw_deletes_entry(self, storage, balances):
        """A zero balance is never stored."""
        balances.deposit("alice", 1000)
        assert balances.withdraw("alice", 1000) is BalanceChange.REMOVED
        assert not storage.has(balance_key("alice"))
        assert balances.balance_of("alice") == 0
        assert balances.total() == 0

    def test_insufficient_balance_leaves_state(self, balances):
        balances.deposit("alice", 1000)
        with pytest.raises(InsufficientBalance):
            balances.withdraw("alice", 1001)
        assert balances.balance_of("alice") == 1000
        assert balances.total() == 1000

    def test_unknown_account_has_nothing(self, balances):
        with pytest.raises(InsufficientBalance):
            balances.withdraw("nobody", 1)

    def test_zero_withdraw_is_invalid_amount(self, balances):
        """Zero is an invalid amount, not an insufficient balance."""
        balances.deposit("alice", 1000)
        with pytest.raises(InvalidAmount):
            balances.withdraw("alice", 0)


class TestBalanceOf:

    def test_absent_account_is_zero(self, balances):
        assert balances.balance_of("nobody") == 0
