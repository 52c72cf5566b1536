"""
test_core.py - Tests for core types and validation helpers
"""

import pytest

from deposit_ledger import (
    Coin, Config, MessageInfo, Response, Transfer, make_response,
    validate_address, validate_funds, verify_owner,
    LedgerError, Unauthorized, ValidationError, StateError, IntegrityError,
    InvalidAmount, InvalidDenom, MultipleDenominations, InvalidTimestamp,
    InsufficientBalance, DestinationNotSet, UnlockTimeNotSet, WithdrawalLocked,
    NoBalanceToWithdraw, CursorNotFound, IndexInconsistency, SlotOutOfRange,
    IndexConversionFailed, InvalidAddress, NotInstantiated, AlreadyInstantiated,
    NoBankAttached,
    DEFAULT_DENOM, MAX_SLOT,
)
from deposit_ledger.core import to_slot


class TestValidateFunds:
    """Funds checks run in a fixed order."""

    def test_single_expected_coin(self):
        assert validate_funds([Coin("uusd", 500)], "uusd") == 500

    def test_no_funds(self):
        with pytest.raises(InvalidAmount):
            validate_funds([], "uusd")

    def test_multiple_coins(self):
        """Two coins are rejected even if both are the expected denomination."""
        with pytest.raises(MultipleDenominations):
            validate_funds([Coin("uusd", 1), Coin("uusd", 2)], "uusd")

    def test_wrong_denom(self):
        with pytest.raises(InvalidDenom) as excinfo:
            validate_funds([Coin("uluna", 500)], "uusd")
        assert excinfo.value.expected == "uusd"
        assert excinfo.value.got == "uluna"
        assert "Expected uusd, got uluna" in str(excinfo.value)

    def test_wrong_denom_checked_before_amount(self):
        with pytest.raises(InvalidDenom):
            validate_funds([Coin("uluna", 0)], "uusd")

    def test_zero_amount(self):
        with pytest.raises(InvalidAmount):
            validate_funds([Coin("uusd", 0)], "uusd")


class TestValidateAddress:

    def test_non_empty_passes(self):
        assert validate_address("alice", "owner") == "alice"

    @pytest.mark.parametrize("address", [None, "", "  \t"])
    def test_empty_rejected(self, address):
        with pytest.raises(InvalidAddress, match="owner cannot be empty"):
            validate_address(address, "owner")


class TestVerifyOwner:

    def test_owner_passes(self):
        verify_owner("owner", Config(owner="owner"))

    def test_other_caller_rejected(self):
        with pytest.raises(Unauthorized, match="Only owner"):
            verify_owner("mallory", Config(owner="owner"))


class TestErrorTaxonomy:
    """Every failure is a LedgerError with a distinct machine-matchable code."""

    ERRORS = [
        (Unauthorized(), LedgerError),
        (InvalidAmount(), ValidationError),
        (InvalidDenom("uusd", "uluna"), ValidationError),
        (MultipleDenominations(), ValidationError),
        (InvalidTimestamp(1, 2), ValidationError),
        (InvalidAddress("owner"), ValidationError),
        (InsufficientBalance(), StateError),
        (DestinationNotSet(), StateError),
        (UnlockTimeNotSet(), StateError),
        (WithdrawalLocked(1, 2), StateError),
        (NoBalanceToWithdraw(), StateError),
        (CursorNotFound("x"), StateError),
        (NotInstantiated(), StateError),
        (AlreadyInstantiated(), StateError),
        (NoBankAttached(), StateError),
        (IndexInconsistency(), IntegrityError),
        (IndexConversionFailed(-1), IntegrityError),
    ]

    @pytest.mark.parametrize("error,family", ERRORS)
    def test_family(self, error, family):
        assert isinstance(error, family)
        assert isinstance(error, LedgerError)
        assert str(error)

    def test_codes_are_distinct(self):
        codes = [error.code for error, _ in self.ERRORS]
        assert len(set(codes)) == len(codes)

    def test_slot_out_of_range_is_index_inconsistency(self):
        error = SlotOutOfRange(7, 3)
        assert isinstance(error, IndexInconsistency)
        assert error.code == IndexInconsistency.code


class TestRecords:

    def test_message_info_requires_sender(self):
        with pytest.raises(ValueError):
            MessageInfo("")

    def test_message_info_funds_become_tuple(self):
        info = MessageInfo("alice", [Coin(DEFAULT_DENOM, 5)])
        assert info.funds == (Coin(DEFAULT_DENOM, 5),)

    def test_config_default_denom(self):
        assert Config(owner="o").denom == "uusd"

    def test_make_response(self):
        response = make_response(
            "deposit", ("user", "alice"), ("amount", 10), ("event", "deposit"),
            ("event", "user_added"),
        )
        assert response.action == "deposit"
        assert response.attributes[0] == ("action", "deposit")
        assert response.get("amount") == "10"
        assert response.get_all("event") == ["deposit", "user_added"]
        assert response.get("missing") is None
        assert response.transfers == ()

    def test_response_is_immutable(self):
        response = Response(action="x")
        with pytest.raises(AttributeError):
            response.action = "y"

    def test_transfer_repr(self):
        assert repr(Transfer("alice", "uusd", 5)) == "Transfer(5uusd → alice)"


class TestToSlot:

    def test_range(self):
        assert to_slot(0) == 0
        assert to_slot(MAX_SLOT) == MAX_SLOT

    @pytest.mark.parametrize("value", [-1, MAX_SLOT + 1])
    def test_out_of_range(self, value):
        with pytest.raises(IndexConversionFailed):
            to_slot(value)
