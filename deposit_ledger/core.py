"""
Core types and pure functions for the deposit ledger.

This module provides the foundational data structures and protocols:
1. Constants: denomination, pagination limits, timelock delay, slot range
2. Protocols: BankQuerier for read-only custody queries
3. Exceptions: LedgerError and the authorization/validation/state/integrity families
4. Immutable data structures: Coin, MessageInfo, Config, Transfer, Response, Page, ...
5. Validation helpers: validate_funds, validate_address, verify_owner, validate_amount

Everything here is pure. Nothing in this module touches storage.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    List, Optional, Protocol, Sequence, Tuple, runtime_checkable
)


# ============================================================================
# CONSTANTS
# ============================================================================

CONTRACT_NAME = "deposit-ledger"
CONTRACT_VERSION = "1.0.0"

# The pool only ever accepts this denomination (micro-USTC).
DEFAULT_DENOM = "uusd"

# Pagination limits for DepositPool.get_all().
DEFAULT_QUERY_LIMIT = 30
MAX_QUERY_LIMIT = 100

# Minimum distance between "now" and a configured unlock time (7 days).
MIN_TIMELOCK_DELAY = 7 * 24 * 60 * 60

# Slots are unsigned 32-bit integers.
MAX_SLOT = 2 ** 32 - 1


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Opaque, totally ordered account identity.
Account = str

# Ordered (key, value) attribute pairs attached to a Response.
Attributes = Tuple[Tuple[str, str], ...]


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class BankQuerier(Protocol):
    """
    Read-only view of actual custody.

    The pool never moves funds itself. It describes transfers in its
    Response and asks a BankQuerier how much it really holds when sweeping.
    """

    def query_balance(self, address: str, denom: str) -> int:
        """Return the amount of `denom` held by `address` (0 if none)."""
        ...


# ============================================================================
# ENUMS
# ============================================================================

class BalanceChange(Enum):
    """
    Effect of a balance update on index membership.

    UNCHANGED: account was and remains indexed (or was and remains absent).
    INSERTED: account went from zero to a positive balance.
    REMOVED: account went from a positive balance to exactly zero.
    """
    UNCHANGED = "unchanged"
    INSERTED = "inserted"
    REMOVED = "removed"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    code = "ledger_error"


class Unauthorized(LedgerError):
    """Raised when the caller is not the stored owner."""
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized: Only owner can call this function"):
        super().__init__(message)


# --- validation ---------------------------------------------------------------

class ValidationError(LedgerError):
    """Raised when a request carries malformed input."""
    code = "validation_error"


class InvalidAmount(ValidationError):
    code = "invalid_amount"

    def __init__(self, message: str = "Invalid amount: Amount must be greater than zero"):
        super().__init__(message)


class InvalidDenom(ValidationError):
    code = "invalid_denom"

    def __init__(self, expected: str, got: str):
        self.expected = expected
        self.got = got
        super().__init__(f"Invalid denomination: Expected {expected}, got {got}")


class MultipleDenominations(ValidationError):
    code = "multiple_denominations"

    def __init__(self, message: str = "Multiple denominations not allowed"):
        super().__init__(message)


class InvalidTimestamp(ValidationError):
    code = "invalid_timestamp"

    def __init__(self, unlock_timestamp: int, min_timestamp: int):
        self.unlock_timestamp = unlock_timestamp
        self.min_timestamp = min_timestamp
        super().__init__(
            f"Invalid timestamp: unlock time {unlock_timestamp} is before "
            f"the earliest allowed time {min_timestamp}"
        )


class InvalidAddress(ValidationError):
    code = "invalid_address"

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Invalid address: {role} cannot be empty")


# --- state --------------------------------------------------------------------

class StateError(LedgerError):
    """Raised when a well-formed request is not allowed in the current state."""
    code = "state_error"


class InsufficientBalance(StateError):
    code = "insufficient_balance"

    def __init__(self, message: str = "Insufficient balance: User does not have enough balance"):
        super().__init__(message)


class DestinationNotSet(StateError):
    code = "withdrawal_destination_not_set"

    def __init__(self, message: str = "Withdrawal destination not set"):
        super().__init__(message)


class UnlockTimeNotSet(StateError):
    code = "withdrawal_timestamp_not_set"

    def __init__(self, message: str = "Withdrawal unlock timestamp not set"):
        super().__init__(message)


class WithdrawalLocked(StateError):
    code = "withdrawal_not_unlocked"

    def __init__(self, now: int, unlock_timestamp: int):
        self.now = now
        self.unlock_timestamp = unlock_timestamp
        super().__init__(
            f"Withdrawal not unlocked: current time {now} < unlock time {unlock_timestamp}"
        )


class NoBalanceToWithdraw(StateError):
    code = "no_balance_to_withdraw"

    def __init__(self, message: str = "No balance to withdraw"):
        super().__init__(message)


class NotInstantiated(StateError):
    code = "not_instantiated"

    def __init__(self, message: str = "Pool is not instantiated: config missing"):
        super().__init__(message)


class AlreadyInstantiated(StateError):
    """Raised when instantiate() targets a store that already holds a pool."""
    code = "already_instantiated"

    def __init__(self, message: str = "Pool is already instantiated: config present"):
        super().__init__(message)


class NoBankAttached(StateError):
    code = "no_bank_attached"

    def __init__(self, message: str = "No bank attached: cannot query pool custody"):
        super().__init__(message)


class CursorNotFound(StateError):
    """
    Raised when a pagination cursor is no longer indexed.

    This happens when the cursor account withdrew everything between two
    page requests. Callers restart pagination from the beginning.
    """
    code = "start_after_user_not_found"

    def __init__(self, cursor: Account):
        self.cursor = cursor
        super().__init__(f"User not found in index for pagination: {cursor}")


# --- integrity ----------------------------------------------------------------

class IntegrityError(LedgerError):
    """Raised when stored index state contradicts its own invariants (a bug, not user error)."""
    code = "integrity_error"


class IndexInconsistency(IntegrityError):
    code = "index_inconsistency"

    def __init__(self, message: str = "Index inconsistency: Expected user at index not found"):
        super().__init__(message)


class SlotOutOfRange(IndexInconsistency):
    def __init__(self, slot: int, count: int):
        self.slot = slot
        self.count = count
        super().__init__(
            f"Index inconsistency: slot {slot} is outside the compact range 0..{count}"
        )


class IndexConversionFailed(IntegrityError):
    code = "index_conversion_failed"

    def __init__(self, value: int):
        self.value = value
        super().__init__(f"Index conversion failed: {value} is outside the slot range 0..{MAX_SLOT}")


# ============================================================================
# IMMUTABLE RECORDS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Coin:
    """An amount of a single denomination."""
    denom: str
    amount: int

    def __repr__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True, slots=True)
class MessageInfo:
    """
    Caller identity and the funds attached to the call.

    Attributes:
        sender: Account identity of the caller (already authenticated by the host).
        funds: Coins attached to the call. Only deposit() looks at them.
    """
    sender: Account
    funds: Tuple[Coin, ...] = ()

    def __post_init__(self):
        if not self.sender or not self.sender.strip():
            raise ValueError("MessageInfo sender cannot be empty")
        object.__setattr__(self, 'funds', tuple(self.funds))


@dataclass(frozen=True, slots=True)
class Config:
    """Global configuration record, passed explicitly into operations."""
    owner: Account
    denom: str = DEFAULT_DENOM


@dataclass(frozen=True, slots=True)
class ContractInfo:
    contract: str
    version: str


@dataclass(frozen=True, slots=True)
class Transfer:
    """
    Declarative "send funds" effect.

    The pool never executes transfers. The host (or InMemoryBank.apply in
    tests) performs them after the call commits.
    """
    to_address: Account
    denom: str
    amount: int

    def __repr__(self) -> str:
        return f"Transfer({self.amount}{self.denom} → {self.to_address})"


@dataclass(frozen=True, slots=True)
class Response:
    """
    Outcome of a successful mutating call.

    Attributes:
        action: Name of the operation ("deposit", "withdraw", ...).
        attributes: Ordered (key, value) pairs describing what happened.
                    Keys may repeat (e.g. two "event" entries).
        transfers: Transfers the host must perform after commit.
    """
    action: str
    attributes: Attributes = ()
    transfers: Tuple[Transfer, ...] = ()

    def get(self, key: str) -> Optional[str]:
        """Return the first attribute value for `key`, or None."""
        for k, v in self.attributes:
            if k == key:
                return v
        return None

    def get_all(self, key: str) -> List[str]:
        """Return every attribute value for `key` in emission order."""
        return [v for k, v in self.attributes if k == key]


def make_response(action: str, *pairs: Tuple[str, object], transfers: Sequence[Transfer] = ()) -> Response:
    """Build a Response whose first attribute is ("action", action)."""
    attributes = (("action", action),) + tuple((k, str(v)) for k, v in pairs)
    return Response(action=action, attributes=attributes, transfers=tuple(transfers))


@dataclass(frozen=True, slots=True)
class Page:
    """
    One page of the enumeration.

    Attributes:
        entries: (account, balance) pairs in slot order.
        next: Cursor for the following page, or None when the index is exhausted.
    """
    entries: Tuple[Tuple[Account, int], ...]
    next: Optional[Account] = None

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def accounts(self) -> List[Account]:
        return [account for account, _ in self.entries]


@dataclass(frozen=True, slots=True)
class AuditReport:
    """
    Result of a full index scan.

    Attributes:
        is_consistent: True when no issue was found.
        issues: Human-readable description of each problem.
        stored_count: The stored slot counter.
        actual_count: Accounts found in the index with a positive balance.
        total_in_index: Forward entries found within 0..stored_count.
    """
    is_consistent: bool
    issues: Tuple[str, ...]
    stored_count: int
    actual_count: int
    total_in_index: int


@dataclass(frozen=True, slots=True)
class TimelockInfo:
    destination: Optional[Account]
    unlock_timestamp: int
    is_configured: bool


@dataclass(frozen=True, slots=True)
class ExecutionRecord:
    """
    Audit trail entry for one applied mutating call.

    Attributes:
        sequence_number: Monotonic within a pool.
        block_time: Host time when the call executed.
        sender: Caller identity.
        response: What the call emitted.
    """
    sequence_number: int
    block_time: int
    sender: Account
    response: Response = field(repr=False)

    @property
    def action(self) -> str:
        return self.response.action


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def validate_amount(amount: int) -> int:
    """Reject zero, negative and non-integer amounts."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"Invalid amount: expected an integer, got {type(amount).__name__}")
    if amount <= 0:
        raise InvalidAmount()
    return amount


def validate_funds(funds: Sequence[Coin], expected_denom: str) -> int:
    """
    Return the single amount carried by `funds`.

    Checks, in order: something was sent, exactly one coin was sent,
    it is the expected denomination, and its amount is positive.

    Raises:
        InvalidAmount: No funds, or a zero/negative amount.
        MultipleDenominations: More than one coin attached.
        InvalidDenom: The coin is not `expected_denom`.
    """
    if not funds:
        raise InvalidAmount()
    if len(funds) > 1:
        raise MultipleDenominations()
    coin = funds[0]
    if coin.denom != expected_denom:
        raise InvalidDenom(expected=expected_denom, got=coin.denom)
    return validate_amount(coin.amount)


def validate_address(address: Optional[Account], role: str) -> Account:
    """Reject empty or whitespace-only account identities."""
    if not address or not address.strip():
        raise InvalidAddress(role)
    return address


def verify_owner(sender: Account, config: Config) -> None:
    """Raise Unauthorized unless `sender` is the configured owner."""
    if sender != config.owner:
        raise Unauthorized()


def to_slot(value: int) -> int:
    """Check that `value` fits the unsigned 32-bit slot range."""
    if value < 0 or value > MAX_SLOT:
        raise IndexConversionFailed(value)
    return value
