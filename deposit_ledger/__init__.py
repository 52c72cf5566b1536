"""
deposit_ledger - Deposit Pool with Compact Enumeration

Tracks per-account deposits, enumerates every non-zero balance page by page
without loading the full account set, and gates an owner sweep of the pool
behind a 7-day timelock.

Usage:
    from deposit_ledger import DepositPool, InMemoryBank, MessageInfo, Coin

    bank = InMemoryBank()
    pool = DepositPool.instantiate("owner", bank=bank, initial_time=1_700_000_000)

    # Deposits carry their funds
    pool.deposit(MessageInfo("alice", (Coin("uusd", 1000),)))
    pool.deposit(MessageInfo("bob", (Coin("uusd", 250),)))

    # Enumerate with a cursor
    page = pool.get_all(limit=1)          # alice, next="alice"
    page = pool.get_all(cursor=page.next) # bob, next=None

    # Withdrawals describe the payout; the host performs it
    response = pool.withdraw(MessageInfo("alice"), 400)
    response.transfers                    # (Transfer(400uusd → alice),)
"""

# Core types
from .core import (
    Account,
    Attributes,
    BankQuerier,
    BalanceChange,
    Coin,
    MessageInfo,
    Config,
    ContractInfo,
    Transfer,
    Response,
    Page,
    AuditReport,
    TimelockInfo,
    ExecutionRecord,
    make_response,
    validate_amount,
    validate_funds,
    validate_address,
    verify_owner,
    # Exceptions
    LedgerError,
    Unauthorized,
    ValidationError,
    InvalidAmount,
    InvalidDenom,
    MultipleDenominations,
    InvalidTimestamp,
    InvalidAddress,
    StateError,
    InsufficientBalance,
    DestinationNotSet,
    UnlockTimeNotSet,
    WithdrawalLocked,
    NoBalanceToWithdraw,
    CursorNotFound,
    NotInstantiated,
    AlreadyInstantiated,
    NoBankAttached,
    IntegrityError,
    IndexInconsistency,
    SlotOutOfRange,
    IndexConversionFailed,
    # Constants
    CONTRACT_NAME,
    CONTRACT_VERSION,
    DEFAULT_DENOM,
    DEFAULT_QUERY_LIMIT,
    MAX_QUERY_LIMIT,
    MIN_TIMELOCK_DELAY,
    MAX_SLOT,
)

# Storage
from .storage import Storage, MemoryStorage, StagedStorage

# Components
from .balances import BalanceStore
from .index import CompactIndex
from .ledger import Ledger, clamp_limit
from .timelock import Timelock
from .auditor import audit_index

# Custody
from .bank import InMemoryBank

# Pool
from .pool import DepositPool

__all__ = [
    # Core
    'Account', 'Attributes', 'BankQuerier', 'BalanceChange',
    'Coin', 'MessageInfo', 'Config', 'ContractInfo', 'Transfer', 'Response',
    'Page', 'AuditReport', 'TimelockInfo', 'ExecutionRecord',
    'make_response', 'validate_amount', 'validate_funds', 'validate_address', 'verify_owner',
    # Exceptions
    'LedgerError', 'Unauthorized',
    'ValidationError', 'InvalidAmount', 'InvalidDenom', 'MultipleDenominations',
    'InvalidTimestamp', 'InvalidAddress',
    'StateError', 'InsufficientBalance', 'DestinationNotSet', 'UnlockTimeNotSet',
    'WithdrawalLocked', 'NoBalanceToWithdraw', 'CursorNotFound',
    'NotInstantiated', 'AlreadyInstantiated', 'NoBankAttached',
    'IntegrityError', 'IndexInconsistency', 'SlotOutOfRange', 'IndexConversionFailed',
    # Constants
    'CONTRACT_NAME', 'CONTRACT_VERSION', 'DEFAULT_DENOM',
    'DEFAULT_QUERY_LIMIT', 'MAX_QUERY_LIMIT', 'MIN_TIMELOCK_DELAY', 'MAX_SLOT',
    # Storage
    'Storage', 'MemoryStorage', 'StagedStorage',
    # Components
    'BalanceStore', 'CompactIndex', 'Ledger', 'clamp_limit', 'Timelock', 'audit_index',
    # Custody
    'InMemoryBank',
    # Pool
    'DepositPool',
]

__version__ = CONTRACT_VERSION
