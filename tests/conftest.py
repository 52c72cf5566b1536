"""
conftest.py - Shared pytest fixtures for deposit ledger tests

Provides common fixtures used across unit, pool and conformance tests:
- Bare stores and component views (ledger, index, balances)
- Instantiated pools with a custody simulator
- A funding helper that mirrors each deposit in the bank
"""

import pytest

from deposit_ledger import (
    BalanceStore,
    Coin,
    CompactIndex,
    Config,
    DepositPool,
    InMemoryBank,
    Ledger,
    MemoryStorage,
    MessageInfo,
    DEFAULT_DENOM,
)


OWNER = "owner"
POOL_ADDRESS = "pool"
# 2023-11-14T22:13:20Z
T0 = 1_700_000_000


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def coins(amount: int, denom: str = DEFAULT_DENOM):
    """Funds tuple carrying a single coin."""
    return (Coin(denom, amount),)


def info(sender: str, amount: int = None, denom: str = DEFAULT_DENOM) -> MessageInfo:
    """MessageInfo for `sender`, optionally with one attached coin."""
    if amount is None:
        return MessageInfo(sender)
    return MessageInfo(sender, coins(amount, denom))


def deposit_into(pool: DepositPool, bank: InMemoryBank, account: str, amount: int):
    """Deposit through the pool and move the funds in custody, like a host would."""
    bank.mint(account, Coin(DEFAULT_DENOM, amount))
    bank.send(account, pool.address, coins(amount))
    return pool.deposit(info(account, amount))


def withdraw_from(pool: DepositPool, bank: InMemoryBank, account: str, amount: int):
    """Withdraw through the pool and settle the returned transfers."""
    response = pool.withdraw(info(account), amount)
    bank.apply(pool.address, response)
    return response


def accounts(n: int, prefix: str = "user"):
    """Zero-padded account names so lexical and creation order agree."""
    return [f"{prefix}{i:03d}" for i in range(n)]


# =============================================================================
# COMPONENT FIXTURES
# =============================================================================

@pytest.fixture
def storage():
    """Empty in-memory store."""
    return MemoryStorage()


@pytest.fixture
def config():
    return Config(owner=OWNER)


@pytest.fixture
def ledger(storage):
    """Ledger over an empty store."""
    return Ledger(storage)


@pytest.fixture
def index(storage):
    return CompactIndex(storage)


@pytest.fixture
def balances(storage):
    return BalanceStore(storage)


# =============================================================================
# POOL FIXTURES
# =============================================================================

@pytest.fixture
def bank():
    return InMemoryBank()


@pytest.fixture
def pool(bank):
    """Freshly instantiated pool at T0."""
    return DepositPool.instantiate(
        OWNER, bank=bank, address=POOL_ADDRESS, initial_time=T0, verbose=False
    )


@pytest.fixture
def funded_pool(pool, bank):
    """Pool with alice=1000, bob=2000, charlie=3000 (slots 0, 1, 2)."""
    deposit_into(pool, bank, "alice", 1000)
    deposit_into(pool, bank, "bob", 2000)
    deposit_into(pool, bank, "charlie", 3000)
    return pool
