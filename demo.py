#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: The Deposit Pool Step by Step

Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation     - The empty pool, deposits, the compact index
  4-5:  Withdrawals    - Payouts, swap-and-remove, stale cursors
  6-8:  Owner Sweep    - Timelock configuration, the lock, the sweep

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from deposit_ledger import (
    Coin, CursorNotFound, DepositPool, InMemoryBank, InvalidTimestamp, MessageInfo,
    WithdrawalLocked, MIN_TIMELOCK_DELAY,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: int = 1_735_722_000  # 2025-01-01 09:00 UTC
    owner: str = "owner"
    destination: str = "treasury"
    depositors: tuple = (("alice", 1_000_000), ("bob", 250_000), ("charlie", 40_000),
                         ("dave", 7_500), ("eve", 12_000))
    page_size: int = 2


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_index(pool: DepositPool):
    page = pool.get_all(limit=100)
    for slot, (account, balance) in enumerate(page.entries):
        print(f"  slot {slot}: {account:<10} {balance:>12,}")
    print(f"  count={pool.get_count()}  total={pool.get_total():,}")


# ============================================================================
# PHASE 1: FOUNDATION
# ============================================================================

def step_01_empty_pool():
    step_header(1, "The Empty Pool",
        "A pool starts with an owner, a denomination and nothing else.")

    bank = InMemoryBank()
    pool = DepositPool.instantiate(
        CONFIG.owner, bank=bank, initial_time=CONFIG.start_time, verbose=True
    )

    section_header("Initial State")
    print(f"Config:   {pool.get_config()}")
    print(f"Timelock: {pool.get_timelock_info()}")
    print(f"Audit:    {pool.audit_index()}")
    return pool, bank


def step_02_deposits(pool: DepositPool, bank: InMemoryBank):
    step_header(2, "Deposits",
        "A deposit carries exactly one coin; new depositors get the next slot.")

    for account, amount in CONFIG.depositors:
        bank.mint(account, Coin("uusd", amount))
        bank.send(account, pool.address, [Coin("uusd", amount)])
        pool.deposit(MessageInfo(account, (Coin("uusd", amount),)))

    section_header("Compact Index")
    show_index(pool)
    return pool


def step_03_pagination(pool: DepositPool):
    step_header(3, "Cursor Pagination",
        "Walk the index a page at a time; the cursor is the last account returned.")

    cursor = None
    page_number = 1
    while True:
        page = pool.get_all(cursor=cursor, limit=CONFIG.page_size)
        print(f"  page {page_number}: {page.accounts}  next={page.next}")
        if page.next is None:
            break
        cursor = page.next
        page_number += 1
    return pool


# ============================================================================
# PHASE 2: WITHDRAWALS
# ============================================================================

def step_04_withdraw(pool: DepositPool, bank: InMemoryBank):
    step_header(4, "Swap-and-Remove",
        "Emptying an account moves the last account into its slot.")

    response = pool.withdraw(MessageInfo("bob"), 250_000)
    bank.apply(pool.address, response)

    section_header("Index After bob Leaves")
    show_index(pool)
    print(f"\n  bob now holds {bank.query_balance('bob', 'uusd'):,} uusd in custody")
    return pool


def step_05_stale_cursor(pool: DepositPool, bank: InMemoryBank):
    step_header(5, "Stale Cursors",
        "A cursor dies when its account withdraws everything. Restart from the top.")

    page = pool.get_all(limit=1)
    print(f"  first page: {page.accounts}  next={page.next}")
    response = pool.withdraw(MessageInfo(page.next), pool.get_balance(page.next))
    bank.apply(pool.address, response)
    try:
        pool.get_all(cursor=page.next, limit=1)
    except CursorNotFound as e:
        print(f"  {type(e).__name__}: {e}")
        print(f"  restarting: {pool.get_all(limit=1).accounts}")
    return pool


# ============================================================================
# PHASE 3: OWNER SWEEP
# ============================================================================

def step_06_configure(pool: DepositPool):
    step_header(6, "Configure the Timelock",
        "The unlock time must be at least 7 days away.")

    owner = MessageInfo(CONFIG.owner)
    try:
        pool.configure_timelock(owner, CONFIG.destination,
                                pool.current_time + MIN_TIMELOCK_DELAY - 1)
    except InvalidTimestamp as e:
        print(f"  {type(e).__name__}: {e}")

    pool.configure_timelock(owner, CONFIG.destination,
                            pool.current_time + MIN_TIMELOCK_DELAY)
    print(f"  {pool.get_timelock_info()}")
    return pool


def step_07_locked(pool: DepositPool):
    step_header(7, "The Lock Holds", "Sweeping before the unlock time fails.")
    try:
        pool.sweep(MessageInfo(CONFIG.owner))
    except WithdrawalLocked as e:
        print(f"  {type(e).__name__}: {e}")
    return pool


def step_08_sweep(pool: DepositPool, bank: InMemoryBank):
    step_header(8, "The Sweep",
        "After the unlock time the owner sends all custody to the destination.")

    pool.advance_time(pool.get_timelock_info().unlock_timestamp)
    response = pool.sweep(MessageInfo(CONFIG.owner))
    bank.apply(pool.address, response)

    section_header("Custody After Sweep")
    print(f"  {CONFIG.destination}: {bank.query_balance(CONFIG.destination, 'uusd'):,}")
    print(f"  pool:      {bank.query_balance(pool.address, 'uusd'):,}")
    print(f"  tracked total is unchanged: {pool.get_total():,}")
    print(f"\n  history: {[r.action for r in pool.history]}")
    return pool


def main():
    print("=" * 70)
    print("       DEPOSIT POOL - INTERACTIVE TUTORIAL")
    print("=" * 70)
    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")
    wait_for_enter()

    pool, bank = step_01_empty_pool()
    wait_for_enter()
    step_02_deposits(pool, bank)
    wait_for_enter()
    step_03_pagination(pool)
    wait_for_enter()
    step_04_withdraw(pool, bank)
    wait_for_enter()
    step_05_stale_cursor(pool, bank)
    wait_for_enter()
    step_06_configure(pool)
    wait_for_enter()
    step_07_locked(pool)
    wait_for_enter()
    step_08_sweep(pool, bank)

    print(f"\n{'='*70}")
    print("Run tests: pytest tests/")


if __name__ == "__main__":
    main()
