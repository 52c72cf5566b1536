"""
pool.py - Stateful deposit pool

DepositPool is the entry point the host calls. It owns the committed
Storage, the host clock and the execution history, and delegates the
actual bookkeeping to Ledger, Timelock and audit_index.

Key responsibilities:
    - Every mutating call runs on a StagedStorage and commits only if it
      returns normally, so a failed call leaves the store untouched
    - Owner checks against the stored Config
    - Declarative payouts: transfers are returned in the Response, never executed
    - Always logs applied calls to `history`; prints them when verbose
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from .auditor import audit_index
from .core import (
    Account, AuditReport, BalanceChange, BankQuerier, Config, ContractInfo,
    ExecutionRecord, LedgerError, MessageInfo, Page, Response, TimelockInfo,
    AlreadyInstantiated, NoBankAttached, NotInstantiated,
    CONTRACT_NAME, CONTRACT_VERSION, DEFAULT_DENOM,
    make_response, validate_address, verify_owner,
)
from .ledger import Ledger
from .storage import (
    MemoryStorage, StagedStorage, Storage,
    CONFIG_KEY, CONTRACT_INFO_KEY, TOTAL_DEPOSITS_KEY, USER_COUNT_KEY,
)
from .timelock import Timelock


class DepositPool:
    """
    Deposit pool with compact enumeration and a timelocked owner sweep.

    Thread Safety:
        Not thread-safe. The host serializes all mutating calls.

    Example:
        bank = InMemoryBank()
        pool = DepositPool.instantiate("owner", bank=bank, initial_time=1_700_000_000)
        pool.deposit(MessageInfo("alice", (Coin("uusd", 1000),)))
        pool.get_balance("alice")            # 1000
        pool.get_all(limit=10).entries       # (("alice", 1000),)
    """

    def __init__(
        self,
        storage: Storage,
        bank: Optional[BankQuerier] = None,
        address: str = "pool",
        initial_time: int = 0,
        verbose: bool = True,
    ):
        """
        Attach to an already-instantiated store.

        Use DepositPool.instantiate() to create a fresh pool.

        Args:
            storage: Committed key-value store.
            bank: Custody view used by sweep(); required only for sweeping.
            address: The pool's own account identity in the bank.
            initial_time: Host time in Unix seconds.
            verbose: Print a summary of every call.
        """
        self.storage = storage
        self.bank = bank
        self.address = address
        self.verbose = verbose
        self._current_time = initial_time
        self._next_sequence = 0
        self.history: List[ExecutionRecord] = []

    @classmethod
    def instantiate(
        cls,
        owner: Account,
        storage: Optional[Storage] = None,
        bank: Optional[BankQuerier] = None,
        address: str = "pool",
        initial_time: int = 0,
        verbose: bool = True,
        denom: str = DEFAULT_DENOM,
    ) -> DepositPool:
        """
        Initialize pool state and return a pool bound to it.

        Writes the config, contract info, a zero total, a zero count and an
        unconfigured timelock.

        Raises:
            InvalidAddress: owner is empty.
            AlreadyInstantiated: storage already holds a pool config.
        """
        storage = storage if storage is not None else MemoryStorage()
        pool = cls(storage, bank=bank, address=address,
                   initial_time=initial_time, verbose=verbose)

        def _instantiate(store: Storage) -> Response:
            validate_address(owner, "owner")
            if store.has(CONFIG_KEY):
                raise AlreadyInstantiated()
            config = Config(owner=owner, denom=denom)
            store.set(CONFIG_KEY, config)
            store.set(CONTRACT_INFO_KEY, ContractInfo(CONTRACT_NAME, CONTRACT_VERSION))
            store.set(TOTAL_DEPOSITS_KEY, 0)
            store.set(USER_COUNT_KEY, 0)
            Timelock(store).initialize()
            return make_response(
                "instantiate",
                ("owner", config.owner),
                ("ustc_denom", config.denom),
            )

        pool._run(owner, _instantiate)
        return pool

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    @property
    def current_time(self) -> int:
        """Host time in Unix seconds."""
        return self._current_time

    def advance_time(self, new_time: int) -> None:
        """
        Move the host clock forward.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    # ========================================================================
    # EXECUTION
    # ========================================================================

    @contextmanager
    def _transaction(self) -> Iterator[StagedStorage]:
        stage = StagedStorage(self.storage)
        yield stage
        stage.commit()

    def _run(self, sender: Account, operation: Callable[[Storage], Response]) -> Response:
        """Run `operation` on a fresh stage; commit and log it only on success."""
        try:
            with self._transaction() as stage:
                response = operation(stage)
        except LedgerError as e:
            if self.verbose:
                print(f"✗ REJECTED [{e.code}]: {e}")
            raise

        record = ExecutionRecord(
            sequence_number=self._next_sequence,
            block_time=self._current_time,
            sender=sender,
            response=response,
        )
        self._next_sequence += 1
        self.history.append(record)
        if self.verbose:
            self._print_record(record)
        return response

    def _print_record(self, record: ExecutionRecord) -> None:
        w = 80
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        response = record.response
        lines = [
            f"┌{bar}┐",
            f"│{pad(f' {response.action} #{record.sequence_number} @ {record.block_time} by {record.sender}')}│",
            f"├{bar}┤",
        ]
        for key, value in response.attributes[1:]:
            lines.append(f"│{pad(f'   {key:<18}: {value}')}│")
        for transfer in response.transfers:
            lines.append(f"│{pad(f'   send {transfer.amount}{transfer.denom} → {transfer.to_address}')}│")
        lines.append(f"│{pad(' ✓ APPLIED')}│")
        lines.append(f"└{bar}┘")
        print("\n".join(lines))

    # ========================================================================
    # MUTATING OPERATIONS
    # ========================================================================

    def deposit(self, info: MessageInfo) -> Response:
        """
        Credit the funds attached to the call to the caller.

        Emits action/user/amount and event=deposit, plus event=user_added
        when the caller was given a new index slot.
        """
        def _deposit(store: Storage) -> Response:
            config = self._load_config(store)
            amount, change = Ledger(store).deposit(config, info.sender, info.funds)
            pairs = [
                ("user", info.sender),
                ("amount", amount),
                ("event", "deposit"),
            ]
            if change is BalanceChange.INSERTED:
                pairs.append(("event", "user_added"))
            return make_response("deposit", *pairs)

        return self._run(info.sender, _deposit)

    def withdraw(self, info: MessageInfo, amount: int) -> Response:
        """Debit `amount` from the caller and pay it back to them."""
        def _withdraw(store: Storage) -> Response:
            config = self._load_config(store)
            _, transfer = Ledger(store).withdraw(config, info.sender, amount)
            return make_response(
                "withdraw",
                ("user", info.sender),
                ("amount", amount),
                ("event", "withdraw"),
                transfers=[transfer],
            )

        return self._run(info.sender, _withdraw)

    def configure_timelock(
        self,
        info: MessageInfo,
        destination: Account,
        unlock_timestamp: int,
    ) -> Response:
        """Owner-only: replace the sweep destination and unlock time."""
        def _configure(store: Storage) -> Response:
            config = self._load_config(store)
            Timelock(store).configure(
                config, info.sender, destination, unlock_timestamp, self._current_time
            )
            return make_response(
                "set_withdrawal_destination",
                ("destination", destination),
                ("unlock_timestamp", unlock_timestamp),
            )

        return self._run(info.sender, _configure)

    def sweep(self, info: MessageInfo) -> Response:
        """
        Owner-only: send everything the pool holds to the timelock destination.

        The owner is verified before custody is queried, so a non-owner
        never reaches the bank; authorize_sweep() then runs its full check
        sequence, owner included. Per-account balances and the tracked
        total are left as they are.
        """
        def _sweep(store: Storage) -> Response:
            config = self._load_config(store)
            verify_owner(info.sender, config)
            pool_balance = self._custody(config)
            transfer = Timelock(store).authorize_sweep(
                config, info.sender, self._current_time, pool_balance
            )
            return make_response(
                "owner_withdraw",
                ("destination", transfer.to_address),
                ("amount", transfer.amount),
                ("event", "owner_withdraw"),
                transfers=[transfer],
            )

        return self._run(info.sender, _sweep)

    def set_owner(self, info: MessageInfo, new_owner: Optional[Account] = None) -> Response:
        """Owner-only: hand ownership to `new_owner` (None keeps the current owner)."""
        def _set_owner(store: Storage) -> Response:
            config = self._load_config(store)
            verify_owner(info.sender, config)
            if new_owner is not None:
                validate_address(new_owner, "new owner")
                config = Config(owner=new_owner, denom=config.denom)
                store.set(CONFIG_KEY, config)
            return make_response(
                "update_config",
                ("owner", config.owner),
                ("event", "config_updated"),
            )

        return self._run(info.sender, _set_owner)

    # ========================================================================
    # QUERIES (read-only)
    # ========================================================================

    def get_balance(self, account: Account) -> int:
        return Ledger(self.storage).balance_of(account)

    def get_all(self, cursor: Optional[Account] = None, limit: Optional[int] = None) -> Page:
        """
        Page through accounts with a non-zero balance.

        Raises:
            CursorNotFound: The cursor account has since withdrawn everything.
                Restart from cursor=None.
        """
        return Ledger(self.storage).enumerate(cursor, limit)

    def get_count(self) -> int:
        return Ledger(self.storage).count()

    def get_total(self) -> int:
        return Ledger(self.storage).total()

    def get_config(self) -> Config:
        return self._load_config(self.storage)

    def get_contract_info(self) -> ContractInfo:
        return self.storage.get(CONTRACT_INFO_KEY)

    def get_timelock_info(self) -> TimelockInfo:
        return Timelock(self.storage).info()

    def audit_index(self) -> AuditReport:
        return audit_index(self.storage)

    # ========================================================================
    # HELPERS
    # ========================================================================

    @staticmethod
    def _load_config(store: Storage) -> Config:
        config = store.get(CONFIG_KEY)
        if config is None:
            raise NotInstantiated()
        return config

    def _custody(self, config: Config) -> int:
        if self.bank is None:
            raise NoBankAttached()
        return self.bank.query_balance(self.address, config.denom)
