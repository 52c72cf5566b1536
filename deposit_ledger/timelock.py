"""
timelock.py - Timelocked authorization for the owner sweep

States:
    Unconfigured  (destination None, unlock time 0)
    Configured    (destination, unlock time >= time of configuring + 7 days)

configure() always replaces both fields together and may be called again at
any time. authorize_sweep() checks the lock and yields the Transfer that
moves the pool's entire custody to the destination. It never touches
per-account balances: the sweep targets what the pool actually holds, which
can exceed the tracked deposit total if funds arrived out of band.
"""

from __future__ import annotations
from typing import Optional

from .core import (
    Account, Config, TimelockInfo, Transfer,
    DestinationNotSet, InvalidTimestamp, NoBalanceToWithdraw,
    UnlockTimeNotSet, WithdrawalLocked,
    MIN_TIMELOCK_DELAY, validate_address, verify_owner,
)
from .storage import Storage, WITHDRAWAL_DESTINATION_KEY, WITHDRAWAL_UNLOCK_KEY


class Timelock:
    """Withdrawal destination and unlock timestamp over a Storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    @property
    def destination(self) -> Optional[Account]:
        return self.storage.get(WITHDRAWAL_DESTINATION_KEY)

    @property
    def unlock_timestamp(self) -> int:
        return self.storage.get(WITHDRAWAL_UNLOCK_KEY, 0)

    def info(self) -> TimelockInfo:
        destination = self.destination
        unlock = self.unlock_timestamp
        return TimelockInfo(
            destination=destination,
            unlock_timestamp=unlock,
            is_configured=destination is not None and unlock != 0,
        )

    def initialize(self) -> None:
        self.storage.set(WITHDRAWAL_DESTINATION_KEY, None)
        self.storage.set(WITHDRAWAL_UNLOCK_KEY, 0)

    def configure(
        self,
        config: Config,
        sender: Account,
        destination: Account,
        unlock_timestamp: int,
        now: int,
    ) -> None:
        """
        Set the sweep destination and unlock time.

        Args:
            config: Holds the owner identity.
            sender: Caller; must be the owner.
            destination: Account that will receive the sweep.
            unlock_timestamp: Unix seconds; must be >= now + MIN_TIMELOCK_DELAY.
            now: Current host time in Unix seconds.

        Raises:
            Unauthorized: sender is not the owner.
            InvalidAddress: destination is empty.
            InvalidTimestamp: unlock_timestamp is too soon.
        """
        verify_owner(sender, config)
        validate_address(destination, "withdrawal destination")
        min_timestamp = now + MIN_TIMELOCK_DELAY
        if unlock_timestamp < min_timestamp:
            raise InvalidTimestamp(unlock_timestamp, min_timestamp)
        self.storage.set(WITHDRAWAL_DESTINATION_KEY, destination)
        self.storage.set(WITHDRAWAL_UNLOCK_KEY, unlock_timestamp)

    def authorize_sweep(
        self,
        config: Config,
        sender: Account,
        now: int,
        pool_balance: int,
    ) -> Transfer:
        """
        Check every sweep precondition and return the sweep transfer.

        Checks run in this order: owner, destination configured, unlock time
        configured, unlock time reached, non-zero custody.

        Args:
            pool_balance: What the pool actually holds in config.denom.

        Returns:
            Transfer of the full pool_balance to the configured destination.
        """
        verify_owner(sender, config)
        destination = self.destination
        if destination is None:
            raise DestinationNotSet()
        unlock = self.unlock_timestamp
        if unlock == 0:
            raise UnlockTimeNotSet()
        if now < unlock:
            raise WithdrawalLocked(now, unlock)
        if pool_balance <= 0:
            raise NoBalanceToWithdraw()
        return Transfer(to_address=destination, denom=config.denom, amount=pool_balance)
