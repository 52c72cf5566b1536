"""
storage.py - Key-value storage for the deposit ledger

The ledger treats persistence as an external ordered key-value store offering
point get/set/delete. This module defines that interface and two
implementations:

- Storage: Protocol every backend satisfies
- MemoryStorage: dict-backed store for tests, demos and simulations
- StagedStorage: overlay that buffers writes until commit()

DepositPool runs each mutating call against a StagedStorage so that a call
either commits every write or none of them.

Key layout (logical names, one namespace per kind of record):
    config                      Config
    contract_info               ContractInfo
    total_deposits              int
    user_count                  int
    balance:<account>           int (positive; zero balances are deleted)
    user_idx:<slot>             account
    user_idx_rev:<account>      slot
    withdrawal_destination      account or None
    withdrawal_unlock_timestamp int
"""

from __future__ import annotations
from typing import Any, Dict, Iterator, Optional, Protocol, runtime_checkable


CONFIG_KEY = "config"
CONTRACT_INFO_KEY = "contract_info"
TOTAL_DEPOSITS_KEY = "total_deposits"
USER_COUNT_KEY = "user_count"
WITHDRAWAL_DESTINATION_KEY = "withdrawal_destination"
WITHDRAWAL_UNLOCK_KEY = "withdrawal_unlock_timestamp"

BALANCE_PREFIX = "balance:"
INDEX_PREFIX = "user_idx:"
REVERSE_INDEX_PREFIX = "user_idx_rev:"


def balance_key(account: str) -> str:
    return f"{BALANCE_PREFIX}{account}"


def index_key(slot: int) -> str:
    # Zero-padded so lexical key order matches slot order.
    return f"{INDEX_PREFIX}{slot:010d}"


def reverse_index_key(account: str) -> str:
    return f"{REVERSE_INDEX_PREFIX}{account}"


_MISSING = object()


@runtime_checkable
class Storage(Protocol):
    """
    Point-access key-value store.

    Values are stored as-is (no serialization); callers only store
    immutable values (int, str, None, frozen dataclasses).
    """

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at `key`, or `default` if absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        """Remove `key`. Deleting an absent key is a no-op."""
        ...

    def has(self, key: str) -> bool:
        ...


class MemoryStorage:
    """
    Dict-backed Storage.

    Example:
        store = MemoryStorage()
        store.set("user_count", 0)
        store.get("user_count")      # 0
        store.get("missing", 7)      # 7
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self, prefix: str = "") -> Iterator[str]:
        """Yield keys starting with `prefix` in sorted order."""
        for key in sorted(self._data):
            if key.startswith(prefix):
                yield key

    def snapshot(self) -> Dict[str, Any]:
        """Return a shallow copy of the whole store (for test comparisons)."""
        return dict(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStorage({len(self._data)} keys)"


class StagedStorage:
    """
    Write-buffering overlay on top of another Storage.

    Reads see staged writes first, then fall through to the base store.
    Nothing reaches the base until commit(). Dropping the stage without
    committing discards every buffered write.

    Example:
        stage = StagedStorage(base)
        stage.set("user_count", 1)
        base.get("user_count")       # unchanged
        stage.commit()
        base.get("user_count")       # 1
    """

    def __init__(self, base: Storage):
        self.base = base
        # Value _MISSING marks a staged delete.
        self._pending: Dict[str, Any] = {}
        self._committed = False

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._pending:
            value = self._pending[key]
            return default if value is _MISSING else value
        return self.base.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._check_open()
        self._pending[key] = value

    def delete(self, key: str) -> None:
        self._check_open()
        self._pending[key] = _MISSING

    def has(self, key: str) -> bool:
        if key in self._pending:
            return self._pending[key] is not _MISSING
        return self.base.has(key)

    def commit(self) -> None:
        """Apply every staged write and delete to the base store, in order."""
        self._check_open()
        for key, value in self._pending.items():
            if value is _MISSING:
                self.base.delete(key)
            else:
                self.base.set(key, value)
        self._pending.clear()
        self._committed = True

    def _check_open(self) -> None:
        if self._committed:
            raise RuntimeError("StagedStorage already committed")
