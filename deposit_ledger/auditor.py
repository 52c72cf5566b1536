"""
auditor.py - Full-scan consistency check for the compact index

audit_index() recomputes index integrity from scratch, independently of the
incremental bookkeeping in Ledger, so drift or bugs show up as issues
instead of silently wrong pages. It is read-only and O(count).

For every slot in 0..stored_count:
    - the slot must hold an account (else "Gap detected")
    - the account must have a positive balance
    - the reverse index must map the account back to the slot
Finally the stored count is compared with the number of accounts found
with a positive balance.
"""

from __future__ import annotations
from typing import List

from .balances import BalanceStore
from .core import AuditReport
from .index import CompactIndex
from .storage import Storage, balance_key


def audit_index(storage: Storage) -> AuditReport:
    """
    Scan the index and report every inconsistency found.

    Args:
        storage: Store holding the ledger. Never written to.

    Returns:
        AuditReport; is_consistent is True only when no issue was recorded.
    """
    index = CompactIndex(storage)
    balances = BalanceStore(storage)

    stored_count = index.count
    issues: List[str] = []
    actual_count = 0
    total_in_index = 0

    for slot in range(stored_count):
        account = index.account_at(slot)
        if account is None:
            issues.append(f"Gap detected: index {slot} is missing")
            continue
        total_in_index += 1

        if storage.has(balance_key(account)):
            if balances.balance_of(account) > 0:
                actual_count += 1
            else:
                issues.append(
                    f"User {account} at index {slot} has zero balance but is in index"
                )
        else:
            issues.append(f"User {account} at index {slot} not found in balance store")

        reverse = index.slot_of(account)
        if reverse is None:
            issues.append(f"User {account} at index {slot} missing in reverse index")
        elif reverse != slot:
            issues.append(
                f"Reverse index mismatch: user {account} has index {slot} "
                f"in forward, {reverse} in reverse"
            )

    if stored_count != actual_count:
        issues.append(
            f"User count mismatch: stored count is {stored_count}, "
            f"actual users with non-zero balance is {actual_count}"
        )

    return AuditReport(
        is_consistent=not issues,
        issues=tuple(issues),
        stored_count=stored_count,
        actual_count=actual_count,
        total_in_index=total_in_index,
    )
