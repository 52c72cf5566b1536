"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the deposit ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Aggregate total equals the sum of stored balances
2. compactness.py - Slots 0..count-1 are exactly the non-zero accounts
3. atomicity.py - Rejected calls change nothing
4. pagination.py - Paging visits every account exactly once

These tests use hypothesis for property-based testing.
"""
