"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the settlement ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_freezing.py - Frozen accounts never change; first offense recorded once
2. test_win_rate.py - Win rate bounds and rounding
3. test_conservation.py - Balances and house change reconcile with operations
4. test_determinism.py - Identical input produces identical reports

These tests use hypothesis for property-based testing.
"""
