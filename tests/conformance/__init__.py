"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the relief ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. sort_properties.py - Region and aggregate ordering, search agreement
2. conservation.py - Transfers move supplies, never create or destroy them
3. atomicity.py - Rejected transfers and loads change nothing
4. idempotency.py - Rebuilding the aggregate twice gives the same view
5. determinism.py - Same inputs, same stores and audit lines

These tests use hypothesis for property-based testing.
"""
