# tests/property/__init__.py
"""Property-based tests for ghcr-cleaner.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. Retention deletes data, so the
partition and determinism of its decisions are checked here.
"""
