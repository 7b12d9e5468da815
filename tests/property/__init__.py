# tests/property/__init__.py
"""Property-based tests for textchain.

Test categories:
- Substitution semantics: literal and escaped-regex modes agree
- Pipeline invariants: step run count, ordering and text threading
- State machine: RunState transitions under arbitrary step outcomes
"""
