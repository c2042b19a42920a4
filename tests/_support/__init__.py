"""Test doubles shared by the LedgerOne test suite."""
