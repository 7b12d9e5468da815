"""Tests for textchain.contracts."""
