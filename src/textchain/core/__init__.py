"""Core infrastructure: ledger, canonical hashing, configuration and logging."""
