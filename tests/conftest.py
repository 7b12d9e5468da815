# tests/conftest.py
"""Shared test fixtures.

Fixtures:
- ledger_db: fresh in-memory LedgerDB per test
- recorder / store / tracker: ledger wrappers over ledger_db
- credentials: ProviderCredentials with a key for every provider
- restore_logging: puts root handlers and structlog defaults back after a test

Builders and collaborator doubles live in tests.fixtures.doubles.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from textchain.core.config import ProviderCredentials
from textchain.core.ledger.database import LedgerDB
from textchain.core.ledger.definitions import TransformationStore
from textchain.core.ledger.recorder import RunRecorder
from textchain.engine.tracker import RunTracker

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Ledger fixtures
# =============================================================================


@pytest.fixture
def ledger_db() -> Iterator[LedgerDB]:
    """Fresh in-memory ledger per test."""
    db = LedgerDB.in_memory()
    yield db
    db.close()


@pytest.fixture
def recorder(ledger_db: LedgerDB) -> RunRecorder:
    return RunRecorder(ledger_db)


@pytest.fixture
def store(ledger_db: LedgerDB) -> TransformationStore:
    return TransformationStore(ledger_db)


@pytest.fixture
def tracker(recorder: RunRecorder) -> RunTracker:
    return RunTracker(recorder)


@pytest.fixture
def credentials() -> ProviderCredentials:
    return ProviderCredentials(
        openai_api_key="sk-openai-test",
        groq_api_key="gsk-groq-test",
        anthropic_api_key="sk-ant-test",
        google_api_key="google-test",
    )


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo configure_logging so later tests do not write to a closed capture stream."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
