# tests/conftest.py
"""Shared fixtures and Hypothesis profiles.

Profiles (select with HYPOTHESIS_PROFILE, default "ci"):
    ci       100 examples, no deadline
    nightly  1000 examples, no deadline
    debug    10 examples, verbose
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from hypothesis import Verbosity, settings

settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("nightly", max_examples=1000, deadline=None)
settings.register_profile("debug", max_examples=10, deadline=None, verbosity=Verbosity.verbose)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by CLI and logging tests."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def encode_input() -> bytes:
    """Three landmarks: two with coordinates, one without."""
    return (FIXTURES_DIR / "record_encode.json").read_bytes()


@pytest.fixture
def decode_input() -> bytes:
    """Two landmarks carrying a geohash and no coordinates."""
    return (FIXTURES_DIR / "record_decode.json").read_bytes()
