"""Pytest fixtures for deprecation layer tests."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Iterator

import pytest

from sonarqube_client.deprecation import (
    InterceptionBridge,
    MetadataRegistry,
    MigrationAnalyzer,
    WarningLedger,
    reset_deprecation_state,
)

DEPRECATION_LOGGER = "sonarqube_client.deprecation"


@pytest.fixture(autouse=True)
def isolated_deprecation_state() -> Iterator[None]:
    """Give every test fresh global services."""
    reset_deprecation_state()
    yield
    reset_deprecation_state()


@pytest.fixture
def ledger() -> WarningLedger:
    return WarningLedger()


@pytest.fixture
def registry() -> MetadataRegistry:
    return MetadataRegistry()


@pytest.fixture
def bridge(ledger: WarningLedger) -> InterceptionBridge:
    return InterceptionBridge(ledger)


@pytest.fixture
def analyzer(registry: MetadataRegistry) -> MigrationAnalyzer:
    return MigrationAnalyzer(registry)


@pytest.fixture
def deprecation_log(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """caplog capturing everything the deprecation loggers emit."""
    caplog.set_level(logging.DEBUG, logger=DEPRECATION_LOGGER)
    return caplog


@pytest.fixture
def deprecation_warnings() -> Iterator[Callable[[], list[str]]]:
    """Callable returning the DeprecationWarning messages issued so far."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        yield lambda: [str(w.message) for w in caught if issubclass(w.category, DeprecationWarning)]
