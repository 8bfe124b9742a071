"""Pytest configuration and fixtures for recordstore tests."""

from __future__ import annotations

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from recordstore.adapters.outbound import InMemorySnapshotStore
from recordstore.application import Database
from recordstore.infrastructure.config import Config, StorageConfig
from recordstore.infrastructure.metrics import MetricsRegistry

FIXED_NOW = datetime(2024, 5, 1, 9, 30, 0, 125000, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2024-05-01T09:30:00.125Z"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a file-backed configuration in a temporary directory."""
    return Config(
        storage=StorageConfig(
            database_name="testDB",
            backend="file",
            data_dir=temp_dir / "data",
            fsync=False,  # Faster for tests
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def fixed_timestamp() -> str:
    """Timestamp string records get under fixed_clock."""
    return FIXED_TIMESTAMP


@pytest.fixture
def memory_store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def db(
    memory_store: InMemorySnapshotStore,
    metrics_registry: MetricsRegistry,
    fixed_clock: Callable[[], datetime],
) -> Database:
    """Provide an empty database backed by an in-memory snapshot store."""
    return Database("testDB", memory_store, clock=fixed_clock, metrics=metrics_registry)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
