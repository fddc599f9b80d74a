"""Test configuration."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List

import pytest
from pytest import Config

from batchin.core.config import Settings
from batchin.core.logging import configure_logging
from batchin.database.models import Batch, ContentRecord, RecordKind

from tests.fixtures.constants import BATCH_ID

fixture = pytest.fixture

FROZEN_NOW = datetime(2024, 3, 1, 12, 30, 0, tzinfo=timezone.utc)

pytest_plugins: List[str] = [
    "tests.fixtures.catalog",
    "tests.fixtures.transport",
]


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    # Configure logging for test environment
    configure_logging(testing=True)
    config.addinivalue_line("markers", "integration: mark test as an integration test")


@fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@fixture
def settings() -> Settings:
    """Settings with test values, independent of any .env file."""
    return Settings(
        _env_file=None,
        POSTGRES_HOST="catalog",
        TRANSPORT_HOST="transport",
        TRANSPORT_QUEUE="test-watchfolder",
        CP_NAME="TEST_CP",
    )


@fixture
def frozen_clock() -> Callable[[], datetime]:
    """Clock that always returns the same instant."""
    return lambda: FROZEN_NOW


@fixture
def sample_batch() -> Batch:
    """A mapped batch."""
    return Batch(
        row_id=1,
        batch_id=BATCH_ID,
        description="Test batch",
        cp_id="OR-123abc",
        status="new",
        host="ftp.example.org",
        path="/incoming/QAS-BD-OR-123abc",
        created_at=datetime(2022, 1, 1, tzinfo=timezone.utc),
        last_modified_at=datetime(2022, 1, 2, tzinfo=timezone.utc),
    )


@fixture
def sample_record() -> ContentRecord:
    """A mapped checksum record."""
    return ContentRecord(
        kind=RecordKind.CHECKSUM,
        row_id=1,
        batch_row_id=1,
        local_id="abc_123",
        file_name="/path/to/batch-id/abc_123.N.005.tif",
        checksum="d41d8cd98f00b204e9800998ecf8427e",
        title="Test title",
        file_size=1024,
    )
