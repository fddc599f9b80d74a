"""Tests for the batch CLI."""

import io
import json
from contextlib import nullcontext
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from batchin.__main__ import build_parser, main
from batchin.core.logging import configure_logging

from tests.fixtures.catalog import BATCH_ID, insert_batch, insert_record


@pytest.fixture(autouse=True)
def cli_environment(monkeypatch: pytest.MonkeyPatch):
    """Pin the settings main() builds from the environment."""
    monkeypatch.setenv("TRANSPORT_QUEUE", "cli-watchfolder")
    monkeypatch.setenv("CP_NAME", "CLI_CP")
    monkeypatch.setenv("JSON_LOGS", "false")
    yield
    configure_logging(testing=True)


@pytest.fixture
def seeded_db(catalog_db: Session) -> Session:
    """Catalog with one batch of two records."""
    insert_batch(catalog_db)
    insert_record(catalog_db, row_id=1, dc_identifier_localid="a", filename="a.tif")
    insert_record(catalog_db, row_id=2, dc_identifier_localid="b", filename="b.tif")
    return catalog_db


@pytest.fixture
def connections(seeded_db: Session, mock_redis: MagicMock):
    """Replace the catalog and transport connections main() acquires."""
    with patch(
        "batchin.__main__.catalog_session", return_value=nullcontext(seeded_db)
    ) as mock_session, patch(
        "batchin.__main__.open_transport", return_value=nullcontext(mock_redis)
    ) as mock_transport:
        yield mock_session, mock_transport


class TestBatchCLI:
    """Test cases for the batch CLI."""

    def test_should_require_batch_id_for_start(self) -> None:
        """Test argument validation."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["start"])

    def test_should_publish_batch_when_yes_flag_given(
        self, connections, mock_redis: MagicMock, capsys
    ) -> None:
        """Test --yes publishes without prompting."""
        # Act
        exit_code = main(["start", "--batch-id", BATCH_ID, "--yes"])

        # Assert
        assert exit_code == 0
        assert mock_redis.rpush.call_count == 2
        queue, payload = mock_redis.rpush.call_args_list[0].args
        assert queue == "cli-watchfolder"
        assert json.loads(payload)["cp_name"] == "CLI_CP"
        assert "Published 2 of 2 record(s)" in capsys.readouterr().out

    def test_should_abort_when_operator_declines(
        self, connections, mock_redis: MagicMock, capsys, monkeypatch
    ) -> None:
        """Test a declined prompt exits cleanly without publishing."""
        # Arrange
        monkeypatch.setattr("sys.stdin", io.StringIO("no\n"))

        # Act
        exit_code = main(["start", "--batch-id", BATCH_ID])

        # Assert
        assert exit_code == 0
        mock_redis.rpush.assert_not_called()
        assert "Aborted, nothing published" in capsys.readouterr().out

    def test_should_publish_when_operator_confirms(
        self, connections, mock_redis: MagicMock, monkeypatch
    ) -> None:
        """Test the affirmative answer read from stdin."""
        # Arrange
        monkeypatch.setattr("sys.stdin", io.StringIO("yes\n"))

        # Act
        exit_code = main(["start", "--batch-id", BATCH_ID, "--local-id", "b"])

        # Assert
        assert exit_code == 0
        assert mock_redis.rpush.call_count == 1

    def test_should_return_error_when_batch_not_found(
        self, connections, mock_redis: MagicMock, capsys
    ) -> None:
        """Test a fatal run error exits with 1."""
        # Act
        exit_code = main(["start", "--batch-id", "QAS-BD-MISSING", "--yes"])

        # Assert
        assert exit_code == 1
        assert "Batch not found" in capsys.readouterr().err
        mock_redis.rpush.assert_not_called()

    def test_should_return_error_when_catalog_unreachable(self, mocker, capsys) -> None:
        """Test driver errors are reported as failures."""
        # Arrange
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))
        mocker.patch("batchin.__main__.catalog_session", side_effect=error)

        # Act
        exit_code = main(["check", "--batch-id", BATCH_ID])

        # Assert
        assert exit_code == 1
        assert "catalog query failed" in capsys.readouterr().err

    def test_should_check_batch_without_transport(self, connections, capsys) -> None:
        """Test check counts records and never opens the transport."""
        # Act
        exit_code = main(["check", "--batch-id", BATCH_ID])

        # Assert
        _, mock_transport = connections
        assert exit_code == 0
        mock_transport.assert_not_called()
        assert f"Batch {BATCH_ID}: 2 record(s)" in capsys.readouterr().out

    def test_should_list_batches(self, connections, capsys) -> None:
        """Test list prints one line per batch."""
        # Act
        exit_code = main(["list"])

        # Assert
        assert exit_code == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        assert lines[0].split("\t")[:3] == [BATCH_ID, "new", "2"]

    def test_should_return_130_when_interrupted(self, mocker) -> None:
        """Test Ctrl-C during the prompt."""
        mocker.patch("batchin.__main__.catalog_session", side_effect=KeyboardInterrupt)

        exit_code = main(["list"])

        assert exit_code == 130

    @pytest.mark.parametrize(
        "argv",
        [
            ["--verbose", "start", "--batch-id", BATCH_ID],
            ["start", "--batch-id", BATCH_ID, "--verbose"],
            ["check", "-b", BATCH_ID, "-v"],
            ["list", "--verbose"],
        ],
    )
    def test_should_accept_verbose_before_or_after_command(self, argv) -> None:
        """Test --verbose is accepted on either side of the subcommand."""
        assert build_parser().parse_args(argv).verbose is True

    def test_should_default_to_not_verbose(self) -> None:
        """Test verbose logging is off unless requested."""
        assert build_parser().parse_args(["list"]).verbose is False

    def test_should_write_metrics_textfile_when_configured(
        self, connections, monkeypatch, tmp_path
    ) -> None:
        """Test run counters are exported when the process exits."""
        # Arrange
        target = tmp_path / "batchin.prom"
        monkeypatch.setenv("METRICS_TEXTFILE", str(target))

        # Act
        exit_code = main(["start", "--batch-id", BATCH_ID, "--yes"])

        # Assert
        assert exit_code == 0
        content = target.read_text()
        assert 'batchin_runs_total{outcome="completed"}' in content
        assert (
            'batchin_messages_published_total{queue="cli-watchfolder",status="success"}'
            in content
        )

    def test_should_write_metrics_textfile_when_run_fails(
        self, connections, monkeypatch, tmp_path
    ) -> None:
        """Test failed runs are exported too."""
        # Arrange
        target = tmp_path / "batchin.prom"
        monkeypatch.setenv("METRICS_TEXTFILE", str(target))

        # Act
        exit_code = main(["start", "--batch-id", "QAS-BD-MISSING", "--yes"])

        # Assert
        assert exit_code == 1
        assert 'batchin_runs_total{outcome="failed"}' in target.read_text()

    def test_should_keep_exit_code_when_metrics_textfile_unwritable(
        self, connections, monkeypatch, tmp_path
    ) -> None:
        """Test an export failure does not fail the run."""
        # Arrange
        monkeypatch.setenv("METRICS_TEXTFILE", str(tmp_path / "missing" / "x.prom"))

        # Act
        exit_code = main(["check", "--batch-id", BATCH_ID])

        # Assert
        assert exit_code == 0
