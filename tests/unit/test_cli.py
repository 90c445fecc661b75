# tests/unit/test_cli.py
"""Tests for the command line entry point and its exit codes."""

import os
import signal
from unittest.mock import MagicMock

import pytest

from thumbnail_ingest import cli
from thumbnail_ingest.constants import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from thumbnail_ingest.database.exceptions import ImageOperationError, StoreConnectionError
from thumbnail_ingest.pipeline_context import PipelineContext
from thumbnail_ingest.services.logger import reset_logging


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_DIRECTORY", str(tmp_path / "logs"))
    for name in ("DEFAULT_BATCH_SIZE", "MAX_RETRY_ATTEMPTS", "CSV_PATH", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    reset_logging()


@pytest.fixture
def db():
    database = MagicMock()
    database.is_initialized = True
    return database


@pytest.fixture
def contexts(monkeypatch, db, fetcher, record_store):
    """Route the CLI's PipelineContext onto in-memory fakes."""
    created = []
    monkeypatch.setattr("thumbnail_ingest.pipeline_context.SchemaManager", MagicMock())
    monkeypatch.setattr(
        "thumbnail_ingest.pipeline_context.RecordStore", lambda database: record_store
    )

    def build(settings):
        ctx = PipelineContext(settings, db=db, fetcher=fetcher)
        created.append(ctx)
        return ctx

    monkeypatch.setattr(cli, "PipelineContext", build)
    return created


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "input.csv"
    path.write_text(
        "id,url,index\n"
        + "".join(f"img-{i},https://x/img-{i}.png,{i}\n" for i in range(5))
    )
    return path


@pytest.mark.unit
class TestCli:
    def test_run_processes_csv(self, contexts, csv_file, record_store):
        code = cli.main(["run", "--csv", str(csv_file), "--batch-size", "2"])

        assert code == EXIT_SUCCESS
        assert len(record_store.images) == 5
        assert contexts[0].settings.batch_size == 2

    def test_row_failures_do_not_change_exit_code(
        self, contexts, csv_file, fetcher, record_store
    ):
        fetcher.failing_urls = {"https://x/img-1.png"}

        assert cli.main(["run", "--csv", str(csv_file)]) == EXIT_SUCCESS
        assert set(record_store.failures) == {"img-1"}

    def test_missing_csv_exits_with_failure(self, contexts, tmp_path):
        assert cli.main(["run", "--csv", str(tmp_path / "nope.csv")]) == EXIT_FAILURE

    def test_store_connection_failure_exits_with_failure(self, contexts, db, csv_file):
        db.initialize.side_effect = StoreConnectionError(
            "Failed to connect to store", operation="initialize"
        )
        assert cli.main(["run", "--csv", str(csv_file)]) == EXIT_FAILURE

    def test_invalid_configuration_exits_with_failure(self, contexts):
        assert cli.main(["run", "--batch-size", "0"]) == EXIT_FAILURE
        assert contexts == []

    def test_retry_command(self, contexts, csv_file, fetcher, record_store):
        fetcher.failing_urls = {"https://x/img-1.png", "https://x/img-3.png"}
        cli.main(["run", "--csv", str(csv_file)])
        fetcher.failing_urls = set()

        assert cli.main(["retry", "--max-attempts", "5"]) == EXIT_SUCCESS
        assert record_store.failures == {}
        assert ("list_failures", 5) in record_store.calls

    def test_failures_command_lists_entries(
        self, contexts, csv_file, fetcher, capsys
    ):
        fetcher.failing_urls = {"https://x/img-2.png"}
        cli.main(["run", "--csv", str(csv_file)])
        capsys.readouterr()

        assert cli.main(["failures", "--all"]) == EXIT_SUCCESS
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("img-2\t2\t1\t")

    def test_signal_stops_pass_between_chunks(
        self, contexts, csv_file, fetcher, record_store
    ):
        def interrupt(record_id, url):
            if record_id == "img-0":
                os.kill(os.getpid(), signal.SIGINT)

        fetcher.on_fetch = interrupt
        previous = signal.getsignal(signal.SIGINT)

        code = cli.main(["run", "--csv", str(csv_file), "--batch-size", "2"])

        assert code == EXIT_INTERRUPTED
        assert set(record_store.images) == {"img-0", "img-1"}
        assert signal.getsignal(signal.SIGINT) is previous

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_store_count_failure_after_pass_keeps_success(
        self, monkeypatch, contexts, csv_file, record_store, capsys
    ):
        def broken_count():
            raise ImageOperationError("count failed", operation="count_images")

        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setattr(record_store, "count_images", broken_count)

        assert cli.main(["run", "--csv", str(csv_file)]) == EXIT_SUCCESS
        assert len(record_store.images) == 5
        err = capsys.readouterr().err
        assert "Could not count stored thumbnails" in err
        assert "'run' failed" not in err

    def test_unwritable_log_directory_is_reported(
        self, monkeypatch, contexts, csv_file, tmp_path, capsys
    ):
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        monkeypatch.setenv("LOG_DIRECTORY", str(blocker / "logs"))

        assert cli.main(["run", "--csv", str(csv_file)]) == EXIT_FAILURE
        assert contexts == []
        assert "'run' failed unexpectedly" in capsys.readouterr().err

    def test_unexpected_command_error_is_reported(
        self, monkeypatch, contexts, csv_file, capsys
    ):
        def crash(ctx, args):
            raise RuntimeError("boom")

        monkeypatch.setitem(cli.COMMANDS, "run", crash)

        assert cli.main(["run", "--csv", str(csv_file)]) == EXIT_FAILURE
        assert "'run' failed unexpectedly: boom" in capsys.readouterr().err
