"""Test reporters and logging setup."""

import json
import logging

from spotfit.core.shared.reporter import LoggingReporter, NullReporter, Reporter
from spotfit.ui import ConsoleReporter
from spotfit.ui.logging import close_logging, log, log_dict, setup_logging


class TestReporters:
    """Tests for Reporter implementations."""

    def test_protocol_compliance(self):
        """All reporters satisfy the Reporter protocol."""
        for reporter in (NullReporter(), LoggingReporter(), ConsoleReporter()):
            assert isinstance(reporter, Reporter)

    def test_logging_reporter(self, caplog):
        """Actions and successes are prefixed."""
        reporter = LoggingReporter("spotfit.test")
        with caplog.at_level(logging.INFO, logger="spotfit.test"):
            reporter.action("Linking")
            reporter.success("Done")
            reporter.warning("Careful")
        assert "[ACTION] Linking" in caplog.text
        assert "[SUCCESS] Done" in caplog.text
        assert any(record.levelno == logging.WARNING for record in caplog.records)


class TestLogging:
    """Tests for the spotfit logger configuration."""

    def test_disabled_by_default(self):
        """Without a file or verbose flag nothing is configured."""
        assert setup_logging() is None
        log("ignored")

    def test_text_log_file(self, tmp_path):
        """Messages are written to the log file."""
        path = tmp_path / "logs" / "run.log"
        setup_logging(path)
        log("hello spotfit")
        log_dict({"frames": 5})
        close_logging()
        content = path.read_text()
        assert "hello spotfit" in content
        assert "- frames: 5" in content

    def test_json_log_file(self, tmp_path):
        """A .json log file holds one JSON record per line."""
        path = tmp_path / "run.json"
        setup_logging(path)
        log("structured", level="warning")
        close_logging()
        records = [json.loads(line) for line in path.read_text().splitlines()]
        assert {"message": "structured", "level": "WARNING"}.items() <= next(
            r for r in records if r["message"] == "structured"
        ).items()
