"""Tests for logging setup."""

import logging
from contextlib import contextmanager

from src.logging_config import setup_logging


@contextmanager
def _bare_root_logger():
    """Run with no root handlers, restoring pytest's own capture handlers after.

    Entered inside the test body because pytest installs its handlers for the
    call phase after fixtures have run.
    """
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)


class TestSetupLogging:
    def test_file_records_debug(self, tmp_path):
        with _bare_root_logger() as root:
            log_file = setup_logging(log_dir=tmp_path)
            logging.getLogger("src.auction_manager.turn_scheduler").debug(
                "Turn 0 timed out"
            )
            for handler in root.handlers:
                handler.flush()

        assert log_file == tmp_path / "auction_manager.log"
        assert "Turn 0 timed out" in log_file.read_text(encoding="utf-8")

    def test_console_level(self, tmp_path):
        with _bare_root_logger() as root:
            setup_logging("info", log_dir=tmp_path)
            console = [
                h for h in root.handlers if type(h) is logging.StreamHandler
            ]

        assert len(console) == 1
        assert console[0].level == logging.INFO

    def test_idempotent(self, tmp_path):
        with _bare_root_logger() as root:
            setup_logging(log_dir=tmp_path)
            second = setup_logging(log_dir=tmp_path)
            handler_count = len(root.handlers)

        assert second is None
        assert handler_count == 2

    def test_skips_when_already_configured(self, tmp_path):
        with _bare_root_logger() as root:
            root.addHandler(logging.NullHandler())
            assert setup_logging(log_dir=tmp_path) is None
            assert not (tmp_path / "auction_manager.log").exists()
