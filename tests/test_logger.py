"""
Tests for logging setup.
"""
import logging

from GroupTabs.utils.logger import ColoredFormatter, get_logger, setup_logging


def test_get_logger_nests_under_package():
    assert get_logger("tests.sample").name == "GroupTabs.tests.sample"
    assert get_logger("GroupTabs.window_group").name == "GroupTabs.window_group"


def test_setup_logging_writes_rotating_file(tmp_path):
    root = setup_logging(debug=False, log_dir=tmp_path)
    try:
        get_logger("tests.sample").info("hello from the test")
        for handler in root.handlers:
            handler.flush()

        assert (tmp_path / "grouptabs.log").read_text(encoding="utf-8").count("hello from the test") == 1
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path):
    setup_logging(log_dir=tmp_path)
    root = setup_logging(log_dir=tmp_path)
    try:
        assert len(root.handlers) == 1
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()


def test_colored_formatter_restores_levelname():
    formatter = ColoredFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("GroupTabs", logging.WARNING, __file__, 1, "careful", None, None)

    output = formatter.format(record)

    assert "careful" in output
    assert "\033[33m" in output
    assert record.levelname == "WARNING"
