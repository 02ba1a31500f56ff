import logging
from logging.handlers import RotatingFileHandler

from config.constants import LOG_ENV_VAR, LOG_FILE_NAME
from utils import logger as app_logger
from utils.logger import ROOT_LOGGER_NAME, SensitiveDataFilter, setup_logging


def _file_handler():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    return next(h for h in root.handlers if isinstance(h, RotatingFileHandler))


def _flush():
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()


def test_setup_logging_writes_file(tmp_path):
    setup_logging(log_dir=tmp_path, level="INFO", console_output=False)

    logging.getLogger("studyplanner.calendar.manager").info("Loaded %s upcoming events", 3)
    _flush()

    assert _file_handler().baseFilename == str(tmp_path / LOG_FILE_NAME)
    content = (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "studyplanner.calendar.manager - INFO - Loaded 3 upcoming events" in content


def test_setup_logging_defaults_to_app_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(app_logger, "get_app_dir", lambda: tmp_path)

    setup_logging(console_output=False)

    assert _file_handler().baseFilename == str(tmp_path / "logs" / LOG_FILE_NAME)


def test_setup_logging_replaces_handlers(tmp_path):
    setup_logging(log_dir=tmp_path, console_output=True)
    setup_logging(log_dir=tmp_path, console_output=True)

    assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 2


def test_level_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(LOG_ENV_VAR, "development")

    setup_logging(log_dir=tmp_path, console_output=False)

    assert _file_handler().level == logging.DEBUG


def test_default_level_is_info(tmp_path, monkeypatch):
    monkeypatch.delenv(LOG_ENV_VAR, raising=False)

    setup_logging(log_dir=tmp_path, console_output=False)

    assert _file_handler().level == logging.INFO


def test_tokens_are_masked_in_file(tmp_path):
    setup_logging(log_dir=tmp_path, level="DEBUG", console_output=False)

    logging.getLogger("studyplanner.calendar_sync.google").debug(
        "Sending Authorization: Bearer %s with token=%s", "ya29.secret", "abc123"
    )
    _flush()

    content = (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "ya29.secret" not in content
    assert "abc123" not in content
    assert "Bearer ***" in content


def test_filter_leaves_plain_messages():
    record = logging.LogRecord(
        "studyplanner", logging.INFO, __file__, 1, "Fetched %s events", (4,), None
    )

    assert SensitiveDataFilter().filter(record) is True
    assert record.getMessage() == "Fetched 4 events"
