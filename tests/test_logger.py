import logging

import pytest
from fastapi.testclient import TestClient

from careswap.core.config import Settings
from careswap.core.logger import LOGGER_NAME, configure_logging, get_logger
from careswap.main import create_app


@pytest.fixture
def careswap_logger():
    logger = logging.getLogger(LOGGER_NAME)
    before = list(logger.handlers)
    yield logger
    for handler in logger.handlers:
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()


def file_handlers(logger: logging.Logger) -> list[logging.FileHandler]:
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


def stdout_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if type(h) is logging.StreamHandler]


def test_log_file_attached_after_stream_handler(careswap_logger, tmp_path):
    # importing careswap.main already configured the stdout handler
    assert stdout_handlers(careswap_logger)

    log_file = tmp_path / "logs" / "careswap.log"
    with TestClient(create_app(Settings(log_file=str(log_file)))):
        pass

    [handler] = file_handlers(careswap_logger)
    assert handler.baseFilename == str(log_file.resolve())

    get_logger("tests").warning("written to the file")
    handler.flush()
    assert "written to the file" in log_file.read_text(encoding="utf-8")


def test_configure_logging_twice_does_not_duplicate_handlers(careswap_logger, tmp_path):
    log_file = str(tmp_path / "careswap.log")
    configure_logging("INFO", log_file)
    configure_logging("INFO", log_file)

    assert len(stdout_handlers(careswap_logger)) == 1
    assert len(file_handlers(careswap_logger)) == 1
