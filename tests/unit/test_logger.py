"""Unit tests for logger utilities."""
import shutil
import tempfile
import time
from pathlib import Path

from loguru import logger as loguru_logger

from pairline.utils.logger import get_logger, setup_logging


def test_get_logger():
    """Test getting a logger instance."""
    logger = get_logger(__name__)

    assert logger is not None
    assert hasattr(logger, 'info')
    assert hasattr(logger, 'debug')
    assert hasattr(logger, 'warning')
    assert hasattr(logger, 'error')


def test_setup_logging_default():
    """Test setup logging with default settings."""
    setup_logging()

    logger = get_logger(__name__)
    logger.info("Test message")


def test_setup_logging_accepts_lowercase_level():
    setup_logging(log_level="debug")
    get_logger(__name__).debug("lowercase level")


def test_setup_logging_with_file():
    """Test setup logging with file output."""
    tmpdir = tempfile.mkdtemp()
    try:
        log_file = Path(tmpdir) / "logs" / "signaling.log"

        setup_logging(log_level="DEBUG", log_file=log_file)

        logger = get_logger(__name__)
        logger.info("Room r1 created")

        assert log_file.exists()
        assert "Room r1 created" in log_file.read_text()

        loguru_logger.remove()
        time.sleep(0.1)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def test_bound_context_reaches_file():
    """Room and connection context show up next to the message."""
    tmpdir = tempfile.mkdtemp()
    try:
        log_file = Path(tmpdir) / "signaling.log"
        setup_logging(log_level="INFO", log_file=log_file)

        get_logger(__name__, room="r1").info("Room created")
        get_logger(__name__).bind(room="{odd}", connection="c1").info("Left room")
        get_logger(__name__).info("No context")

        lines = log_file.read_text().splitlines()
        assert any("room=r1 - Room created" in line for line in lines)
        assert any("room={odd} connection=c1 - Left room" in line for line in lines)
        plain = [line for line in lines if "No context" in line]
        assert plain and "room=" not in plain[0]

        loguru_logger.remove()
        time.sleep(0.1)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)
