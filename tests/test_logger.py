#!/usr/bin/env python3
"""
Test suite for the package logger
"""

import logging
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from seedline.utils.logger import LOG_FORMAT, get_logger


@pytest.fixture
def clean_logger():
    logger = logging.getLogger("seedline")
    saved = list(logger.handlers)
    logger.handlers = []
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers = saved


class TestGetLogger:
    """Test cases for get_logger"""

    def test_console_only(self, clean_logger):
        logger = get_logger()
        assert logger.name == "seedline"
        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == LOG_FORMAT

    def test_file_handler_creates_directory(self, clean_logger, temp_data_dir):
        log_path = temp_data_dir / 'logs' / 'engine.log'
        logger = get_logger(log_path)
        logging.getLogger("seedline.analytics.leaderboard").info("leaderboard built")
        for handler in logger.handlers:
            handler.flush()
        assert log_path.exists()
        assert "leaderboard built" in log_path.read_text(encoding='utf-8')

    def test_handlers_not_duplicated(self, clean_logger):
        get_logger()
        logger = get_logger()
        assert len(logger.handlers) == 1
