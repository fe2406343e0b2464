"""Tests for logging module."""
import logging

from icdrive.core.logging import get_logger, setup_logging


class TestLogging:
    """Test logger helpers."""

    def test_get_logger_propagates(self):
        logger = get_logger('icdrive.test.propagate')

        assert logger.name == 'icdrive.test.propagate'
        assert logger.propagate is True

    def test_setup_logging_sets_package_levels(self):
        child = get_logger('icdrive.test.level')

        setup_logging(logging.DEBUG)
        try:
            assert logging.getLogger('icdrive').level == logging.DEBUG
            assert child.level == logging.DEBUG
        finally:
            setup_logging(logging.WARNING)

    def test_setup_logging_leaves_other_loggers(self):
        other = logging.getLogger('somethingelse.icdrive')
        other.setLevel(logging.ERROR)

        setup_logging(logging.DEBUG)
        try:
            assert other.level == logging.ERROR
        finally:
            setup_logging(logging.WARNING)
