"""Shared pytest fixtures for delivery intake tests."""
import sys
sys.dont_write_bytecode = True

import logging  # noqa: E402

import pytest  # noqa: E402

from delivery_intake.infra.order_store import InMemoryOrderStore  # noqa: E402
from delivery_intake.infra.settings import Settings  # noqa: E402


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def store():
    """Empty in-memory order store."""
    return InMemoryOrderStore()


@pytest.fixture
def settings():
    """Default settings: all groups, no confirmations."""
    return Settings()


@pytest.fixture
def intake_logs():
    """Capture records from the intake logger.

    JSON loggers do not propagate to root, so caplog cannot see them.
    """
    import delivery_intake.domain.intake as intake_module

    handler = _ListHandler()
    intake_module.logger.addHandler(handler)
    yield handler.records
    intake_module.logger.removeHandler(handler)
