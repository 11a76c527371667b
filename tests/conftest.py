import logging
from pathlib import Path

import pytest

from trafficreg.data.store import SignalStore


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "traffic_signals.txt"


@pytest.fixture
def store(data_file: Path) -> SignalStore:
    return SignalStore(data_file)


@pytest.fixture
def seeded_store(store: SignalStore) -> SignalStore:
    store.register(1, "Main St", 50, 30)
    store.register(2, "Oak Ave", 85, 45)
    store.register(3, "5th & Pine", 20, 25)
    return store


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo any handler installed by ``configure_logging`` during a test."""
    yield
    logger = logging.getLogger("trafficreg")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
