from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TEST_DIR = Path(tempfile.gettempdir()) / "jobtracker-tests"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'jobtracker.db'}"
os.environ["DATA_DIR"] = str(_TEST_DIR)
os.environ["APP_ENV"] = "test"

import pytest  # noqa: E402

from jobtracker.core.runtime import Tracker, build_tracker  # noqa: E402
from jobtracker.db.base import Base  # noqa: E402
from jobtracker.db.init import ensure_data_directories  # noqa: E402
from jobtracker.db.session import engine  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db() -> None:
    ensure_data_directories()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def tracker() -> Tracker:
    return build_tracker()
