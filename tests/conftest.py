"""Pytest configuration for global fixtures, database and logging setup."""
from __future__ import annotations

import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="runplan-tests-"))

os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'runplan-test.db'}"
os.environ["LOG_DIR"] = str(_TEST_ROOT / "logs")
os.environ["LOCK_DIR"] = str(_TEST_ROOT / "locks")
os.environ["SIMULATION_ENABLED"] = "true"
os.environ["SIMULATION_BUFFER_DAYS"] = "0"

from runplan.logging_config import configure_logging

configure_logging()

from runplan.database import Base, SessionLocal, engine
from runplan.models import database_models  # noqa: F401
from runplan.main import app

Base.metadata.create_all(engine)

# Wednesday; Monday-anchored weeks start on 2026-10-19, Sunday-anchored on 2026-10-18.
REFERENCE_DAY = date(2026, 10, 21)


@pytest.fixture(scope="session")
def test_client() -> TestClient:
    """Provide a FastAPI test client."""

    return TestClient(app)


@pytest.fixture()
def db_session() -> Iterator[Session]:
    """Provide a database session that is rolled back and closed after the test."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture(autouse=True)
def clean_database() -> Iterator[None]:
    """Remove every row written by a test."""

    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def reference_day() -> date:
    return REFERENCE_DAY
