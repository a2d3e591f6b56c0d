"""Root conftest: test env and DB apply to ALL test paths (tests/, loopy/api/tests/).

Must run before anything imports loopy.api.db, which builds the engine from DATABASE_URL.
"""

import os
import tempfile

import pytest

os.environ["ENV"] = "test"
os.environ.setdefault("PYTEST_RUNNING", "1")

# Tests never touch a shared database: a throwaway SQLite file per session,
# schema from create_all (Postgres deployments use Alembic).
_TEST_DB_DIR = tempfile.mkdtemp(prefix="loopy-test-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'loopy.db')}"


@pytest.fixture
def db():
    """Fresh, empty tables for one test."""
    from loopy.api.db import reset_tables

    reset_tables()
    yield
