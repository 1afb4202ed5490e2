import os
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time, so the environment is prepared before
# any test module imports `quizhub`.
_tmp_dir = Path(tempfile.mkdtemp(prefix="quizhub-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp_dir / 'test.db'}"
os.environ["JWT_SECRET"] = "quizhub-test-secret-with-enough-length-for-hs256"
os.environ["ADMIN_USERNAMES"] = "admin"
os.environ["SUBMIT_RATE_LIMIT_PER_MIN"] = "1000"


@pytest.fixture(scope="session", autouse=True)
def reset_db():
    """Ensure a fresh SQLite database for tests."""
    from sqlmodel import SQLModel
    from quizhub.database import create_db_and_tables, engine

    SQLModel.metadata.drop_all(engine)
    create_db_and_tables()
    yield


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    from quizhub.main import app

    app.state.submit_rate_limiter.reset()
    yield
