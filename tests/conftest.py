import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_PATH", str(Path(tempfile.gettempdir()) / "continuity-tests.db"))
# Suggestion tests opt in to a key explicitly.
os.environ["GEMINI_API_KEY"] = ""
os.environ.setdefault("SEED_ON_EMPTY", "true")

from continuity.core.database import Database  # noqa: E402
from continuity.repositories import records  # noqa: E402
from continuity.services import state as state_service  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def store(tmp_path, monkeypatch):
    """A migrated SQLite store in a temporary directory, wired into the repositories."""
    test_db = Database()
    test_db._get_sqlite_path = lambda: tmp_path / "bia.db"
    await test_db.run_migrations()
    monkeypatch.setattr(records, "db", test_db)
    monkeypatch.setattr(state_service, "db", test_db)
    yield test_db
    await test_db.disconnect()
