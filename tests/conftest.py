import os
import sys
import tempfile
from pathlib import Path
import pytest

# Make the project importable no matter which directory the tests run from
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep test logs out of the project tree; os.environ wins over .env
os.environ["LOG_FILE_PATH"] = str(Path(tempfile.mkdtemp(prefix="schemadb-logs-")) / "test.log")

from schemadb.config.env import EnvLoader
from schemadb.db.manager.db_manager import Db
from schemadb.db.schema import Schema
from schemadb.managers.error_manager import ErrorManager
from schemadb.managers.event_manager import EventManager
from schemadb.managers.log_manager import LogManager
from app.models.user import register


@pytest.fixture(scope="session", autouse=True)
def ensure_env():
    """Loads .env once; individual tests override APP_ENV through monkeypatch."""
    EnvLoader.load()
    yield


@pytest.fixture(autouse=True)
def clean_managers():
    EventManager.initialize()
    LogManager.initialize()
    ErrorManager.initialize()
    yield
    EventManager.initialize()


@pytest.fixture
def prod_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")


@pytest.fixture
def dev_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")


@pytest.fixture
def db():
    """In-memory Db, closed after the test."""
    database = Db().connect(":memory:")
    yield database
    database.close()


@pytest.fixture
def people(db):
    return db.model("person", Schema({
        "name": {"type": "text", "required": True},
        "age": {"type": "number", "default": 0},
    }))


@pytest.fixture
def users(db):
    return register(db)


@pytest.fixture
def make_rows():
    """
    Helper: creates three standard people and returns them (Ana, Boris, Ceca).
    """
    def _maker(model):
        return (
            model.create({"name": "Ana", "age": 30}),
            model.create({"name": "Boris", "age": 25}),
            model.create({"name": "Ceca", "age": 27}),
        )
    return _maker


@pytest.fixture
def recorder():
    """callback(err, result) that remembers every call."""
    class _Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, err, result):
            self.calls.append((err, result))

        @property
        def err(self):
            return self.calls[-1][0]

        @property
        def result(self):
            return self.calls[-1][1]

    return _Recorder()
