import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from app.main import create_app
from app.core.config import Settings
from app.db.database import build_engine, build_session_factory
from app.db.file_store import JsonFileStore
from app.db.models import Base
from app.db.repository import SqlRecordStore
from app.services.shortener import URLRegistry
from app.utils.encoding import CodeGenerator


# Create in-memory SQLite database for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
AUTH_TOKEN = "test-secret"
BASE_URL = "https://sho.rt/"


@pytest.fixture
def file_store(tmp_path):
    """A JSON store in a fresh temporary directory."""
    return JsonFileStore(tmp_path / "urls.json")


@pytest.fixture
def sql_store():
    """Creates a fresh in-memory database for each test."""
    engine = build_engine(SQLALCHEMY_TEST_DATABASE_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    store = SqlRecordStore(build_session_factory(engine), engine=engine)
    try:
        yield store
    finally:
        Base.metadata.drop_all(bind=engine)
        store.close()


@pytest.fixture(params=["file", "database"])
def store(request):
    """Runs a test once per storage backend."""
    if request.param == "file":
        return request.getfixturevalue("file_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def registry(store):
    return URLRegistry(store, BASE_URL)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        AUTH_TOKEN=AUTH_TOKEN,
        BASE_URL=BASE_URL,
        STORAGE_BACKEND="file",
        STORAGE_PATH=str(tmp_path / "urls.json"),
        HOME_REDIRECT_URL=None,
    )


@pytest.fixture
def client(settings, file_store):
    """Creates a test client backed by a temporary JSON store."""
    app = create_app(settings, URLRegistry(file_store, settings.BASE_URL))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_token():
    return AUTH_TOKEN


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {AUTH_TOKEN}"}


@pytest.fixture
def sample_urls():
    """Provides sample URLs for testing."""
    return [
        "https://example.com/test1",
        "https://google.com/search?q=test",
        "https://github.com/user/repo",
    ]


class ScriptedGenerator(CodeGenerator):
    """Hands out a fixed sequence of candidates."""

    def __init__(self, candidates, **kwargs):
        super().__init__(**kwargs)
        self.candidates = list(candidates)

    def draw(self):
        return self.candidates.pop(0)


@pytest.fixture
def scripted_generator():
    return ScriptedGenerator
