import os

import pytest
from datetime import datetime
from fastapi.testclient import TestClient

# set test environment before the app module reads it
os.environ["APP_ENV"] = "test"

from devblog.core.config import Settings
from devblog.db.database import create_tables, get_engine, get_session_maker
from devblog.main import create_app
from devblog.schemas.post import PostCreate
from devblog.storage.database import DatabaseStorage
from devblog.storage.memory import MemoryStorage


@pytest.fixture
def test_settings():
    return Settings(app_env="test", storage_backend="memory", base_url="", log_level="WARNING")


@pytest.fixture
def memory_storage():
    """Empty in-memory storage"""
    return MemoryStorage(seed=False)


@pytest.fixture
def database_storage(tmp_path):
    """Empty SQLite-backed storage in a temporary file"""
    engine = get_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(engine)
    yield DatabaseStorage(get_session_maker(engine))
    engine.dispose()


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """Run the test once against each storage backend"""
    return request.getfixturevalue(f"{request.param}_storage")


@pytest.fixture
def client(storage, test_settings):
    """Test client over an unseeded storage; lifespan (and seeding) is not run"""
    app = create_app(storage=storage, settings=test_settings)
    return TestClient(app)


@pytest.fixture
def make_post(storage):
    """Create a post directly in storage"""
    def _make_post(slug: str, published_at: datetime, **overrides):
        data = {
            "slug": slug,
            "title": slug.replace("-", " ").title(),
            "excerpt": f"Excerpt of {slug}",
            "content": f"# {slug}",
            "reading_time": "3 min read",
            "published_at": published_at,
        }
        data.update(overrides)
        return storage.create_post(PostCreate(**data))
    return _make_post


@pytest.fixture
def five_posts(make_post):
    """Five posts, returned newest first"""
    posts = [make_post(f"post-{day}", datetime(2024, 1, day)) for day in (3, 1, 5, 2, 4)]
    return sorted(posts, key=lambda post: post.published_at, reverse=True)
