import pytest

from teamroles import create_app
from tests.utils import ManualScheduler


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "WTF_CSRF_ENABLED": False,
            "TEAMROLES_STORAGE": "sql",
            "TEAMROLES_REVEAL_INTERVAL_MS": 1,
        }
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def scheduler():
    return ManualScheduler()
