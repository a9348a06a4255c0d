import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from calshare.config import AppConfig, FeedSettings
from calshare.database import Base, create_schema, dispose_engine, get_engine, get_session
from calshare.main import create_app
from calshare.routes.dependencies import FEED_EXTENSION
from calshare.services.companies import CompanyService

TEST_CONFIG = AppConfig(
    feed=FeedSettings(uid_domain="calendar.test"),
    public_base_url="https://calendar.test",
    log_level="DEBUG",
)


@pytest.fixture(scope="session")
def database_url(tmp_path_factory):
    db_file = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite:///{db_file}"


@pytest.fixture(scope="session")
def app(database_url):
    application = create_app(TEST_CONFIG, database_url=database_url)
    application.config["TESTING"] = True
    create_schema()
    yield application
    Base.metadata.drop_all(bind=get_engine())
    dispose_engine()


@pytest.fixture(autouse=True)
def clean_state(app):
    with get_engine().begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())
    orchestrator = app.extensions[FEED_EXTENSION]
    orchestrator.invalidate_all()
    orchestrator.cache.reset_stats()
    yield


@pytest.fixture
def db_session():
    session = get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def company(db_session):
    return CompanyService(db_session).create_company({"name": "Acme Corp"})


@pytest.fixture
def orchestrator(app):
    return app.extensions[FEED_EXTENSION]


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
