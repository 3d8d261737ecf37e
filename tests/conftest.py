from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from qr_inventory import models  # noqa: F401  registers the inventory table
from qr_inventory.config import Settings
from qr_inventory.database import Base, make_engine
from qr_inventory.main import create_app


@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated in-memory database."""
    return Settings(database_url="sqlite://", log_level="WARNING", frontend_dir=None)


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    """Test client; entering it runs the app lifespan and creates the pool."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(settings: Settings) -> Iterator[Session]:
    """Session on a fresh in-memory database, without the HTTP layer."""
    engine = make_engine(settings)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
