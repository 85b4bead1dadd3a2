"""Shared test configuration and fixtures."""

from unittest.mock import MagicMock, Mock

import pytest
from sqlalchemy import Column, Integer, String

from entityservice.config.settings import get_settings
from entityservice.ormdb.database import (
    Base,
    create_session_factory,
    create_tables,
    reset_configuration,
)
from entityservice.service import EntityService


class Widget(Base):
    """Simple entity with a single integer key."""

    __tablename__ = "widgets"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    def __repr__(self):
        return f"<Widget(id={self.id}, name='{self.name}')>"


class Gadget(Base):
    """Entity with a unique column, used to provoke constraint violations."""

    __tablename__ = "gadgets"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)


class Membership(Base):
    """Entity with a composite primary key."""

    __tablename__ = "memberships"

    group_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, primary_key=True)
    role = Column(String, nullable=False, default="member")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temporary data directory and reset global state."""
    monkeypatch.setenv("ENVIRONMENT", "testing")
    monkeypatch.setenv("DATA_DIRECTORY", str(tmp_path / "data"))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("PERSISTENCE_UNITS", raising=False)
    get_settings.cache_clear()

    yield get_settings()

    reset_configuration()
    get_settings.cache_clear()


@pytest.fixture
def isolated_db(tmp_path):
    """Standalone session factory on a temporary SQLite file with all tables."""
    factory = create_session_factory(f"sqlite:///{tmp_path / 'isolated.db'}")
    create_tables(factory)

    yield factory

    factory.dispose()


@pytest.fixture
def widget_cls():
    return Widget


@pytest.fixture
def gadget_cls():
    return Gadget


@pytest.fixture
def membership_cls():
    return Membership


@pytest.fixture
def widget_service(isolated_db):
    return EntityService(Widget, isolated_db)


@pytest.fixture
def mock_session():
    """Session double whose transaction reports itself as active."""
    session = MagicMock()
    session.__contains__.return_value = False
    session.get_transaction.return_value = Mock(is_active=True)
    return session


@pytest.fixture
def mock_factory(mock_session):
    """Session factory double handing out ``mock_session``."""
    factory = Mock()
    factory.unit_name = "mock"
    factory.create_session.return_value = mock_session
    return factory
