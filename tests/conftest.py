# tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from infra.db.base import Base
from infra.operational_support import OperationalSupport
from infra.services import build_service_graph


@pytest.fixture
def engine():
    # one shared in-memory connection, usable from worker threads
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def support(tmp_path):
    return OperationalSupport(events_path=tmp_path / "support-events.jsonl")


@pytest.fixture
def services(session, support):
    graph = build_service_graph(session, support=support)
    graph.workspace.load()
    return graph.as_dict()


@pytest.fixture
def workspace(services):
    return services["workspace"]


@pytest.fixture
def studio_workspace(workspace):
    # lift plan limits for tests that are not about gating
    workspace.switch_plan("studio")
    return workspace
