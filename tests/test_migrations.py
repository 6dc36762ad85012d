from datetime import date

from sqlalchemy import create_engine, inspect

from core.models import AllocationType, BillingModel
from infra.db.base import Base
from infra.services import open_workspace


def test_migrations_build_the_same_tables_as_the_models(tmp_path):
    db_url = f"sqlite:///{(tmp_path / 'workspace.db').as_posix()}"

    graph = open_workspace(db_url)
    graph.session.close()

    inspector = inspect(create_engine(db_url))
    migrated = set(inspector.get_table_names()) - {"alembic_version"}
    assert migrated == set(Base.metadata.tables)
    for table in Base.metadata.tables.values():
        columns = {c["name"] for c in inspector.get_columns(table.name)}
        assert columns == set(table.columns.keys()), table.name


def test_open_workspace_round_trips_through_a_migrated_file(tmp_path, support):
    db_url = f"sqlite:///{(tmp_path / 'workspace.db').as_posix()}"

    graph = open_workspace(db_url, support=support)
    workspace = graph.workspace
    client = workspace.add_client("Migrated", model=BillingModel.RETAINER, rate=90, retainer_total=12)
    workspace.log_session(client.id, date(2024, 3, 4), 2, allocation_type=AllocationType.RETAINER, work_tags=["ops"])
    graph.session.close()

    reopened = open_workspace(db_url, support=support)
    stored = reopened.workspace.get_client(client.id)
    assert stored.model == BillingModel.RETAINER
    assert stored.retainer_remaining == 10
    assert reopened.workspace.sessions[0].work_tags == ["ops"]
    assert reopened.workspace.metrics.total_revenue == 180
    reopened.session.close()
