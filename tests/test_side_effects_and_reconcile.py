import logging
from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import PersistenceError
from core.models import AllocationType, BillingModel


def _boom(*_args, **_kwargs):
    raise SQLAlchemyError("database is locked")


def test_failed_session_write_leaves_memory_untouched(workspace, monkeypatch):
    client = workspace.add_client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20)
    snapshot_before = workspace.metrics
    monkeypatch.setattr(workspace._session_repo, "add", _boom)

    with pytest.raises(PersistenceError) as exc:
        workspace.log_session(client.id, date(2024, 3, 4), 5, allocation_type=AllocationType.RETAINER)

    assert exc.value.code == "PERSISTENCE_FAILED"
    assert workspace.sessions == []
    assert workspace.get_client(client.id).retainer_remaining == 20
    assert workspace.metrics is snapshot_before


def test_failed_client_write_is_not_cached(workspace, monkeypatch):
    monkeypatch.setattr(workspace._client_repo, "add", _boom)

    with pytest.raises(PersistenceError):
        workspace.add_client("Never stored", rate=10)

    assert workspace.clients == []


def test_failed_retainer_patch_is_logged_not_raised(workspace, support, monkeypatch, caplog):
    client = workspace.add_client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20)
    monkeypatch.setattr(workspace._client_repo, "update_fields", _boom)

    with caplog.at_level(logging.WARNING):
        logged = workspace.log_session(client.id, date(2024, 3, 4), 5, allocation_type=AllocationType.RETAINER)

    assert workspace.get_session(logged.id) is not None
    assert workspace.metrics.total_revenue == 500
    # the balance was never stored, so it is not changed in memory either
    assert workspace.get_client(client.id).retainer_remaining == 20
    assert "update retainer balance" in caplog.text

    events = support.read_events(event_type="allocation.side_effect_failed")
    assert events
    assert events[0]["level"] == "WARNING"
    assert events[0]["data"]["session_id"] == logged.id


def test_skipped_reversal_is_reported(workspace, support):
    client = workspace.add_client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20)
    logged = workspace.log_session(client.id, date(2024, 3, 4), 5, allocation_type=AllocationType.RETAINER)
    workspace.update_client(client.id, model=BillingModel.HOURLY)

    workspace.delete_session(logged.id)

    assert workspace.sessions == []
    events = support.read_events(event_type="allocation.side_effect_skipped")
    assert len(events) == 1
    assert "not on a retainer" in events[0]["message"]


def test_reconcile_repairs_drift_from_failed_side_effects(workspace, monkeypatch):
    retained = workspace.add_client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20)
    builder = workspace.add_client("Builder", rate=100)
    project = workspace.add_project(builder.id, "Rebuild")

    with monkeypatch.context() as patch:
        patch.setattr(workspace._client_repo, "update_fields", _boom)
        patch.setattr(workspace._project_repo, "update_fields", _boom)
        workspace.log_session(retained.id, date(2024, 3, 4), 5, allocation_type=AllocationType.RETAINER)
        workspace.log_session(
            builder.id,
            date(2024, 3, 5),
            3,
            allocation_type=AllocationType.PROJECT,
            project_id=project.id,
        )

    assert workspace.get_client(retained.id).retainer_remaining == 20
    assert workspace.get_project(project.id).hours == 0

    report = workspace.reconcile()

    assert report.changed
    assert report.projects == [project.id]
    assert report.retainers == [retained.id]
    assert set(report.rollups) == {retained.id, builder.id}
    assert workspace.get_client(retained.id).retainer_remaining == 15
    assert workspace.get_client(retained.id).hours_logged == 5
    assert (workspace.get_project(project.id).hours, workspace.get_project(project.id).revenue) == (3, 300)

    assert not workspace.reconcile().changed


def test_reconcile_can_limit_retainer_usage_to_current_cycle(workspace):
    client = workspace.add_client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20)
    workspace.log_session(client.id, date(2024, 2, 20), 5, allocation_type=AllocationType.RETAINER)
    workspace.log_session(client.id, date(2024, 3, 4), 2, allocation_type=AllocationType.RETAINER)
    assert workspace.get_client(client.id).retainer_remaining == 13

    report = workspace.reconcile(retainer_cycle_start=date(2024, 3, 1))

    assert report.retainers == [client.id]
    assert workspace.get_client(client.id).retainer_remaining == 18


def test_failed_reconcile_raises_and_keeps_memory(workspace, monkeypatch):
    client = workspace.add_client("Retained", model=BillingModel.RETAINER, rate=100, retainer_total=20)
    with monkeypatch.context() as patch:
        patch.setattr(workspace._client_repo, "update_fields", _boom)
        workspace.log_session(client.id, date(2024, 3, 4), 5, allocation_type=AllocationType.RETAINER)

        with pytest.raises(PersistenceError):
            workspace.reconcile()

    assert workspace.get_client(client.id).retainer_remaining == 20
