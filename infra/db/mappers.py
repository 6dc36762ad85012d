from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable

from core.models import (
    Client,
    ClientNote,
    ExternalLink,
    Milestone,
    Project,
    WorkSession,
)
from infra.db.models import ClientNoteORM, ClientORM, ProjectORM, WorkSessionORM


def links_to_json(links: Iterable[ExternalLink]) -> list[dict[str, Any]]:
    return [{"label": link.label, "url": link.url} for link in links]


def links_from_json(rows: Iterable[dict[str, Any]] | None) -> list[ExternalLink]:
    return [ExternalLink(label=str(r.get("label", "")), url=str(r.get("url", ""))) for r in rows or []]


def milestones_to_json(milestones: Iterable[Milestone]) -> list[dict[str, Any]]:
    return [
        {
            "title": m.title,
            "due_date": m.due_date.isoformat() if m.due_date else None,
            "done": m.done,
        }
        for m in milestones
    ]


def milestones_from_json(rows: Iterable[dict[str, Any]] | None) -> list[Milestone]:
    out: list[Milestone] = []
    for r in rows or []:
        due = r.get("due_date")
        out.append(
            Milestone(
                title=str(r.get("title", "")),
                due_date=date.fromisoformat(due) if due else None,
                done=bool(r.get("done", False)),
            )
        )
    return out


def client_to_orm(client: Client) -> ClientORM:
    return ClientORM(
        id=client.id,
        name=client.name,
        model=client.model,
        rate=client.rate,
        status=client.status,
        contact_name=client.contact_name,
        contact_email=client.contact_email,
        website=client.website,
        show_portal_costs=client.show_portal_costs,
        retainer_total=client.retainer_total,
        retainer_remaining=client.retainer_remaining,
        monthly_earnings=client.monthly_earnings,
        lifetime_revenue=client.lifetime_revenue,
        hours_logged=client.hours_logged,
        last_session_date=client.last_session_date,
        true_hourly_rate=client.true_hourly_rate,
        external_links=links_to_json(client.external_links),
    )


def client_from_orm(obj: ClientORM) -> Client:
    return Client(
        id=obj.id,
        name=obj.name,
        model=obj.model,
        rate=obj.rate or 0.0,
        status=obj.status,
        contact_name=obj.contact_name or "",
        contact_email=obj.contact_email or "",
        website=obj.website or "",
        show_portal_costs=bool(obj.show_portal_costs),
        retainer_total=obj.retainer_total or 0.0,
        retainer_remaining=obj.retainer_remaining or 0.0,
        monthly_earnings=obj.monthly_earnings or 0.0,
        lifetime_revenue=obj.lifetime_revenue or 0.0,
        hours_logged=obj.hours_logged or 0.0,
        last_session_date=obj.last_session_date,
        true_hourly_rate=obj.true_hourly_rate or 0.0,
        external_links=links_from_json(obj.external_links),
    )


def project_to_orm(project: Project) -> ProjectORM:
    return ProjectORM(
        id=project.id,
        client_id=project.client_id,
        name=project.name,
        status=project.status,
        estimated_hours=project.estimated_hours,
        total_value=project.total_value,
        hours=project.hours,
        revenue=project.revenue,
        start_date=project.start_date,
        end_date=project.end_date,
        milestones=milestones_to_json(project.milestones),
        external_links=links_to_json(project.external_links),
    )


def project_from_orm(obj: ProjectORM) -> Project:
    return Project(
        id=obj.id,
        client_id=obj.client_id,
        name=obj.name,
        status=obj.status,
        estimated_hours=obj.estimated_hours or 0.0,
        total_value=obj.total_value or 0.0,
        hours=obj.hours or 0.0,
        revenue=obj.revenue or 0.0,
        start_date=obj.start_date,
        end_date=obj.end_date,
        milestones=milestones_from_json(obj.milestones),
        external_links=links_from_json(obj.external_links),
    )


def work_session_to_orm(session: WorkSession) -> WorkSessionORM:
    return WorkSessionORM(
        id=session.id,
        client_id=session.client_id,
        client_name=session.client_name,
        session_date=session.date,
        duration=session.duration,
        revenue=session.revenue,
        billable=session.billable,
        task=session.task,
        work_tags=list(session.work_tags),
        allocation_type=session.allocation_type,
        project_id=session.project_id,
    )


def work_session_from_orm(obj: WorkSessionORM) -> WorkSession:
    return WorkSession(
        id=obj.id,
        client_id=obj.client_id,
        client_name=obj.client_name or "",
        date=obj.session_date,
        duration=obj.duration,
        revenue=obj.revenue or 0.0,
        billable=bool(obj.billable),
        task=obj.task or "",
        work_tags=list(obj.work_tags or []),
        allocation_type=obj.allocation_type,
        project_id=obj.project_id,
    )


def note_to_orm(note: ClientNote) -> ClientNoteORM:
    return ClientNoteORM(
        id=note.id,
        client_id=note.client_id,
        content=note.content,
        type=note.type,
        tags=list(note.tags),
        project_id=note.project_id,
        is_pinned=note.is_pinned,
        is_resolved=note.is_resolved,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def note_from_orm(obj: ClientNoteORM) -> ClientNote:
    return ClientNote(
        id=obj.id,
        client_id=obj.client_id,
        content=obj.content,
        type=obj.type,
        tags=list(obj.tags or []),
        project_id=obj.project_id,
        is_pinned=bool(obj.is_pinned),
        is_resolved=bool(obj.is_resolved),
        created_at=_as_utc(obj.created_at),
        updated_at=_as_utc(obj.updated_at),
    )


__all__ = [
    "client_to_orm",
    "client_from_orm",
    "project_to_orm",
    "project_from_orm",
    "work_session_to_orm",
    "work_session_from_orm",
    "note_to_orm",
    "note_from_orm",
]
