# infra/db/models.py
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from infra.db.base import Base
from core.models import (
    AllocationType,
    BillingModel,
    ClientStatus,
    NoteType,
    ProjectStatus,
)


class ClientORM(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    model: Mapped[BillingModel] = mapped_column(
        SAEnum(BillingModel), default=BillingModel.HOURLY, nullable=False
    )
    rate: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[ClientStatus] = mapped_column(
        SAEnum(ClientStatus), default=ClientStatus.ACTIVE, nullable=False
    )
    contact_name: Mapped[str] = mapped_column(String, default="")
    contact_email: Mapped[str] = mapped_column(String, default="")
    website: Mapped[str] = mapped_column(String, default="")
    show_portal_costs: Mapped[bool] = mapped_column(Boolean, default=True)

    retainer_total: Mapped[float] = mapped_column(Float, default=0.0)
    retainer_remaining: Mapped[float] = mapped_column(Float, default=0.0)

    monthly_earnings: Mapped[float] = mapped_column(Float, default=0.0)
    lifetime_revenue: Mapped[float] = mapped_column(Float, default=0.0)
    hours_logged: Mapped[float] = mapped_column(Float, default=0.0)
    last_session_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    true_hourly_rate: Mapped[float] = mapped_column(Float, default=0.0)
    external_links: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)


class ProjectORM(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    client_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(
        SAEnum(ProjectStatus), default=ProjectStatus.NOT_STARTED, nullable=False
    )
    estimated_hours: Mapped[float] = mapped_column(Float, default=0.0)
    total_value: Mapped[float] = mapped_column(Float, default=0.0)
    hours: Mapped[float] = mapped_column(Float, default=0.0)
    revenue: Mapped[float] = mapped_column(Float, default=0.0)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    milestones: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    external_links: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
Index("idx_projects_client_id", ProjectORM.client_id)


class WorkSessionORM(Base):
    __tablename__ = "work_sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    client_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    client_name: Mapped[str] = mapped_column(String, default="")
    session_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    duration: Mapped[float] = mapped_column(Float, nullable=False)
    revenue: Mapped[float] = mapped_column(Float, default=0.0)
    billable: Mapped[bool] = mapped_column(Boolean, default=True)
    task: Mapped[str] = mapped_column(String, default="")
    work_tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    allocation_type: Mapped[AllocationType] = mapped_column(
        SAEnum(AllocationType), default=AllocationType.GENERAL, nullable=False
    )
    project_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
Index("idx_work_sessions_client_id", WorkSessionORM.client_id)
Index("idx_work_sessions_project_id", WorkSessionORM.project_id)


class ClientNoteORM(Base):
    __tablename__ = "client_notes"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    client_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[NoteType] = mapped_column(SAEnum(NoteType), default=NoteType.GENERAL, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    project_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False)
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
Index("idx_client_notes_client_id", ClientNoteORM.client_id)


class WorkspaceSettingORM(Base):
    __tablename__ = "workspace_settings"

    section: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
