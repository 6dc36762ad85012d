from __future__ import annotations

import logging
from typing import Iterable, Optional

from core.exceptions import NotFoundError, ValidationError
from core.models import AllocationType, BillingModel, Client, Project, WorkSession
from core.domain.session import check_allocation_shape
from core.services.allocation.models import AllocationResult, ClientPatch, ProjectPatch

logger = logging.getLogger(__name__)


def _find_project(projects: Iterable[Project], project_id: str | None) -> Optional[Project]:
    if not project_id:
        return None
    return next((p for p in projects if str(p.id) == str(project_id)), None)


def validate_allocation_request(
    session: WorkSession,
    client: Client | None,
    projects_for_client: Iterable[Project],
) -> None:
    """Reject a session whose allocation cannot be honoured, before anything is stored."""
    if client is None:
        raise NotFoundError("Client not found.", code="CLIENT_NOT_FOUND")
    if session.client_id != client.id:
        raise ValidationError("Session does not belong to this client.", code="SESSION_CLIENT_MISMATCH")

    allocation = AllocationType(session.allocation_type)
    check_allocation_shape(allocation, session.project_id)

    if allocation == AllocationType.RETAINER and client.model != BillingModel.RETAINER:
        raise ValidationError(
            f"Client '{client.name}' is not on a retainer.",
            code="SESSION_RETAINER_INVALID",
        )
    if allocation == AllocationType.PROJECT:
        project = _find_project(projects_for_client, session.project_id)
        if project is None:
            raise ValidationError("Project not found for this client.", code="PROJECT_NOT_FOUND")
        if project.client_id != client.id:
            raise ValidationError(
                "Project belongs to a different client.",
                code="SESSION_PROJECT_CLIENT_MISMATCH",
            )


def _retainer_credit(session: WorkSession, client: Client, other_sessions: Iterable[WorkSession]) -> float:
    """Hours ``session`` actually drew from the retainer; overage is never credited back."""
    used_by_others = sum(
        float(s.duration or 0.0)
        for s in other_sessions
        if s.id != session.id
        and s.client_id == client.id
        and s.allocation_type == AllocationType.RETAINER
        and s.billable
    )
    total = client.retainer_total
    return client.clamp_retainer(total - used_by_others) - client.clamp_retainer(
        total - used_by_others - session.duration
    )


def _compensate(
    session: WorkSession,
    client: Client | None,
    projects_for_client: Iterable[Project],
    *,
    sign: int,
    other_sessions: Iterable[WorkSession] = (),
) -> AllocationResult:
    allocation = AllocationType(session.allocation_type)
    action = "apply" if sign > 0 else "reverse"

    if allocation == AllocationType.GENERAL:
        return AllocationResult(session=session)

    if allocation == AllocationType.RETAINER:
        if client is None:
            reason = f"retainer {action} skipped: client {session.client_id} not found"
            logger.warning("Session %s: %s", session.id, reason)
            return AllocationResult(session=session, skipped=(reason,))
        if client.model != BillingModel.RETAINER:
            reason = f"retainer {action} skipped: client {client.id} is not on a retainer"
            logger.warning("Session %s: %s", session.id, reason)
            return AllocationResult(session=session, skipped=(reason,))
        if not session.billable:
            # tracked against the retainer but not deducted from it
            return AllocationResult(session=session)
        if sign > 0:
            remaining = client.retainer_remaining - session.duration
        else:
            remaining = client.retainer_remaining + _retainer_credit(session, client, other_sessions)
        return AllocationResult(
            session=session,
            client_patch=ClientPatch(
                client_id=client.id,
                retainer_remaining=client.clamp_retainer(remaining),
            ),
        )

    project = _find_project(projects_for_client, session.project_id)
    if project is None:
        reason = f"project {action} skipped: project {session.project_id} not found"
        logger.warning("Session %s: %s", session.id, reason)
        return AllocationResult(session=session, skipped=(reason,))

    # effort rolls up whether or not it was billable
    hours = project.hours + sign * session.duration
    revenue = project.revenue + sign * session.revenue
    return AllocationResult(
        session=session,
        project_patch=ProjectPatch(
            client_id=project.client_id,
            project_id=project.id,
            hours=max(0.0, hours),
            revenue=max(0.0, revenue),
        ),
    )


def allocate(
    session: WorkSession,
    client: Client | None,
    projects_for_client: Iterable[Project],
) -> AllocationResult:
    """Compute the compensating update for a newly logged session.

    A reference that cannot be resolved is skipped and logged, never raised:
    the session itself has already been recorded.
    """
    return _compensate(session, client, list(projects_for_client), sign=1)


def reverse_allocation(
    session: WorkSession,
    client: Client | None,
    projects_for_client: Iterable[Project],
    other_sessions: Iterable[WorkSession] = (),
) -> AllocationResult:
    """Compute the update that undoes ``allocate`` for a removed or edited session.

    ``other_sessions`` is the rest of the session history. Retainer hours are
    returned only up to what the session took from the balance: once billable
    retainer sessions went over ``retainer_total``, the overage was never
    deducted, so it is not credited back either.
    """
    return _compensate(
        session,
        client,
        list(projects_for_client),
        sign=-1,
        other_sessions=list(other_sessions),
    )


__all__ = ["allocate", "reverse_allocation", "validate_allocation_request"]
