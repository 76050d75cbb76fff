"""Collaboration Routes - shared reports, comments, links, tasks and activity."""

from fastapi import APIRouter, Depends, Query, Response, status

from sis.api.dependencies import get_actor
from sis.schemas.analytics import (
    CollaborationCreate, CollaboratorAdd, CommentCreate, EditRecord,
    SharedLinkCreate, TaskCreate, ViewRecord,
)
from sis.services.collaboration import CollaborationService, get_collaboration_service

router = APIRouter(prefix="/api/v1/analytics/collaboration", tags=["analytics-collaboration"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_collaboration(
    body: CollaborationCreate,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.create(body)


@router.get("/statistics")
async def collaboration_statistics(
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.statistics()


@router.get("/{collaboration_id}")
async def get_collaboration(
    collaboration_id: int,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.get(collaboration_id)


@router.delete("/{collaboration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collaboration(
    collaboration_id: int,
    service: CollaborationService = Depends(get_collaboration_service),
):
    service.delete(collaboration_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── COLLABORATORS ──────────────────────────────────────────────

@router.post("/{collaboration_id}/collaborators", status_code=status.HTTP_201_CREATED)
async def add_collaborator(
    collaboration_id: int,
    body: CollaboratorAdd,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.add_collaborator(collaboration_id, body)


@router.delete(
    "/{collaboration_id}/collaborators/{user}", status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_collaborator(
    collaboration_id: int,
    user: str,
    service: CollaborationService = Depends(get_collaboration_service),
):
    service.remove_collaborator(collaboration_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── COMMENTS ───────────────────────────────────────────────────

@router.post("/{collaboration_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    collaboration_id: int,
    body: CommentCreate,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.add_comment(collaboration_id, body)


@router.get("/{collaboration_id}/comments")
async def list_comments(
    collaboration_id: int,
    unresolved_only: bool = False,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.comments(collaboration_id, unresolved_only)


@router.post("/{collaboration_id}/comments/{comment_id}/resolve")
async def resolve_comment(
    collaboration_id: int,
    comment_id: str,
    service: CollaborationService = Depends(get_collaboration_service),
    actor: str = Depends(get_actor),
):
    return service.resolve_comment(collaboration_id, comment_id, actor)


# ─── SHARING & EDITS ────────────────────────────────────────────

@router.post("/{collaboration_id}/shared-links", status_code=status.HTTP_201_CREATED)
async def create_shared_link(
    collaboration_id: int,
    body: SharedLinkCreate,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.create_shared_link(collaboration_id, body)


@router.post("/{collaboration_id}/views")
async def record_view(
    collaboration_id: int,
    body: ViewRecord,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.record_view(collaboration_id, body.user)


@router.post("/{collaboration_id}/edits")
async def record_edit(
    collaboration_id: int,
    body: EditRecord,
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.record_edit(collaboration_id, body)


# ─── TASKS & ACTIVITY ───────────────────────────────────────────

@router.post("/{collaboration_id}/tasks", status_code=status.HTTP_201_CREATED)
async def add_task(
    collaboration_id: int,
    body: TaskCreate,
    service: CollaborationService = Depends(get_collaboration_service),
    actor: str = Depends(get_actor),
):
    return service.add_task(collaboration_id, body, actor)


@router.post("/{collaboration_id}/tasks/{task_id}/complete")
async def complete_task(
    collaboration_id: int,
    task_id: str,
    service: CollaborationService = Depends(get_collaboration_service),
    actor: str = Depends(get_actor),
):
    return service.complete_task(collaboration_id, task_id, actor)


@router.get("/{collaboration_id}/activity")
async def activity_feed(
    collaboration_id: int,
    limit: int = Query(50, ge=1, le=500),
    service: CollaborationService = Depends(get_collaboration_service),
):
    return service.activity_feed(collaboration_id, limit)
