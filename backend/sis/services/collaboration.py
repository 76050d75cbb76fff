"""Collaboration Service - in-memory sharing, comments, links and tasks around a report.

Invariants:
    - The owner is always a collaborator with OWNER permission and cannot be removed
    - Commenting needs COMMENTER or better; editing needs EDITOR or better
    - Feature toggles (comments, link sharing, tasks) are checked before permissions
    - The activity feed keeps the newest MAX_ACTIVITY_FEED entries
    - Each edit bumps the minor version ("1.0" → "1.1")

Design Decisions:
    - In-memory not DB (ADR: collaboration state is session-scoped in this deployment)
    - Mentions are "@user" tokens; trailing punctuation stripped
"""

import logging
import re
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from functools import lru_cache

from sis.core.analytics_types import (
    CAN_COMMENT, CAN_EDIT, ActivityType, CollaborationType, CommentType,
    Permission, ShareType, TaskPriority, TaskStatus,
)
from sis.core.dates import utcnow
from sis.core.domain_types import MAX_ACTIVITY_FEED
from sis.core.errors import InvalidStateError, ResourceNotFoundError
from sis.schemas.analytics import (
    CollaborationCreate, CollaboratorAdd, CommentCreate, EditRecord,
    SharedLinkCreate, TaskCreate,
)

logger = logging.getLogger(__name__)

_MENTION = re.compile(r"(?<!\w)@([\w.\-]+)")


def extract_mentions(text: str) -> list[str]:
    seen = []
    for name in _MENTION.findall(text):
        name = name.rstrip(".-")
        if name and name not in seen:
            seen.append(name)
    return seen


def bump_minor(version: str) -> str:
    major, _, minor = version.partition(".")
    return f"{major}.{int(minor or 0) + 1}"


@dataclass
class Collaborator:
    user: str
    permission: Permission
    joined_at: datetime = field(default_factory=utcnow)
    last_active: datetime | None = None
    view_count: int = 0
    edit_count: int = 0
    comment_count: int = 0


@dataclass
class Comment:
    comment_id: str
    author: str
    text: str
    comment_type: CommentType
    parent_comment_id: str | None
    mentions: list[str]
    created_at: datetime
    resolved: bool = False
    resolved_by: str | None = None
    resolved_at: datetime | None = None


@dataclass
class SharedLink:
    link_id: str
    url: str
    share_type: ShareType
    created_by: str
    created_at: datetime
    expires_at: datetime | None = None
    access_count: int = 0


@dataclass
class Task:
    task_id: str
    title: str
    assignee: str
    priority: TaskPriority
    due_date: date | None
    created_by: str
    created_at: datetime
    status: TaskStatus = TaskStatus.PENDING
    completed_by: str | None = None
    completed_at: datetime | None = None


@dataclass
class Activity:
    activity_type: ActivityType
    user: str
    description: str
    timestamp: datetime
    details: str | None = None


@dataclass
class Collaboration:
    collaboration_id: int
    report_id: int
    report_name: str
    owner: str
    collaboration_type: CollaborationType
    created_at: datetime = field(default_factory=utcnow)

    # === Feature toggles ===
    comments_enabled: bool = True
    threads_enabled: bool = True
    mentions_enabled: bool = True
    notifications_enabled: bool = True
    version_control_enabled: bool = True
    tasks_enabled: bool = True
    allow_link_sharing: bool = True
    auto_save_seconds: int = 60

    # === State ===
    version: str = "1.0"
    collaborators: dict[str, Collaborator] = field(default_factory=dict)
    comments: list[Comment] = field(default_factory=list)
    shared_links: list[SharedLink] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    activity: deque = field(default_factory=lambda: deque(maxlen=MAX_ACTIVITY_FEED))
    notifications: list[dict] = field(default_factory=list)
    total_views: int = 0
    total_edits: int = 0

    def log(self, activity_type: ActivityType, user: str, description: str, details=None):
        self.activity.append(Activity(activity_type, user, description, utcnow(), details))

    def permission_of(self, user: str) -> Permission | None:
        collaborator = self.collaborators.get(user)
        return collaborator.permission if collaborator else None

    def touch(self, user: str, counter: str) -> None:
        collaborator = self.collaborators.get(user)
        if collaborator is None:
            return
        collaborator.last_active = utcnow()
        setattr(collaborator, counter, getattr(collaborator, counter) + 1)


_FEATURE_FLAGS = {
    "comments_enabled", "threads_enabled", "mentions_enabled", "notifications_enabled",
    "version_control_enabled", "tasks_enabled", "allow_link_sharing",
}


class CollaborationService:

    def __init__(self):
        self._collaborations: dict[int, Collaboration] = {}
        self._next_id = 1

    def create(self, body: CollaborationCreate) -> Collaboration:
        collab = Collaboration(
            collaboration_id=self._next_id,
            report_id=body.report_id,
            report_name=body.report_name,
            owner=body.owner,
            collaboration_type=body.collaboration_type,
            **body.model_dump(include=_FEATURE_FLAGS),
        )
        collab.collaborators[body.owner] = Collaborator(body.owner, Permission.OWNER)
        collab.log(ActivityType.SHARED, body.owner, f"Shared report {body.report_name}")
        self._collaborations[collab.collaboration_id] = collab
        self._next_id += 1
        logger.info(
            f"Collaboration {collab.collaboration_id} created for report {body.report_id}",
            extra={"actor": body.owner},
        )
        return collab

    def get(self, collaboration_id: int) -> Collaboration:
        collab = self._collaborations.get(collaboration_id)
        if collab is None:
            raise ResourceNotFoundError("Collaboration", collaboration_id)
        return collab

    def delete(self, collaboration_id: int) -> None:
        self.get(collaboration_id)
        del self._collaborations[collaboration_id]

    # ─── Collaborators ──────────────────────────────────────────

    def add_collaborator(self, collaboration_id: int, body: CollaboratorAdd) -> Collaborator:
        collab = self.get(collaboration_id)
        if body.user == collab.owner:
            raise InvalidStateError("The owner's permission cannot be changed")
        if body.permission == Permission.OWNER:
            raise InvalidStateError("A collaboration has exactly one owner")
        collaborator = Collaborator(body.user, body.permission)
        collab.collaborators[body.user] = collaborator
        collab.log(ActivityType.JOINED, body.user, f"Joined as {body.permission.value}")
        return collaborator

    def remove_collaborator(self, collaboration_id: int, user: str) -> None:
        collab = self.get(collaboration_id)
        if user == collab.owner:
            raise InvalidStateError("The owner cannot be removed")
        if user not in collab.collaborators:
            raise ResourceNotFoundError("Collaborator", user)
        del collab.collaborators[user]
        collab.log(ActivityType.LEFT, user, "Removed from collaboration")

    # ─── Comments ───────────────────────────────────────────────

    def add_comment(self, collaboration_id: int, body: CommentCreate) -> Comment:
        collab = self.get(collaboration_id)
        if not collab.comments_enabled:
            raise InvalidStateError("Comments are not enabled")
        if collab.permission_of(body.author) not in CAN_COMMENT:
            raise InvalidStateError(f"User {body.author} does not have permission to comment")
        if body.parent_comment_id is not None:
            if not collab.threads_enabled:
                raise InvalidStateError("Threaded replies are not enabled")
            self._comment(collab, body.parent_comment_id)

        mentions = extract_mentions(body.text) if collab.mentions_enabled else []
        comment = Comment(
            comment_id=str(uuid.uuid4()),
            author=body.author,
            text=body.text,
            comment_type=body.comment_type,
            parent_comment_id=body.parent_comment_id,
            mentions=mentions,
            created_at=utcnow(),
        )
        collab.comments.append(comment)
        collab.touch(body.author, "comment_count")
        collab.log(ActivityType.COMMENTED, body.author, f"Added {body.comment_type.value} comment")
        for user in mentions:
            collab.log(ActivityType.MENTIONED, body.author, f"Mentioned {user}", details=user)
            if collab.notifications_enabled:
                collab.notifications.append(
                    {"user": user, "type": "mention", "from": body.author, "at": utcnow()},
                )
        return comment

    @staticmethod
    def _comment(collab: Collaboration, comment_id: str) -> Comment:
        for comment in collab.comments:
            if comment.comment_id == comment_id:
                return comment
        raise ResourceNotFoundError("Comment", comment_id)

    def resolve_comment(self, collaboration_id: int, comment_id: str, actor: str) -> Comment:
        collab = self.get(collaboration_id)
        comment = self._comment(collab, comment_id)
        comment.resolved = True
        comment.resolved_by = actor
        comment.resolved_at = utcnow()
        collab.log(ActivityType.RESOLVED, actor, "Resolved comment", details=comment_id)
        return comment

    def comments(self, collaboration_id: int, unresolved_only: bool = False) -> list[Comment]:
        collab = self.get(collaboration_id)
        return [c for c in collab.comments if not (unresolved_only and c.resolved)]

    # ─── Sharing, views, edits ──────────────────────────────────

    def create_shared_link(self, collaboration_id: int, body: SharedLinkCreate) -> SharedLink:
        collab = self.get(collaboration_id)
        if not collab.allow_link_sharing:
            raise InvalidStateError("Link sharing is not allowed")
        now = utcnow()
        link = SharedLink(
            link_id=str(uuid.uuid4()),
            url=f"/share/{uuid.uuid4()}",
            share_type=body.share_type,
            created_by=body.created_by,
            created_at=now,
            expires_at=now + timedelta(days=body.expires_in_days) if body.expires_in_days else None,
        )
        collab.shared_links.append(link)
        collab.log(ActivityType.LINK_CREATED, body.created_by, f"Created {body.share_type.value} link")
        return link

    def record_view(self, collaboration_id: int, user: str) -> Collaboration:
        collab = self.get(collaboration_id)
        collab.total_views += 1
        collab.touch(user, "view_count")
        collab.log(ActivityType.VIEWED, user, "Viewed report")
        return collab

    def record_edit(self, collaboration_id: int, body: EditRecord) -> Collaboration:
        collab = self.get(collaboration_id)
        if collab.permission_of(body.user) not in CAN_EDIT:
            raise InvalidStateError(f"User {body.user} does not have permission to edit")
        collab.total_edits += 1
        if collab.version_control_enabled:
            collab.version = bump_minor(collab.version)
        collab.touch(body.user, "edit_count")
        collab.log(ActivityType.EDITED, body.user, "Edited report", details=body.description)
        return collab

    # ─── Tasks ──────────────────────────────────────────────────

    def add_task(self, collaboration_id: int, body: TaskCreate, actor: str) -> Task:
        collab = self.get(collaboration_id)
        if not collab.tasks_enabled:
            raise InvalidStateError("Tasks are not enabled")
        task = Task(
            task_id=str(uuid.uuid4()),
            title=body.title,
            assignee=body.assignee,
            priority=body.priority,
            due_date=body.due_date,
            created_by=actor,
            created_at=utcnow(),
        )
        collab.tasks.append(task)
        collab.log(ActivityType.TASK_CREATED, actor, f"Created task {body.title}", details=body.assignee)
        return task

    def complete_task(self, collaboration_id: int, task_id: str, actor: str) -> Task:
        collab = self.get(collaboration_id)
        for task in collab.tasks:
            if task.task_id == task_id:
                if task.status == TaskStatus.COMPLETED:
                    raise InvalidStateError(f"Task {task_id} is already completed")
                task.status = TaskStatus.COMPLETED
                task.completed_by = actor
                task.completed_at = utcnow()
                collab.log(ActivityType.TASK_COMPLETED, actor, f"Completed task {task.title}")
                return task
        raise ResourceNotFoundError("Task", task_id)

    def activity_feed(self, collaboration_id: int, limit: int = 50) -> list[Activity]:
        collab = self.get(collaboration_id)
        return list(reversed(collab.activity))[:limit]

    def statistics(self) -> dict:
        collabs = list(self._collaborations.values())
        total_collaborators = sum(len(c.collaborators) for c in collabs)
        by_type = {t.value: 0 for t in CollaborationType}
        for c in collabs:
            by_type[c.collaboration_type.value] += 1
        return {
            "total_collaborations": len(collabs),
            "total_collaborators": total_collaborators,
            "total_comments": sum(len(c.comments) for c in collabs),
            "total_shared_links": sum(len(c.shared_links) for c in collabs),
            "total_tasks": sum(len(c.tasks) for c in collabs),
            "average_collaborators": (
                round(total_collaborators / len(collabs), 2) if collabs else 0.0
            ),
            "by_type": by_type,
        }


@lru_cache
def get_collaboration_service() -> CollaborationService:
    return CollaborationService()
