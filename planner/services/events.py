"""
Domain events and their mapping to notification rows.

``build_notifications`` is pure: it only decides who hears about an event and
what they read. Persisting the drafts is the notification service's job, so
the fan-out can move behind a queue later without touching the rules here.
"""

from dataclasses import dataclass, field
from typing import Optional

from planner.models.enums import NotificationType


@dataclass(frozen=True)
class NotificationDraft:
    user_id: int
    type: NotificationType
    title: str
    message: str
    related_id: Optional[int] = None


@dataclass(frozen=True)
class InvitationCreated:
    invitation_id: int
    group_name: str
    invited_user_id: int
    inviter_name: str


@dataclass(frozen=True)
class InvitationAccepted:
    group_id: int
    group_name: str
    group_creator_id: int
    accepted_by_name: str


@dataclass(frozen=True)
class TaskAssigned:
    task_id: int
    task_title: str
    assigned_by: int
    assignee_ids: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class TaskCommented:
    task_id: int
    task_title: str
    commenter_id: int
    commenter_name: str
    task_creator_id: int
    assignee_ids: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class MemberRemoved:
    group_id: int
    group_name: str
    removed_user_id: int
    removed_by: Optional[int] = None


def build_notifications(event) -> list[NotificationDraft]:
    if isinstance(event, InvitationCreated):
        return [
            NotificationDraft(
                user_id=event.invited_user_id,
                type=NotificationType.GROUP_INVITATION,
                title="Group invitation",
                message=f"{event.inviter_name} invited you to join the group '{event.group_name}'.",
                related_id=event.invitation_id,
            )
        ]

    if isinstance(event, InvitationAccepted):
        return [
            NotificationDraft(
                user_id=event.group_creator_id,
                type=NotificationType.INVITATION_ACCEPTED,
                title="Invitation accepted",
                message=f"{event.accepted_by_name} joined the group '{event.group_name}'.",
                related_id=event.group_id,
            )
        ]

    if isinstance(event, TaskAssigned):
        recipients = _unique(event.assignee_ids, exclude=event.assigned_by)
        return [
            NotificationDraft(
                user_id=uid,
                type=NotificationType.TASK_ASSIGNED,
                title="New task assigned",
                message=f"You were assigned to the task '{event.task_title}'.",
                related_id=event.task_id,
            )
            for uid in recipients
        ]

    if isinstance(event, TaskCommented):
        recipients = _unique(
            (*event.assignee_ids, event.task_creator_id),
            exclude=event.commenter_id,
        )
        return [
            NotificationDraft(
                user_id=uid,
                type=NotificationType.TASK_COMMENT,
                title="New comment",
                message=f"{event.commenter_name} commented on the task '{event.task_title}'.",
                related_id=event.task_id,
            )
            for uid in recipients
        ]

    if isinstance(event, MemberRemoved):
        if event.removed_by is None or event.removed_by == event.removed_user_id:
            return []
        return [
            NotificationDraft(
                user_id=event.removed_user_id,
                type=NotificationType.MEMBER_REMOVED,
                title="Removed from group",
                message=f"You were removed from the group '{event.group_name}'.",
                related_id=event.group_id,
            )
        ]

    raise TypeError(f"Unknown event type: {type(event).__name__}")


def _unique(user_ids, exclude=None) -> list[int]:
    seen = []
    for uid in user_ids:
        if uid == exclude or uid in seen:
            continue
        seen.append(uid)
    return seen
