import enum


class GroupRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class NotificationType(str, enum.Enum):
    GROUP_INVITATION = "group_invitation"
    INVITATION_ACCEPTED = "invitation_accepted"
    TASK_ASSIGNED = "task_assigned"
    TASK_COMMENT = "task_comment"
    MEMBER_REMOVED = "member_removed"


def enum_values(enum_cls):
    return [member.value for member in enum_cls]
