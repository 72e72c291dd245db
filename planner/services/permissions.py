from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from planner.models.group import Group
from planner.models.group_member import GroupMember
from planner.models.enums import GroupRole

# Read-only checks. Callers decide what a False means (403, self-service, ...).

async def is_group_member(db: AsyncSession, group_id: int, user_id: int) -> bool:
    q = select(GroupMember.id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
    )
    return (await db.scalar(q)) is not None

async def is_group_admin(db: AsyncSession, group_id: int, user_id: int) -> bool:
    q = select(GroupMember.id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
        GroupMember.role == GroupRole.ADMIN,
    )
    return (await db.scalar(q)) is not None

async def can_create_tasks_in_group(db: AsyncSession, group_id: int, user_id: int) -> bool:
    """Admins always can; plain members only when the group allows it."""
    q = (
        select(GroupMember.role, Group.members_can_create_tasks)
        .join(Group, Group.id == GroupMember.group_id)
        .where(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
    )
    row = (await db.execute(q)).first()
    if row is None:
        return False

    role, members_can_create = row
    return role == GroupRole.ADMIN or bool(members_can_create)
