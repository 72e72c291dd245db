import logging
from sqlalchemy import select, delete, case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from planner.models.group import Group
from planner.models.group_member import GroupMember
from planner.models.task import Task
from planner.models.task_assignment import TaskAssignment
from planner.models.user import User
from planner.models.enums import GroupRole
from planner.schemas.group import GroupUpdate
from planner.services.events import MemberRemoved
from planner.services.notification_service import stage_notifications

logger = logging.getLogger(__name__)

async def create_group(
    db: AsyncSession,
    name: str,
    creator_id: int,
    description: str | None = None,
    members_can_create_tasks: bool = False,
):
    """
    Insert the group and the creator's admin membership in one transaction.

    Returns None (and leaves nothing behind) when either insert fails.
    """
    try:
        group = Group(
            name=name,
            description=description or None,
            creator_id=creator_id,
            members_can_create_tasks=bool(members_can_create_tasks),
        )
        db.add(group)
        await db.flush()  # generates group.id

        member = GroupMember(group_id=group.id, user_id=creator_id, role=GroupRole.ADMIN)
        db.add(member)

        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Group creation rolled back creator_id=%s", creator_id)
        return None

    await db.refresh(group)
    logger.info("Group created id=%s creator_id=%s", group.id, creator_id)
    return group

async def get_group_by_id(db: AsyncSession, group_id: int):
    res = await db.execute(select(Group).where(Group.id == group_id))
    return res.scalar_one_or_none()

async def list_groups(db: AsyncSession):
    q = select(Group).order_by(Group.created_at.desc(), Group.id.desc())
    return (await db.scalars(q)).all()

async def _groups_for_user(db: AsyncSession, user_id: int, archived: bool):
    q = (
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user_id, Group.is_archived == archived)
        .order_by(Group.created_at.desc(), Group.id.desc())
    )
    return (await db.scalars(q)).all()

async def list_groups_for_user(db: AsyncSession, user_id: int):
    return await _groups_for_user(db, user_id, archived=False)

async def list_archived_groups_for_user(db: AsyncSession, user_id: int):
    return await _groups_for_user(db, user_id, archived=True)

async def update_group(db: AsyncSession, group_id: int, data: GroupUpdate):
    group = await get_group_by_id(db, group_id)
    if not group:
        return None

    for field, value in data.model_dump(exclude_none=True).items():
        setattr(group, field, value)

    await db.commit()
    await db.refresh(group)
    return group

async def set_group_archived(db: AsyncSession, group_id: int, archived: bool):
    group = await get_group_by_id(db, group_id)
    if not group:
        return None

    group.is_archived = archived
    await db.commit()
    await db.refresh(group)
    logger.info("Group %s id=%s", "archived" if archived else "unarchived", group_id)
    return group

async def delete_group(db: AsyncSession, group_id: int) -> bool:
    # members, subgroups, tasks and invitations go with it (ON DELETE CASCADE)
    res = await db.execute(delete(Group).where(Group.id == group_id))
    await db.commit()
    return res.rowcount > 0

async def get_group_members(db: AsyncSession, group_id: int):
    admins_first = case((GroupMember.role == GroupRole.ADMIN, 0), else_=1)
    q = (
        select(GroupMember)
        .join(User, User.id == GroupMember.user_id)
        .options(selectinload(GroupMember.user))
        .where(GroupMember.group_id == group_id)
        .order_by(admins_first, User.username.asc())
    )
    return (await db.scalars(q)).all()

async def get_membership(db: AsyncSession, group_id: int, user_id: int):
    q = select(GroupMember).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
    )
    return (await db.execute(q)).scalar_one_or_none()

async def add_member(db: AsyncSession, group_id: int, user_id: int, role: GroupRole = GroupRole.MEMBER):
    """Returns the new membership, or None when the user already belongs to the group."""
    if await get_membership(db, group_id, user_id):
        return None

    member = GroupMember(group_id=group_id, user_id=user_id, role=role)
    db.add(member)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.warning("Could not add member group_id=%s user_id=%s", group_id, user_id)
        return None
    await db.refresh(member)
    return member

async def update_member_role(db: AsyncSession, group_id: int, user_id: int, role: GroupRole) -> bool:
    member = await get_membership(db, group_id, user_id)
    if not member:
        return False

    member.role = role
    await db.commit()
    return True

async def remove_member_and_cleanup(
    db: AsyncSession,
    group_id: int,
    user_id: int,
    removed_by: int | None = None,
) -> bool:
    """
    Drop the membership and every task assignment the user holds inside the
    group, atomically. Notifies the removed user when someone else did it.
    """
    group = await get_group_by_id(db, group_id)
    if not group or not await get_membership(db, group_id, user_id):
        return False

    group_name = group.name
    group_task_ids = select(Task.id).where(Task.group_id == group_id)

    try:
        await db.execute(
            delete(TaskAssignment).where(
                TaskAssignment.user_id == user_id,
                TaskAssignment.task_id.in_(group_task_ids),
            )
        )
        await db.execute(
            delete(GroupMember).where(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id,
            )
        )

        stage_notifications(
            db,
            MemberRemoved(
                group_id=group_id,
                group_name=group_name,
                removed_user_id=user_id,
                removed_by=removed_by,
            ),
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Member removal rolled back group_id=%s user_id=%s", group_id, user_id)
        return False

    logger.info("Member removed group_id=%s user_id=%s removed_by=%s", group_id, user_id, removed_by)
    return True
