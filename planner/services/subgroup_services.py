import logging
from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from planner.models.subgroup import Subgroup
from planner.models.task import Task
from planner.schemas.subgroup import SubgroupUpdate

logger = logging.getLogger(__name__)

def _subgroup_query():
    return select(Subgroup).options(
        selectinload(Subgroup.creator),
        selectinload(Subgroup.group),
    )

async def list_subgroups(db: AsyncSession, group_id: int, archived: bool = False):
    q = (
        _subgroup_query()
        .where(Subgroup.group_id == group_id, Subgroup.is_archived == archived)
        .order_by(Subgroup.created_at.desc(), Subgroup.id.desc())
    )
    return (await db.scalars(q)).all()

async def get_subgroup_by_id(db: AsyncSession, subgroup_id: int):
    q = _subgroup_query().where(Subgroup.id == subgroup_id).execution_options(populate_existing=True)
    return (await db.execute(q)).scalar_one_or_none()

async def create_subgroup(
    db: AsyncSession,
    name: str,
    group_id: int,
    creator_id: int,
    description: str | None = None,
):
    subgroup = Subgroup(
        name=name,
        description=description or None,
        group_id=group_id,
        creator_id=creator_id,
    )
    db.add(subgroup)
    await db.commit()
    return await get_subgroup_by_id(db, subgroup.id)

async def update_subgroup(db: AsyncSession, subgroup_id: int, data: SubgroupUpdate):
    subgroup = await get_subgroup_by_id(db, subgroup_id)
    if not subgroup:
        return None

    for field, value in data.model_dump(exclude_none=True).items():
        setattr(subgroup, field, value)

    await db.commit()
    return await get_subgroup_by_id(db, subgroup_id)

async def set_subgroup_archived(db: AsyncSession, subgroup_id: int, archived: bool):
    subgroup = await get_subgroup_by_id(db, subgroup_id)
    if not subgroup:
        return None

    subgroup.is_archived = archived
    await db.commit()
    return await get_subgroup_by_id(db, subgroup_id)

async def delete_subgroup(db: AsyncSession, subgroup_id: int) -> bool:
    """
    Detach the subgroup's tasks, then delete the subgroup, in one transaction.

    Tasks are never deleted with their subgroup; they stay in the parent group.
    """
    if not await get_subgroup_by_id(db, subgroup_id):
        return False

    try:
        await db.execute(
            update(Task)
            .where(Task.subgroup_id == subgroup_id)
            .values(subgroup_id=None)
        )
        await db.execute(delete(Subgroup).where(Subgroup.id == subgroup_id))
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Subgroup deletion rolled back id=%s", subgroup_id)
        return False

    logger.info("Subgroup deleted id=%s", subgroup_id)
    return True
