from sqlalchemy import select, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from planner.db.session import Database
from planner.models.user import User
from planner.models.group import Group
from planner.models.task import Task

async def check_db_service(database: Database):
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"db": True, "message": "Database is connected"}
    except SQLAlchemyError as e:
        return {"db": False, "error": str(e)}

async def system_health():
    return {
        "status": "ok"
    }

async def system_metrics(db: AsyncSession):
    users_q = select(func.count(User.id))
    groups_q = select(func.count(Group.id)).where(Group.is_archived == False)
    tasks_q = select(func.count(Task.id))

    return {
        "users": await db.scalar(users_q),
        "groups": await db.scalar(groups_q),
        "tasks": await db.scalar(tasks_q),
    }
