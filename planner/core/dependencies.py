from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.email import Mailer
from planner.core.jwt_config import decode_token, get_token_from_cookie
from planner.db.session import Database
from planner.services.user_queries import get_user_by_id
from planner.services.group_services import get_group_by_id
from planner.services.permissions import is_group_member, is_group_admin

def get_database(request: Request) -> Database:
    return request.app.state.db

async def get_db(database: Database = Depends(get_database)):
    await database.ensure_schema()
    async with database.session() as session:
        yield session

def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer

async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)):
    token = get_token_from_cookie(request=request)
    payload = decode_token(token)
    user_id = payload.get("sub")

    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")

    try:
        user = await get_user_by_id(db, int(user_id))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")

    if user is None:
        raise HTTPException(status_code=401, detail="User not found")

    return user

async def require_group_member(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    if not await get_group_by_id(db, group_id):
        raise HTTPException(404, "Group not found")

    if not await is_group_member(db, group_id, user.id):
        raise HTTPException(403, "You are not a member of this group")

    return user

async def require_group_admin(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    if not await get_group_by_id(db, group_id):
        raise HTTPException(404, "Group not found")

    if not await is_group_admin(db, group_id, user.id):
        raise HTTPException(403, "You must be a group admin to do this")

    return user
