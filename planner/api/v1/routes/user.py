from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.dependencies import get_db, get_current_user
from planner.schemas.common import ok
from planner.schemas.user import ProfileUpdate, UserOut, UserPublic, UserStats
from planner.services.user_queries import search_users, get_user_stats
from planner.services.user_service import update_profile

router = APIRouter()


@router.get("/profile")
async def get_profile(user=Depends(get_current_user)):
    return ok(UserOut.model_validate(user))


@router.put("/profile")
async def edit_profile(
    data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    try:
        updated = await update_profile(db, user, data)
    except ValueError as e:
        raise HTTPException(400, str(e))

    return ok(UserOut.model_validate(updated), "Profile updated")


@router.get("/search")
async def search(
    q: str = "",
    exclude: str = "",
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    exclude_ids = {int(x) for x in exclude.split(",") if x.strip().isdigit()}
    exclude_ids.add(user.id)

    users = await search_users(db, q, exclude_ids)
    return ok([UserPublic.model_validate(u) for u in users])


@router.get("/stats")
async def stats(db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return ok(UserStats(**await get_user_stats(db, user.id)))
