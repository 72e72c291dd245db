from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from planner.services.system_services import check_db_service, system_metrics, system_health
from planner.core.dependencies import get_database, get_db
from planner.db.session import Database

router = APIRouter()

@router.get("/health/db")
async def check_db(database: Database = Depends(get_database)):
    return await check_db_service(database)

@router.get("/metrics")
async def metrics(
    db: AsyncSession = Depends(get_db)
):
    return await system_metrics(db)

@router.get("/health")
async def health():
    return await system_health()
