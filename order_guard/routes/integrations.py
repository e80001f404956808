"""Platform integration routes - per-platform auto-block and notification settings."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.dependencies import get_db
from order_guard.schemas.inventory import PlatformIntegrationRead, PlatformIntegrationUpdate
from order_guard.services.platform_integrations import PlatformIntegrationService

router = APIRouter(prefix="/api/integrations", tags=["integrations"])


@router.get("", response_model=List[PlatformIntegrationRead])
async def list_integrations(db: AsyncSession = Depends(get_db)):
    return await PlatformIntegrationService(db).list_integrations()


@router.get("/{platform}", response_model=PlatformIntegrationRead)
async def get_integration(platform: str, db: AsyncSession = Depends(get_db)):
    return await PlatformIntegrationService(db).get_integration(platform)


@router.put("/{platform}", response_model=PlatformIntegrationRead)
async def update_integration(
    platform: str, changes: PlatformIntegrationUpdate, db: AsyncSession = Depends(get_db)
):
    """Create the platform's settings if missing; only the fields sent are changed."""
    return await PlatformIntegrationService(db).upsert_integration(platform, changes)
