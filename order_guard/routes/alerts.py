"""Alert routes - the dashboard's notification feed."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.dependencies import get_db
from order_guard.schemas.inventory import InventoryAlertRead
from order_guard.services.inventory_queries import InventoryQueryService

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("", response_model=List[InventoryAlertRead])
async def list_alerts(
    unread_only: bool = Query(False),
    unresolved_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    return await InventoryQueryService(db).list_alerts(unread_only, unresolved_only, limit)


@router.post("/{alert_id}/read", response_model=InventoryAlertRead)
async def mark_read(alert_id: int, db: AsyncSession = Depends(get_db)):
    return await InventoryQueryService(db).mark_alert_read(alert_id)


@router.post("/{alert_id}/resolve", response_model=InventoryAlertRead)
async def resolve(alert_id: int, db: AsyncSession = Depends(get_db)):
    return await InventoryQueryService(db).resolve_alert(alert_id)
