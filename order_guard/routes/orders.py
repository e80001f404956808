"""Order routes - place orders and list the ones that were blocked."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.dependencies import get_db
from order_guard.schemas.inventory import OrderManagementRead, OrderRequest, OrderResult
from order_guard.services.inventory_queries import InventoryQueryService
from order_guard.services.order_processor import OrderProcessor

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderResult)
async def place_order(req: OrderRequest, db: AsyncSession = Depends(get_db)):
    """A blocked order is a normal 200 response with success=false."""
    return await OrderProcessor(db).process_order(req)


@router.get("/blocked", response_model=List[OrderManagementRead])
async def blocked_orders(
    platform: Optional[str] = Query(None, description="Filter by platform"),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    return await InventoryQueryService(db).get_blocked_orders(platform, limit)
