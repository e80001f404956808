"""Inventory routes - availability checks, stock operations and read models."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.dependencies import get_db
from order_guard.schemas.inventory import (
    AvailabilityResult,
    InventoryMetrics,
    PlatformInventoryRead,
    StockAdjustRequest,
    StockChangeRequest,
)
from order_guard.services.availability import AvailabilityService
from order_guard.services.inventory_queries import InventoryQueryService
from order_guard.services.stock_service import StockService

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=List[PlatformInventoryRead])
async def list_inventory(
    platform: Optional[str] = Query(None, description="Filter by platform"),
    db: AsyncSession = Depends(get_db),
):
    return await InventoryQueryService(db).list_inventory(platform)


@router.get("/low-stock", response_model=List[PlatformInventoryRead])
async def low_stock(
    platform: Optional[str] = Query(None, description="Filter by platform"),
    db: AsyncSession = Depends(get_db),
):
    return await InventoryQueryService(db).get_low_stock(platform)


@router.get("/metrics", response_model=InventoryMetrics)
async def inventory_metrics(db: AsyncSession = Depends(get_db)):
    return await InventoryQueryService(db).get_inventory_metrics()


@router.get("/{platform}/{product_id}", response_model=PlatformInventoryRead)
async def get_inventory(platform: str, product_id: str, db: AsyncSession = Depends(get_db)):
    return await InventoryQueryService(db).get_inventory(product_id, platform)


@router.get("/{platform}/{product_id}/availability", response_model=AvailabilityResult)
async def check_availability(
    platform: str,
    product_id: str,
    quantity: int = Query(..., description="Units the buyer wants"),
    db: AsyncSession = Depends(get_db),
):
    return await AvailabilityService(db).check_order_availability(product_id, platform, quantity)


@router.get("/{platform}/{product_id}/transactions")
async def list_transactions(
    platform: str,
    product_id: str,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    rows = await InventoryQueryService(db).get_transactions(product_id, platform, limit)
    return [
        {
            "id": row.id,
            "transaction_type": row.transaction_type,
            "quantity": row.quantity,
            "previous_stock": row.previous_stock,
            "new_stock": row.new_stock,
            "reference_id": row.reference_id,
            "notes": row.notes,
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
        for row in rows
    ]


@router.post("/restock", response_model=PlatformInventoryRead)
async def restock(req: StockChangeRequest, db: AsyncSession = Depends(get_db)):
    return await StockService(db).restock(req.product_id, req.platform, req.quantity, req.notes)


@router.post("/return", response_model=PlatformInventoryRead)
async def process_return(req: StockChangeRequest, db: AsyncSession = Depends(get_db)):
    return await StockService(db).process_return(
        req.product_id, req.platform, req.quantity, req.order_id, req.notes
    )


@router.post("/reserve")
async def reserve(req: StockChangeRequest, db: AsyncSession = Depends(get_db)):
    reserved = await StockService(db).reserve(req.product_id, req.platform, req.quantity, req.order_id)
    return {"success": reserved}


@router.post("/release", response_model=PlatformInventoryRead)
async def release(req: StockChangeRequest, db: AsyncSession = Depends(get_db)):
    return await StockService(db).release(req.product_id, req.platform, req.quantity, req.order_id)


@router.post("/adjust", response_model=PlatformInventoryRead)
async def adjust(req: StockAdjustRequest, db: AsyncSession = Depends(get_db)):
    return await StockService(db).adjust(req.product_id, req.platform, req.new_stock, req.notes)
