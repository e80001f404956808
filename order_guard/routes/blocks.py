"""Order block routes - admin block/unblock and block history."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.dependencies import get_db
from order_guard.schemas.inventory import (
    BlockRequest,
    OrderBlockRead,
    ReleaseExpiredResult,
    ReleasedBlock,
    UnblockRequest,
)
from order_guard.services.order_blocking import OrderBlockingService

router = APIRouter(prefix="/api/blocks", tags=["blocks"])


@router.post("", response_model=OrderBlockRead)
async def block_orders(req: BlockRequest, db: AsyncSession = Depends(get_db)):
    return await OrderBlockingService(db).block_orders(
        req.product_id,
        req.platform,
        req.reason,
        req.block_type,
        unblock_date=req.unblock_date,
        notes=req.notes,
        custom_reason=req.custom_reason,
        created_by=req.created_by,
    )


@router.post("/unblock")
async def unblock_orders(req: UnblockRequest, db: AsyncSession = Depends(get_db)):
    closed = await OrderBlockingService(db).unblock_orders(req.product_id, req.platform, req.reason)
    return {"success": True, "closed_blocks": closed}


@router.get("/active", response_model=List[OrderBlockRead])
async def active_blocks(
    platform: Optional[str] = Query(None, description="Filter by platform"),
    db: AsyncSession = Depends(get_db),
):
    return await OrderBlockingService(db).get_active_blocks(platform)


@router.get("/{platform}/{product_id}/history", response_model=List[OrderBlockRead])
async def block_history(platform: str, product_id: str, db: AsyncSession = Depends(get_db)):
    return await OrderBlockingService(db).get_block_history(product_id, platform)


@router.post("/release-expired", response_model=ReleaseExpiredResult)
async def release_expired(db: AsyncSession = Depends(get_db)):
    released = await OrderBlockingService(db).release_expired_blocks()
    return ReleaseExpiredResult(
        released=[ReleasedBlock(product_id=p, platform=pl) for p, pl in released]
    )
