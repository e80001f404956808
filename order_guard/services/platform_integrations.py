# order_guard/services/platform_integrations.py
"""Per-platform blocking settings: auto-block floors, thresholds and notifications."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.exceptions import DatabaseError, IntegrationNotFoundError, ValidationError
from order_guard.models import PlatformIntegration
from order_guard.schemas.inventory import PlatformIntegrationUpdate
from order_guard.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class PlatformIntegrationService:
    def __init__(self, db: AsyncSession, store: Optional[InventoryStore] = None):
        self.db = db
        self.store = store or InventoryStore(db)

    async def list_integrations(self) -> List[PlatformIntegration]:
        result = await self.store.execute(
            select(PlatformIntegration).order_by(PlatformIntegration.platform),
            "list platform_integrations",
        )
        return list(result.scalars().all())

    async def get_integration(self, platform: str) -> PlatformIntegration:
        integration = await self.store.get_integration(platform)
        if integration is None:
            raise IntegrationNotFoundError(f"No integration settings for platform {platform}")
        return integration

    async def upsert_integration(
        self, platform: str, changes: PlatformIntegrationUpdate
    ) -> PlatformIntegration:
        """
        Create or update the settings row for ``platform``.

        Only the fields set on ``changes`` are written; a new row takes the
        model defaults for the rest.
        """
        platform = (platform or "").strip()
        if not platform:
            raise ValidationError("platform is required")
        values = changes.model_dump(exclude_unset=True, exclude_none=True)

        try:
            integration = await self.store.get_integration(platform)
            created = integration is None
            if created:
                integration = PlatformIntegration(platform=platform)
            for field, value in values.items():
                setattr(integration, field, value)
            if created:
                await self.store.add(integration)
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to save integration settings for %s", platform)
            await self.store.rollback()
            raise

        logger.info(
            "%s integration settings for %s: %s",
            "Created" if created else "Updated", platform, values or "defaults",
        )
        return await self.get_integration(platform)
