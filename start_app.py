#!/usr/bin/env python
"""Start the Order Guard API with the port taken from the environment."""
import logging
import os

import uvicorn

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    logger.info("Starting Order Guard on port %s", port)

    uvicorn.run(
        "order_guard.main:app",
        host="0.0.0.0",
        port=port,
        log_level=os.environ.get("LOG_LEVEL", "info").lower(),
    )
