#!/usr/bin/env python3
"""
Startup script for the Yaobao API.
"""

# Initialize logging first, before importing other modules
from core.logging import setup_logging
logger = setup_logging()

import os
import uvicorn

if __name__ == "__main__":
    logger.info("Starting Yaobao API server...")
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("APP_ENV", "development") == "development",
        log_level="info"
    )
