#!/usr/bin/env python3
"""
Gadget World Catalog Runner
Run with: python run.py
"""

import logging

import uvicorn

from app import create_app
from config import get_settings
from services.mongo_service import connect_product_store

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def main():
    """Main entry point: connect to MongoDB first, then serve"""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    try:
        store = connect_product_store(settings)
    except Exception as e:
        # Without a database there is nothing to serve; do not open the port
        logger.error(f"❌ Error connecting to MongoDB: {e}")
        return None

    app = create_app(store, settings)

    logger.info(f"🚀 Server running on port {settings.PORT}")
    uvicorn.run(
        app,
        host=settings.APP_HOST,
        port=settings.PORT,
        log_level="debug" if settings.DEBUG else "info"
    )
    return app


if __name__ == "__main__":
    main()
