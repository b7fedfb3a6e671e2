import logging
import os

import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("rentys.run")


def run_migrations():
    """Run Alembic migrations."""
    try:
        from alembic.config import Config
        from alembic import command

        alembic_cfg = Config("alembic.ini")
        logger.info("[STARTUP] Running database migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("[STARTUP] Migrations complete!")
        return True
    except Exception as e:
        logger.warning(f"[WARN] Migration failed: {e}")
        return False


if __name__ == "__main__":
    from rentys.core.config import settings

    host = settings.HOST
    port = settings.PORT

    # Disable reload in production
    reload = os.getenv("ENV") == "development"

    # The app's own startup falls back to create_all when this is off or fails
    if os.getenv("RUN_MIGRATIONS") == "true":
        run_migrations()

    logger.info(f"[STARTUP] Server binding to host={host} port={port}")
    uvicorn.run(
        "rentys.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
        workers=1,
        lifespan="auto",
    )
