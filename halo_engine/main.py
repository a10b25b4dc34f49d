"""
HALO Engine - Main FastAPI Application Entry Point
"""

import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, status
from fastapi.responses import FileResponse

from halo_engine.api.v1.router import api_router as v1_router
from halo_engine.config import settings
from halo_engine.observability.logging import setup_logging

logger = logging.getLogger(__name__)

BUILTIN_NODES_DIR = Path(__file__).parent / "core" / "nodes" / "builtin"


def create_app() -> FastAPI:
    """Build the application: logging, routes, icon assets and startup hooks."""
    # Setup logging first
    setup_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="HALO Engine - Node-based workflow execution",
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    )

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.on_event("startup")
    async def startup_event():
        logger.info("🚀 Starting HALO Engine...")
        from halo_engine.database.session import init_db
        from halo_engine.core.nodes.registry import get_node_registry

        init_db()
        logger.info("✅ Database initialized")

        registry = get_node_registry()
        logger.info(f"✅ {len(registry)} node types available")

    @app.get(settings.NODE_ICON_URL_PREFIX + "/{folder}/{filename}", include_in_schema=False)
    async def node_icon(folder: str, filename: str):
        """Serve a node's SVG icon from its module folder."""
        path = (BUILTIN_NODES_DIR / folder / filename).resolve()
        if (
            not filename.lower().endswith(".svg")
            or path.parent.parent != BUILTIN_NODES_DIR.resolve()
            or not path.is_file()
        ):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Icon not found")
        return FileResponse(path, media_type="image/svg+xml")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": settings.VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "halo_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
