"""
FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from leadstage.api.v1.routes import api_router
from leadstage.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan - startup and shutdown events.

    Shutdown waits for nothing: pending stage triggers are best-effort.
    """
    logger.info(f"Starting lead stage engine ({settings.environment})...")

    yield  # Application is running

    logger.info("Lead stage engine shutdown complete")


app = FastAPI(
    title="Lead Stage Engine",
    description="Advances CRM leads through communication stages from their interaction history",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "lead-stage-engine"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
