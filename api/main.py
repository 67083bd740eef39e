"""
FastAPI Main Application
Design suggestion API for the design-tool plugin.

Every analyze route answers with the same response envelope regardless of
which provider tier produced the suggestions.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import os
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.dependencies import get_pipeline
from api.health import router as health_router, root_router, SERVICE_VERSION
from api.routes import router as analyze_router, PREFLIGHT_HEADERS

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = SERVICE_VERSION


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the provider configuration once at startup."""
    logger.info("Starting design suggestion API...")
    pipeline = get_pipeline()
    logger.info(
        "Real AI %s",
        "enabled" if pipeline.config.use_real_ai else "disabled (mock tier only)",
    )

    yield

    logger.info("Shutting down design suggestion API...")


app = FastAPI(
    title="Design Suggestion API",
    description="Normalizes AI design suggestions for the design-tool plugin",
    version=API_VERSION,
    lifespan=lifespan
)

# The plugin UI runs in a sandboxed iframe with a null/opaque origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=86400,
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "detail": str(exc)},
        headers={"Access-Control-Allow-Origin": PREFLIGHT_HEADERS["Access-Control-Allow-Origin"]},
    )


# Include routers
app.include_router(root_router, tags=["Health"])
app.include_router(health_router, prefix="/system", tags=["Health"])
app.include_router(analyze_router, prefix="/api", tags=["Analyze"])


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Design Suggestion API",
        "version": API_VERSION,
        "status": "active",
        "analyze": "/api/analyze",
        "docs": "/docs",
        "health": "/system/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "3001")),
        log_level="info"
    )
