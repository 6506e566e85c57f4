"""
ProspectFilter - FastAPI Application

Turn natural-language company searches into Crustdata filters, cURL commands
and live screen → enrich → people results
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from routes import search_router

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events for FastAPI"""
    logger.info("Starting ProspectFilter...")
    if settings.mistral_api_key:
        logger.info("✅ Mistral parsing enabled")
    else:
        logger.warning("⚠️ MISTRAL_API_KEY not set - using keyword-based parsing only")
    if not settings.crustdata_api_key:
        logger.warning("⚠️ CRUSTDATA_API_KEY not set - /api/run will return 500")
    logger.info("ProspectFilter started successfully")

    yield

    logger.info("ProspectFilter shut down")


# Initialize FastAPI app
app = FastAPI(
    title="ProspectFilter",
    description="Natural language → Crustdata filters, cURL commands and enriched results",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(search_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies (e.g. missing or empty prompt) are client errors"""
    logger.warning(f"⚠️ Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": "Failed to parse prompt"})


@app.get("/")
async def root():
    return {
        "message": "ProspectFilter API",
        "version": "1.0.0",
        "endpoints": {
            "/api/parse": "Parse a prompt into canonical filters, payloads and cURLs",
            "/api/run": "Run screen → search → enrich → people search for a prompt",
            "/health": "Health check"
        }
    }


@app.get("/health")
async def health():
    return {"status": "OK", "timestamp": datetime.utcnow().isoformat()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=True
    )
