#!/usr/bin/env python3
"""
API server for Vine Finance. Provides the portfolio aggregation endpoints used
by the mobile app's dashboard, accounts, real estate and goals screens.
"""
import os
import logging
import contextlib

from dotenv import load_dotenv
from decouple import config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Only load .env in development; elsewhere the environment is injected.
if os.getenv("ENVIRONMENT", "development").lower() == "development":
    load_dotenv(override=False)

from routes.aggregation_routes import router as aggregation_router
from utils.feature_flags import get_feature_flags

# Configure logging
logging.basicConfig(
    level=getattr(logging, config("LOG_LEVEL", default="INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("vine-api-server")

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000,http://127.0.0.1:8000"

API_VERSION = "1.0.0"


def _cors_origins() -> list:
    raw = config("CORS_ALLOWED_ORIGINS", default=DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("LIFESPAN: Starting API server...")
    logger.info(f"Environment: {config('ENVIRONMENT', default='development')}")
    if not config("BACKEND_API_KEY", default=None):
        logger.warning("BACKEND_API_KEY is not set; aggregation endpoints will answer 500 until it is configured.")
    logger.info(f"Feature flags: {get_feature_flags().get_all_flags()}")

    yield

    logger.info("Shutting down API server...")


app = FastAPI(
    title="Vine Finance API",
    description="Net worth, account, real estate and goal aggregation for the Vine Finance app.",
    version=API_VERSION,
    lifespan=lifespan
)

app.include_router(aggregation_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/info")
async def get_info():
    """Provides basic server information."""
    logger.debug("Received request for /info endpoint")
    return {"server": "Vine Finance API", "status": "running", "version": API_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api_server:app",
        host=config("HOST", default="0.0.0.0"),
        port=config("PORT", default=8000, cast=int),
        reload=config("ENVIRONMENT", default="development").lower() == "development",
    )
