"""
Yard Design Studio - Backend API
Main FastAPI application entry point
"""

# Load environment variables from .env file FIRST
from dotenv import load_dotenv
load_dotenv()

import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import router, register_error_handlers
from generation import ImageGenerationClient
from generation.vision_client import resolve_chat_provider
from utils import get_maps_api_key


def get_log_level() -> str:
    """LOG_LEVEL if it names a logging level, else INFO."""
    level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if isinstance(logging.getLevelName(level), int):
        return level
    return "INFO"


logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("yard_design")

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def get_cors_origins():
    configured = os.getenv("CORS_ORIGINS", "")
    origins = [origin.strip() for origin in configured.split(",") if origin.strip()]
    return origins or DEFAULT_CORS_ORIGINS


def image_provider_configured() -> bool:
    try:
        ImageGenerationClient()
    except ValueError:
        return False
    return True


app = FastAPI(
    title="Yard Design Studio",
    description="AI landscaping concepts, cost breakdowns and reports for homeowners",
    version="1.0.0"
)

# Configure CORS for the browser client
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include API routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    return {
        "message": "Yard Design Studio API",
        "docs": "/docs",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Report which providers have keys configured (never the keys)."""
    return {
        "status": "healthy",
        "providers": {
            "image": image_provider_configured(),
            "breakdown": resolve_chat_provider() is not None,
            "animation": bool(os.getenv("RUNWAY_API_KEY")),
            "maps": bool(get_maps_api_key()),
        },
    }


logger.info("Yard Design Studio API ready (CORS origins: %s)", ", ".join(get_cors_origins()))
