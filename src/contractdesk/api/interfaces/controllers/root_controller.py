"""Root controller for basic application endpoints."""

import os
from fastapi import APIRouter
from loguru import logger

from contractdesk import __version__


router = APIRouter(tags=["root"])


@router.get("/")
async def root():
    """Root endpoint with basic API information."""
    logger.info("Root endpoint accessed")
    return {
        "message": "Welcome to contractdesk API",
        "version": __version__,
        "status": "running"
    }


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": os.getenv("APP_ENVIRONMENT", "unknown"),
    }
