"""Liveness and database readiness endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from scribo.db import get_db

logger = logging.getLogger(__name__)

SERVICE_NAME = "scribo-backend"

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/")
async def health_check():
    """Process is up; does not touch the database"""
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/db")
async def database_health(db: AsyncSession = Depends(get_db)):
    """Round-trip a trivial query so deployments can wait for the store"""
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        raise HTTPException(status_code=503, detail="Database unavailable")

    return {"status": "healthy", "service": SERVICE_NAME, "database": "reachable"}
