"""
Health check API route
"""

from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException
from config.settings import USER_STORE
from database.connection import get_db_pool

router = APIRouter()

@router.get("/")
async def health_check():
    """Health check - verifies the configured user store is reachable"""
    response = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store": USER_STORE,
    }

    if USER_STORE != "postgres":
        response["database"] = "not_configured"
        return response

    db_pool = get_db_pool()
    try:
        if db_pool is None:
            raise RuntimeError("Database pool not initialized")
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        response["database"] = "connected"
        return response

    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")
