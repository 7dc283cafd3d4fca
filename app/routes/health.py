"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

import asyncio
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from app.core.settings import settings
from app.routes.dependencies import get_workspace
from app.services.triage_workspace import TriageWorkspace


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(workspace: TriageWorkspace = Depends(get_workspace)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "ai_enabled": workspace.provider is not None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db")
async def database_health(workspace: TriageWorkspace = Depends(get_workspace)):
    """
    Database connectivity check.
    Lists collections to verify Firestore is reachable.
    """
    try:
        if workspace.store is None:
            raise RuntimeError("Firestore not initialized")

        loop = asyncio.get_running_loop()
        collections = await loop.run_in_executor(None, lambda: list(workspace.store.db.collections()))

        return {
            "status": "healthy",
            "database": "firestore",
            "connected": True,
            "collection": workspace.store.collection_name,
            "collections_count": len(collections),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )
