"""Health check endpoint.

Verifies the server is running, the database is reachable, and reports
how many live connections the registry is tracking.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from complimentbox import __version__
from complimentbox.api.dependencies import get_registry
from complimentbox.db.engine import get_db
from complimentbox.realtime.registry import ChannelRegistry

router = APIRouter()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    registry: ChannelRegistry = Depends(get_registry),
):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    status = "healthy" if all(
        v == "ok" for k, v in checks.items() if k != "version"
    ) else "degraded"

    return {"status": status, **checks, "connections": registry.connection_count}
