"""
Liveness and readiness endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techassist.db.database import get_db
from techassist.utils.logging import get_logger

logger = get_logger("techassist.api.health")

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": "techassist"}


@router.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)):
    """Ready once the relational store answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "service": "techassist", "error": str(e)},
        )
    return {"status": "ready", "service": "techassist"}
