"""Router exposing basic system endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from runplan.database import SessionLocal
from runplan.models.plan_templates import PLAN_TEMPLATES, validate_templates
from runplan.models.workout_library import WORKOUT_LIBRARY


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/status")
async def get_status() -> dict[str, str]:
    """Return a minimal status payload."""
    return {"status": "online"}


@router.get("/database")
async def get_database_status() -> dict[str, str]:
    """Check that the database accepts queries."""
    db = SessionLocal()  # Let it fail naturally - FastAPI will handle connection errors

    try:
        db.execute(text("SELECT 1"))
        return {"database": "ok"}
    except Exception:
        logger.exception("Database status check failed")
        db.rollback()
        raise HTTPException(status_code=500, detail="Database unavailable")
    finally:
        db.close()


@router.get("/library")
async def get_library_status() -> dict:
    """
    Validate the plan templates against the workout library.

    Returns:
        dict: {
            "templates": list of template keys,
            "base_codes": list of library base codes,
            "problems": list of configuration problems (empty when consistent),
            "is_valid": bool
        }
    """
    problems = validate_templates()
    if problems:
        logger.warning("Plan template validation found %d problem(s)", len(problems))
    return {
        "templates": sorted(PLAN_TEMPLATES),
        "base_codes": sorted(WORKOUT_LIBRARY),
        "problems": problems,
        "is_valid": not problems,
    }
