"""
Liveness, readiness and version checks.

These routes sit outside ``/api/v1`` so load balancers can reach them
without knowing the API version.
"""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from usogui_db.core.logging_config import get_logger
from usogui_db.server.core import constant
from usogui_db.server.services.deps import SessionDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    summary="Liveness Check",
    description="Report that the process is up. Does not touch the database.",
    response_description="Liveness status.",
)
async def health_check():
    return {"status": "ok"}


@router.get(
    "/health/db",
    summary="Readiness Check",
    description="Run a trivial query to confirm the database is reachable.",
    responses={503: {"description": "Database unreachable"}},
)
async def database_check(session: SessionDep):
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error(f"Database readiness check failed: {exc}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
    return {"status": "ok", "database": "ok"}


@router.get(
    "/version",
    summary="API Version",
    description="Report the application release and the API schema it serves.",
    response_description="Release and schema identifiers.",
)
async def version():
    return {"version": constant.VERSION, "schema_version": constant.SCHEMA_VERSION}
