# pdf_mailer/routes/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import psutil
import datetime
import logging

from pdf_mailer.routes.submission import get_submission_service
from pdf_mailer.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/health",
    tags=["Health Check"]
)


@router.get("")
async def health_check(service: SubmissionService = Depends(get_submission_service)):
    """
    Health check with database connectivity
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.datetime.now().isoformat(),
        "service": "PDF Emailer Backend",
    }

    if service.store is None:
        health_status["database"] = {"status": "disabled"}
    elif service.store.ping():
        health_status["database"] = {"status": "connected"}
    else:
        health_status["database"] = {"status": "disconnected"}
        health_status["status"] = "degraded"

    health_status["system"] = {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": psutil.virtual_memory().percent,
    }

    logger.info(f"Health check completed: {health_status['status']}")

    return JSONResponse(
        content=health_status,
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "X-Health-Check": "true"
        }
    )


@router.get("/ping")
async def ping():
    """
    Simple ping endpoint for keep-alive
    """
    return JSONResponse(
        content={
            "status": "pong",
            "timestamp": datetime.datetime.now().isoformat(),
        },
        headers={"Cache-Control": "no-cache"}
    )
