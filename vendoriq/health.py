from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from vendoriq.core.config import settings
from vendoriq.db.session import get_db
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


def add_health_endpoint(app: FastAPI):
    @app.get("/health", summary="Health Check", tags=["Health"])
    def health_check(request: Request, db: Session = Depends(get_db)):
        db_healthy = False
        try:
            db.execute(text("SELECT 1"))
            db_healthy = True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")

        cache = getattr(request.app.state, "cache", None)
        cache_healthy = cache.health_check() if cache is not None else False
        if not cache_healthy:
            logger.warning("Redis connection: unavailable, OTPs stored in memory")

        otp_manager = getattr(request.app.state, "otp_manager", None)

        if not db_healthy:
            overall = "unhealthy"
        elif not cache_healthy:
            overall = "degraded"
        else:
            overall = "healthy"

        return JSONResponse(
            status_code=503 if not db_healthy else 200,
            content={
                "status": overall,
                "database": "connected" if db_healthy else "disconnected",
                "cache": "connected" if cache_healthy else "disconnected",
                "otp_store": otp_manager.backend if otp_manager is not None else None,
                "timestamp": datetime.utcnow().isoformat(),
                "service": "vendoriq-api",
                "version": "1.0.0",
            },
        )

    @app.get("/", summary="Root Endpoint", tags=["Health"])
    def root():
        return {
            "message": f"{settings.PROJECT_NAME} API",
            "status": "operational",
            "version": "1.0.0",
            "timestamp": datetime.utcnow().isoformat(),
        }
