from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime

from price_catalog.database.connection import get_db
from price_catalog.dependencies.auth import require_admin
from price_catalog.core.logger import setup_logger
from price_catalog.models.product import Product
from price_catalog.schemas.system import HealthCheckResponse, SystemMetricsResponse

router = APIRouter(tags=["System"])

logger = setup_logger("routes.system")


def _uptime_seconds(request: Request, now: datetime) -> float:
    start_time = getattr(request.app.state, "start_time", now)
    return (now - start_time).total_seconds()


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Lightweight public health check.
    Returns ok + DB connectivity check (SELECT 1).
    """
    now = datetime.utcnow()

    db_ok = True
    extra = {}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check DB probe failed: {e}")
        db_ok = False
        extra["db_error"] = "database unreachable"

    return HealthCheckResponse(
        status="ok" if db_ok else "degraded",
        now=now,
        uptime_seconds=_uptime_seconds(request, now),
        db_ok=db_ok,
        extra=extra or None,
    )


@router.get("/metrics", response_model=SystemMetricsResponse, dependencies=[Depends(require_admin)])
def system_metrics(request: Request, db: Session = Depends(get_db)):
    """
    System metrics in JSON form.
    Uses in-process counters stored on app.state.metrics plus the product count.
    """
    now = datetime.utcnow()

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    total_products = db.query(func.count(Product.id)).scalar() or 0

    return SystemMetricsResponse(
        uptime_seconds=_uptime_seconds(request, now),
        now=now,
        requests_count=requests_count,
        avg_response_ms=avg_response_ms,
        total_products=int(total_products),
    )
