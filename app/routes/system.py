import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.dependencies.auth import require_admin
from app.models.pricing_rule import PricingRule
from app.schemas.system import HealthCheckResponse, SystemMetricsResponse
from app.services.lifecycle_service import get_lifecycle_stats

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


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
        logger.error("Health check database query failed: %s", e)
        db_ok = False
        extra["db_error"] = str(e)

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
    Admin-only system metrics in JSON form.
    Uses in-process counters stored on app.state.metrics and DB-derived metrics.
    """
    now = datetime.utcnow()

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    stats = get_lifecycle_stats(db)
    active_rules = (
        db.query(func.count(PricingRule.id))
        .filter(PricingRule.is_active.is_(True))
        .scalar()
    ) or 0

    return SystemMetricsResponse(
        uptime_seconds=_uptime_seconds(request, now),
        now=now,
        requests_count=requests_count,
        avg_response_ms=avg_response_ms,
        products_by_state=stats["counts"],
        total_products=stats["total"],
        active_pricing_rules=int(active_rules),
    )
