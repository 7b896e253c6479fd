import logging
from datetime import datetime
from fastapi import FastAPI
from app.core.config import settings
from app.core.exception_handlers import register_exception_handlers
from app.middleware.metrics import MetricsMiddleware, empty_metrics
from app.routes import system
from app.database.connection import Base, SessionLocal, engine
from app import models  # noqa: F401  registers every table on Base.metadata
from app.routes.auth import router as auth_router
from app.services.user_service import ensure_initial_admin
from app.routes.categories import router as category_router
from app.routes.lifecycle import router as lifecycle_router
from app.routes.products import router as product_router
from app.routes.pricing.pricing_route import router as pricing_router
from app.routes.pricing.calculate_price import router as calculate_price_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Product Catalog & Pricing Service")

app.add_middleware(MetricsMiddleware)
register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(category_router)
# lifecycle paths like /products/pending-approvals must win over /products/{product_id}
app.include_router(lifecycle_router)
app.include_router(product_router)
app.include_router(pricing_router)
app.include_router(calculate_price_router)
app.include_router(system.router)

@app.on_event("startup")
async def startup_event():
    app.state.start_time = datetime.utcnow()
    app.state.metrics = empty_metrics()
    db = SessionLocal()
    try:
        ensure_initial_admin(db)
    finally:
        db.close()
    logger.info("Catalog service started")
