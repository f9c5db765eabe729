import logging
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.auth.api import router as auth_router
from app.modules.subscription.api import router as subscription_router
from app.modules.clinics.api import router as clinics_router
from app.modules.staff.api import router as staff_router
from app.modules.patients.api import router as patients_router
from app.modules.services.api import router as services_router
from app.modules.appointments.api import router as appointments_router
from app.modules.treatment_history.api import router as treatment_history_router
from app.modules.medicines.api import router as medicines_router
from app.modules.inventory.api import router as inventory_router
from app.modules.prescriptions.api import router as prescriptions_router
from app.modules.bills.api import router as bills_router
from app.modules.receipts.api import router as receipts_router
from app.modules.queue.api import router as queue_router
from app.modules.transactions.api import router as transactions_router
from app.modules.notifications.api import router as notifications_router
from app.core.database import db_manager
from app.core.dependencies import get_db
from app.core.global_error_handler import register_global_exception_handlers
from app.core.logging_config import setup_logging
from app.core.config import settings

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-tenant clinic management API with subscription-based usage limits.",
    version="1.0.0"
)

# Register global exception handlers
register_global_exception_handlers(app)

@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on shutdown."""
    await db_manager.close()
    logger.info("Database engine closed.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
for router in (
    auth_router,
    subscription_router,
    clinics_router,
    staff_router,
    patients_router,
    services_router,
    appointments_router,
    treatment_history_router,
    medicines_router,
    inventory_router,
    prescriptions_router,
    bills_router,
    receipts_router,
    queue_router,
    transactions_router,
    notifications_router,
):
    app.include_router(router, prefix="/api")

@app.get("/api/")
async def root():
    return {"message": f"{settings.APP_NAME} is running"}

@app.get("/api/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "healthy"}
