import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status

from restopos.api.v1.inventory import router as inventory_router
from restopos.api.v1.notifications import router as notifications_router
from restopos.api.v1.orders import router as orders_router
from restopos.core.config import PROJECT_NAME, VERSION
from restopos.core.db import close_db, init_db
from restopos.core.exception_handlers import setup_exception_handlers

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("restopos")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Open the store and create missing collections
    yield
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Lifecycle"])
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Stock Ledger"])
app.include_router(notifications_router, prefix="/api/v1/notifications", tags=["Notifications"])

setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
