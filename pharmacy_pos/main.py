from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from pharmacy_pos.config import settings
from pharmacy_pos.database import init_db, close_db, AsyncSessionLocal
from pharmacy_pos.core.exceptions import POSError, ValidationError, NotFoundError, ConflictError
from pharmacy_pos.services.sync_service import create_sync_engine
from pharmacy_pos.tasks.auto_sync import AutoSyncScheduler
from pharmacy_pos.api.v1 import sales, dashboard, sync
from pharmacy_pos.api.v1.products import router_products
from pharmacy_pos.api.v1.services import router_services, router_service_sales
from pharmacy_pos.api.v1.customers import router_customers

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events - startup and shutdown"""
    # Startup
    logger.info("Starting PharmacyPOS application...")
    await init_db()
    logger.info("Database initialized")

    sync_engine = create_sync_engine(AsyncSessionLocal, settings)
    await sync_engine.load_cursor()
    auto_sync = AutoSyncScheduler(sync_engine, interval_minutes=settings.SYNC_INTERVAL_MINUTES)
    app.state.sync_engine = sync_engine
    app.state.auto_sync = auto_sync

    if settings.SYNC_AUTO_START:
        auto_sync.start()
        logger.info("Background sync started")

    yield

    # Shutdown
    logger.info("Shutting down PharmacyPOS...")
    auto_sync.shutdown()
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Point-of-sale ledger for a single pharmacy with cloud replication",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


def error_response(status_code: int, exc: POSError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": exc.message}
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning(f"{request.method} {request.url.path} not found: {exc.message}")
    return error_response(404, exc)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    logger.warning(f"{request.method} {request.url.path} conflict: {exc.message}")
    return error_response(409, exc)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) if settings.DEBUG else "Internal server error"
        }
    )


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "PharmacyPOS API is running",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }


# Include API routers
app.include_router(router_products, prefix=f"{settings.API_V1_PREFIX}/products", tags=["Products"])
app.include_router(sales.router, prefix=f"{settings.API_V1_PREFIX}/sales", tags=["Sales"])
app.include_router(router_services, prefix=f"{settings.API_V1_PREFIX}/services", tags=["Services"])
app.include_router(router_service_sales, prefix=f"{settings.API_V1_PREFIX}/service-sales", tags=["Service Sales"])
app.include_router(router_customers, prefix=f"{settings.API_V1_PREFIX}/customers", tags=["Customers"])
app.include_router(dashboard.router, prefix=f"{settings.API_V1_PREFIX}/dashboard", tags=["Dashboard"])
app.include_router(sync.router, prefix=f"{settings.API_V1_PREFIX}/sync", tags=["Sync"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pharmacy_pos.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
