"""
BongoExpress Logistics API
Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
import os

from app.config import get_settings
from app.exceptions import AppError
from app.utils.logger import log
from app import __version__

# Import routers
from app.api import health, auth, shipments, customers, agents, payments, messages, notifications, settings as settings_api, customer_dashboard, uploads, dashboard
from app.middleware.security_middleware import SecurityMiddleware

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    from app.models.base import init_db, SessionLocal
    init_db()
    log.info("Database initialized")

    # Seed initial admin user if configured
    from app.services import auth_service
    db = SessionLocal()
    try:
        auth_service.seed_initial_user(db)
    finally:
        db.close()

    yield

    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    BongoExpress logistics backend

    - Shipments with tracking history, agents and customers
    - Payments, invoices and PDF receipts
    - Contact messages with email replies
    - Customer self-service dashboard
    """,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Access log, nosniff, Cache-Control
app.add_middleware(SecurityMiddleware)

# Gzip compression
app.add_middleware(GZipMiddleware, minimum_size=500)


# ── Error envelope ──────────────────────────────────────

def _error(status_code: int, message: str, status: str | None = None) -> JSONResponse:
    status = status or ("fail" if status_code < 500 else "error")
    return JSONResponse(status_code=status_code, content={"status": status, "message": message})


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error(exc.status_code, exc.message, exc.envelope_status)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid input"))
    return _error(400, "; ".join(problems) or "Invalid input")


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    log.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return _error(400, "The request conflicts with existing data (duplicate or invalid reference).")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, "Something went wrong. Please try again later.")


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix="/api")
app.include_router(shipments.router, prefix="/api")
app.include_router(customers.router, prefix="/api")
app.include_router(agents.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(messages.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(settings_api.router, prefix="/api")
app.include_router(customer_dashboard.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")

# Uploaded images
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=settings.api_workers if not settings.debug else 1
    )
