import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.database import Base, SessionLocal, engine
from app.routes import admin_router, auth_router, barbers_router, bookings_router, payments_router, working_hours_router
from app.services.auth import AuthService
from app.services.scheduler import block_expiry_loop, daily_summary_loop, keep_alive
from app.services.working_hours_service import WorkingHoursService
from app import models  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def init_database():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        WorkingHoursService.seed_defaults(db)
        AuthService.seed_default_admin(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Housecall Barber API starting up...")
    try:
        init_database()
        logger.info("Database ready")
    except Exception as e:
        # another worker may have created the tables first
        if "already exists" in str(e) or "duplicate key" in str(e):
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error("Failed to initialise database: %s", e)

    tasks = []
    if settings.ENABLE_BLOCK_SWEEP:
        logger.info("Starting block expiry sweep every %s minutes", settings.BLOCK_SWEEP_INTERVAL_MINUTES)
        tasks.append(asyncio.create_task(block_expiry_loop()))
    if settings.ENABLE_DAILY_SUMMARY:
        logger.info("Starting daily summary emails at %02d:00", settings.DAILY_SUMMARY_HOUR)
        tasks.append(asyncio.create_task(daily_summary_loop()))
    if settings.IS_PRODUCTION:
        logger.info("Starting production keep-alive service")
        tasks.append(asyncio.create_task(keep_alive()))

    yield

    for task in tasks:
        task.cancel()
    logger.info("Application shutting down...")


app = FastAPI(
    title="Housecall Barber API",
    description="Home-visit barber booking with automatic barber assignment",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGIN_LIST,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as 400 with the first problem as the message."""
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", [])[1:])
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"

    logger.warning("Validation error for %s: %s", request.url.path, message)
    return JSONResponse(
        status_code=400,
        content={"detail": {"message": message, "error": "VALIDATION_ERROR", "errors": errors}},
    )


app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
app.include_router(bookings_router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(barbers_router, prefix="/api/barbers", tags=["Barbers"])
app.include_router(payments_router, prefix="/api/payments", tags=["Payments"])
app.include_router(working_hours_router, prefix="/api/working-hours", tags=["Working Hours"])
app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])


@app.get("/")
async def root():
    return {
        "message": "Welcome to Housecall Barber API",
        "status": "healthy",
        "version": "1.0.0",
        "environment": "production" if settings.IS_PRODUCTION else "development"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "message": "Housecall Barber API is running",
        "environment": "production" if settings.IS_PRODUCTION else "development"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=not settings.IS_PRODUCTION)
