from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import logging
import os

from .api.deps import get_store
from .api.routes import api_router
from .core.config import settings
from .services.reminders import LoggingSmsNotifier, ReminderScheduler

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Hospital appointment booking with slot availability and status tracking",
    openapi_url="/api/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Middleware setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Only add TrustedHostMiddleware in production, not in testing
if not os.getenv("TESTING"):
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )

# Custom middleware for request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        # Starlette's default for an unmatched route
        message = "Endpoint not found"
    else:
        message = exc.detail
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": f"Invalid request: {problems}"}
    )

@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Internal server error: {str(exc)}")
    content = {"success": False, "message": "Internal server error"}
    if settings.DEBUG:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)

# Include routers
app.include_router(api_router)

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Open the store and start the reminder scan."""
    logger.info(f"Starting {settings.APP_NAME}...")

    store = get_store()
    app.state.reminders = None
    if settings.REMINDERS_ENABLED:
        app.state.reminders = ReminderScheduler(
            store,
            LoggingSmsNotifier(),
            interval_seconds=settings.REMINDER_INTERVAL_SECONDS,
        )
        await app.state.reminders.start()

    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    logger.info(f"Shutting down {settings.APP_NAME}...")
    reminders = getattr(app.state, "reminders", None)
    if reminders is not None:
        await reminders.stop()
    get_store().close()

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "doctors": "/api/doctors",
            "appointments": "/api/appointments",
            "availability": "/api/availability/{doctorId}/{date}",
            "stats": "/api/stats",
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "hospital_booking.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3000")),
        reload=settings.DEBUG,
        log_level="info"
    )
