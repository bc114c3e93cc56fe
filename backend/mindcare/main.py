"""
FastAPI entrypoint for the MindCare backend application.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import List
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from mindcare.core.config import settings, Settings, DEFAULT_SECRET_KEY
from mindcare.core.errors import AppError
from mindcare.core.logging import configure_logging
from mindcare.core.utils import format_error
from mindcare.api.router import api_router
from mindcare.api.routes import auth, health
from mindcare.api.dependencies import open_storage
from mindcare.services.chat_service import ChatRelay

logger = logging.getLogger(__name__)


def check_settings(config: Settings) -> List[str]:
    """
    Refuse to run production without a signing secret; return warnings for
    optional integrations that are missing so the server can start degraded.
    """
    if config.SECRET_KEY == DEFAULT_SECRET_KEY and not config.is_development:
        raise RuntimeError("SECRET_KEY must be set outside development")

    warnings = []
    if not config.GEMINI_API_KEY:
        warnings.append("GEMINI_API_KEY is not set; the chatbot will answer 500 until it is configured")
    if config.STORAGE_BACKEND == "supabase" and not (config.SUPABASE_URL and config.SUPABASE_SERVICE_KEY):
        warnings.append("STORAGE_BACKEND is supabase but SUPABASE_URL/SUPABASE_SERVICE_KEY are missing")
    if not (config.GOOGLE_CLIENT_ID and config.GOOGLE_CLIENT_SECRET):
        warnings.append("Google OAuth is not configured; only password login is available")
    return warnings


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    for warning in check_settings(settings):
        logger.warning(warning)

    try:
        with open_storage() as storage:
            storage.ping()
        logger.info(f"Connected to {settings.STORAGE_BACKEND} storage")
    except AppError as e:
        logger.error(f"Storage check failed: {e.message} {e.details or ''}")

    if settings.VALIDATE_GEMINI_ON_STARTUP:
        await ChatRelay().validate_key()

    yield


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Backend API for mood tracking, journaling and the MindCare chatbot",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    details = exc.details if settings.is_development else None
    return JSONResponse(status_code=exc.status_code, content=format_error(exc.message, details))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content=format_error(message))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        if request.url.path.startswith("/api/"):
            return JSONResponse(status_code=404, content=format_error("API route not found"))
        return PlainTextResponse("Page not found", status_code=404)
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error(str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=format_error("Internal server error"))


# Mount static files directory
if os.path.exists(settings.STATIC_DIR):
    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

# Include API routes
app.include_router(api_router, prefix="/api")
app.include_router(auth.callback_router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "MindCare API is running"}


def run() -> None:
    """Serve the app with uvicorn on HOST:PORT."""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
