import os
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from persona_studio.api.routers import api_router
from persona_studio.api.lifespan import lifespan
from persona_studio.api.schemas import ErrorResponse
from persona_studio.core.errors import (
    AccessDeniedError,
    EmptyStoryError,
    InvalidResponseError,
    MissingCredentialError,
    ModelRefusalError,
    NoImageProducedError,
    PersonaStudioError,
    RateLimitedError,
)


# Configure logging
log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
logger.info(f"🔧 API Logger initialized with level: {log_level}")

# Checked in order; subclasses come before their bases
ERROR_STATUS_CODES = [
    (MissingCredentialError, 401),
    (AccessDeniedError, 403),
    (RateLimitedError, 429),
    (ModelRefusalError, 422),
    (NoImageProducedError, 502),
    (InvalidResponseError, 502),
    (EmptyStoryError, 502),
]


def status_code_for(exc: PersonaStudioError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


# Create FastAPI application
app = FastAPI(
    title="Persona Studio API",
    description="""
    Virtual persona image generation on top of Gemini image models.

    This API provides endpoints for:
    - Registering the API key used for generation
    - Creating a persona from attributes or an uploaded reference photo
    - Planning and generating storyboard series that keep the persona's identity
    - Studio shots driven by camera settings
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite development server
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(PersonaStudioError)
async def persona_studio_exception_handler(request: Request, exc: PersonaStudioError):
    """Map classified failures to HTTP responses with a user-facing hint"""
    status_code = status_code_for(exc)
    logger.warning(f"❌ {type(exc).__name__} ({status_code}): {exc}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            detail=str(exc),
            error=type(exc).__name__,
            hint=exc.hint or None,
        ).model_dump(),
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Workflow preconditions that the caller did not meet"""
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "error": "ValueError"}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if os.getenv("ENV") == "development" else "An error occurred"
        }
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "persona-studio-api",
        "version": "1.0.0"
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Persona Studio API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "api": "/api/v1"
    }


# Include API routes
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "persona_studio.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
