"""FastAPI application for PolicyScope."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from policyscope.api.routers import analyze
from policyscope.api.routers.analyze import error_response
from policyscope.api.schemas.response import HealthResponse
from policyscope.config import get_settings
from policyscope.logger import get_logger

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="PolicyScope API",
    description="Privacy policy analysis - data collection, sharing, user rights and risks",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - allow requests from the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report bad request bodies as 400 in the analyze envelope."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.warning(f"Rejected request to {request.url.path}: {message}")
    return error_response(400, f"Please provide privacy policy text or a link ({message})")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Wrap framework errors (404, 405) in the analyze envelope."""
    if exc.status_code == 405:
        message = "Only POST requests are supported"
    else:
        message = str(exc.detail)
    response = error_response(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


# Include routers
app.include_router(analyze.router, prefix="/api/analyze", tags=["analyze"])


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Starting PolicyScope API server")
    logger.info("API documentation available at /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down PolicyScope API server")


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint with basic API information."""
    return HealthResponse(status="running", version="0.1.0")


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version="0.1.0")
