"""
Lightning Triage - FastAPI Application Entry Point

AI-assisted triage for citizen incident reports: severity and jurisdiction
classification, photo audits, and follow-up consultation for municipal
operators.

DESIGN PRINCIPLES:
- Model output is decoded strictly; malformed output is an error, not a default
- Collaborator failures are surfaced, never retried automatically
- Destructive actions need an explicit second confirmation
"""

import sys
import traceback
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.settings import settings
from app.routes import health, reports, triage
from app.services.errors import (
    AIUnavailableError,
    MalformedResponseError,
    OperationInProgressError,
    PermissionDeniedError,
    PreconditionError,
    ReportNotFoundError,
    ServiceError,
)
from app.services.triage_workspace import build_workspace


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="AI-assisted triage for citizen incident reports",
    debug=settings.DEBUG
)


def _error_response(status_code: int, exc: Exception, affordance: str = None) -> JSONResponse:
    content = {"detail": str(exc)}
    if affordance:
        content["affordance"] = affordance
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(PreconditionError)
async def precondition_exception_handler(request: Request, exc: PreconditionError):
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(ReportNotFoundError)
async def not_found_exception_handler(request: Request, exc: ReportNotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(OperationInProgressError)
async def in_progress_exception_handler(request: Request, exc: OperationInProgressError):
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(MalformedResponseError)
async def malformed_response_exception_handler(request: Request, exc: MalformedResponseError):
    """Model answered but not in the expected shape; the operator can try again."""
    return _error_response(status.HTTP_502_BAD_GATEWAY, exc, affordance="try_again")


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Store/model failures. Permission problems get their own message and no retry."""
    if isinstance(exc, PermissionDeniedError):
        return _error_response(status.HTTP_403_FORBIDDEN, exc)
    if isinstance(exc, AIUnavailableError):
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc, affordance="retry")
    return _error_response(status.HTTP_502_BAD_GATEWAY, exc, affordance="retry")


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write("🔥 GLOBAL EXCEPTION HANDLER CAUGHT EXCEPTION\n")
    sys.stderr.write(f"Path: {request.url.path}\n")
    sys.stderr.write(f"Method: {request.method}\n")
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.flush()

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Catch Pydantic validation errors and log them."""
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write("🔥 VALIDATION ERROR HANDLER\n")
    sys.stderr.write(f"Path: {request.url.path}\n")
    sys.stderr.write(f"Method: {request.method}\n")
    sys.stderr.write(f"Errors: {exc.errors()}\n")
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.flush()

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Firestore and the AI provider are wired into one TriageWorkspace.
    """
    print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    app.state.workspace = build_workspace(settings)


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup on application shutdown.
    """
    print(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(reports.router)
app.include_router(triage.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "triage": "/triage/analyze",
    }
