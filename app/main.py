import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.router import router as api_router
from app.core.config import settings as app_settings
from app.core.exceptions import (
    BackendServiceError,
    ForbiddenError,
    InvalidRequestError,
    LeadNotFoundError,
    PropertyNotFoundError,
    QueryError,
    UnauthorizedError,
    UploadRejectedError,
    UserNotFoundError,
)
from app.core.rate_limit import limiter

# Configure logging
logging.basicConfig(level=app_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="EstateCRM",
    description="Multi-tenant real-estate CRM and public listing portal",
    version="0.1.0",
    debug=app_settings.DEBUG,
)

# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware, restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    return JSONResponse(
        status_code=401,
        content={"error": exc.detail, "type": "unauthorized"},
    )


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    logger.warning("Forbidden on %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=403,
        content={"error": exc.detail, "type": "forbidden"},
    )


@app.exception_handler(LeadNotFoundError)
async def lead_not_found_handler(request: Request, exc: LeadNotFoundError):
    logger.warning("Lead not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"error": exc.detail, "type": "lead_not_found"},
    )


@app.exception_handler(PropertyNotFoundError)
async def property_not_found_handler(request: Request, exc: PropertyNotFoundError):
    logger.warning("Property not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"error": exc.detail, "type": "property_not_found"},
    )


@app.exception_handler(UserNotFoundError)
async def user_not_found_handler(request: Request, exc: UserNotFoundError):
    logger.warning("User not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"error": exc.detail, "type": "user_not_found"},
    )


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    logger.warning("Invalid request: %s", exc.detail)
    return JSONResponse(
        status_code=400,
        content={"error": exc.detail, "type": "invalid_request"},
    )


@app.exception_handler(UploadRejectedError)
async def upload_rejected_handler(request: Request, exc: UploadRejectedError):
    logger.warning("Upload rejected: %s", exc.detail)
    return JSONResponse(
        status_code=400,
        content={"error": exc.detail, "type": "upload_rejected"},
    )


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError):
    logger.error("Query failed on %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=500,
        content={"error": exc.detail, "type": "query_error"},
    )


@app.exception_handler(BackendServiceError)
async def backend_service_error_handler(request: Request, exc: BackendServiceError):
    logger.error("Hosted backend call failed: %s", exc.detail)
    return JSONResponse(
        status_code=502,
        content={"error": exc.detail, "type": "backend_service_error"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "type": "http_error"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    # ctx may hold exception instances, which are not JSON serializable
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "error": "Request validation failed",
            "errors": errors,
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected internal error occurred. Please try again later.",
            "type": "internal_server_error",
        },
    )
