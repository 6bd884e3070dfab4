from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from core import exceptions
from core.logging_config import setup_logging
from core.rate_limit_config import TESTING, limiter
from routers import admin, auth, comments, conferences, health

# uvicorn main:app --reload
# Open:  http://localhost:8000/docs  (API)  http://localhost:8000/admin  (dashboard)

# Initialize logging FIRST
setup_logging()

logger = logging.getLogger(__name__)

# --- Application Setup ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Guestbook API starting up")
    yield
    logger.info("Guestbook API shutting down")


app = FastAPI(
    title="Guestbook API",
    description="Conferences and their guestbook comments",
    version=health.API_VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore
if TESTING:
    logger.info("Rate limiting disabled (testing mode)")
else:
    logger.info("Rate limiting enabled")


@app.get("/")
def root():
    """Welcome endpoint listing the API entrypoints"""
    return {
        "message": "Guestbook API",
        "status": "running",
        "resources": {
            "commentaire": comments.COMMENT_RESOURCE.path,
            "conference": conferences.CONFERENCE_RESOURCE.path,
        },
    }


app.include_router(comments.router)
app.include_router(conferences.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(health.router)


# --- Exception Handlers ---


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report every constraint violation with the path of the offending field"""
    violations = []
    for error in exc.errors():
        location = list(error["loc"])
        if location and location[0] in ("body", "query", "path"):
            location = location[1:]
        violations.append(
            {
                "propertyPath": ".".join(str(part) for part in location),
                "message": error["msg"],
            }
        )

    logger.warning(
        f"Validation failed on {request.method} {request.url.path}: {violations}"
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "title": "An error occurred",
            "detail": "\n".join(
                f"{v['propertyPath']}: {v['message']}" for v in violations
            ),
            "violations": violations,
        },
    )


@app.exception_handler(exceptions.CommentNotFoundError)
async def comment_not_found_handler(
    request: Request, exc: exceptions.CommentNotFoundError
):
    """Handle CommentNotFoundError by returning 404"""
    logger.error(f"CommentNotFoundError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Comment Not Found",
            "message": exc.message,
            "comment_id": exc.comment_id,
        },
    )


@app.exception_handler(exceptions.ConferenceNotFoundError)
async def conference_not_found_handler(
    request: Request, exc: exceptions.ConferenceNotFoundError
):
    """Handle ConferenceNotFoundError by returning 404"""
    logger.error(f"ConferenceNotFoundError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Conference Not Found",
            "message": exc.message,
            "conference_id": exc.conference_id,
        },
    )


@app.exception_handler(exceptions.InvalidIriError)
async def invalid_iri_handler(request: Request, exc: exceptions.InvalidIriError):
    """Handle InvalidIriError by returning 400"""
    logger.warning(f"InvalidIriError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid IRI", "message": exc.message, "iri": exc.iri},
    )


@app.exception_handler(exceptions.AccessDeniedError)
async def access_denied_handler(request: Request, exc: exceptions.AccessDeniedError):
    """Handle AccessDeniedError by returning 403"""
    logger.warning(f"AccessDeniedError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={
            "error": "Access Denied",
            "message": "You do not have permission to perform this operation",
            # Don't expose user_id in response
        },
    )


@app.exception_handler(exceptions.UnsupportedFormatError)
async def unsupported_format_handler(
    request: Request, exc: exceptions.UnsupportedFormatError
):
    """Handle UnsupportedFormatError by returning 406"""
    logger.warning(f"UnsupportedFormatError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_406_NOT_ACCEPTABLE,
        content={"error": "Not Acceptable", "message": exc.message},
    )


@app.exception_handler(exceptions.DuplicateUserError)
async def duplicate_user_handler(request: Request, exc: exceptions.DuplicateUserError):
    """Handle DuplicateUserError by returning 409"""
    logger.warning(f"DuplicateUserError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "Duplicate User",
            "message": exc.message,
            "field": exc.field,
        },
    )


@app.exception_handler(exceptions.InvalidCredentialsError)
async def invalid_credentials_handler(
    request: Request, exc: exceptions.InvalidCredentialsError
):
    """Handle InvalidCredentialsError by returning 401"""
    logger.warning(f"InvalidCredentialsError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "Authentication Failed", "message": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )
