"""
FastAPI main application for the Bookworm API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from accounts.authenticator import Authenticator
from accounts.store import CredentialStore
from accounts.tokens import TokenService
from api.auth import get_authenticator, require_identity
from api.config import APIConfig, config as api_config
from api.database import APIDatabaseService
from api.models import (
    AccountResponse, ErrorResponse, HealthResponse, LoginRequest, LoginResponse,
    ReadingListCreate, ReadingListItemResponse, ReviewCreate, ReviewResponse,
    SuccessResponse, normalize_book_key
)
from api.search import BookSearchClient
from storage.database import MongoDBManager
from utilities.config import BookwormConfig, config
from utilities.exceptions import BadRequest, BookwormError, NotFound
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)

LOGIN_PAGE = "login.html"
APP_PAGE = "app.html"


def configure_services(
    app: FastAPI,
    credential_store: CredentialStore,
    db_service: APIDatabaseService,
    search_client: Optional[BookSearchClient] = None,
    settings: BookwormConfig = config,
) -> None:
    """
    Attach the request-scoped collaborators to the application state.

    Everything a handler needs is built here from explicit configuration,
    so tests can wire the same app with fakes.
    """
    if settings.uses_fallback_secret():
        message = "JWT_SECRET is not set; signing tokens with the insecure development secret"
        if settings.is_production():
            logger.error(message)
        else:
            logger.warning(message)

    token_service = TokenService(
        secret=settings.get_jwt_secret(),
        algorithm=settings.jwt_algorithm,
        expire_days=settings.token_expire_days,
    )
    app.state.credential_store = credential_store
    app.state.token_service = token_service
    app.state.authenticator = Authenticator(
        store=credential_store,
        tokens=token_service,
        allowed_domain=settings.allowed_email_domain,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    app.state.db_service = db_service
    app.state.search_client = search_client or BookSearchClient(
        search_url=settings.search_url,
        timeout=settings.search_timeout,
        default_query=settings.default_search_query,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Bookworm API")

    db_manager = MongoDBManager(
        connection_url=config.mongodb_url,
        database_name=config.mongodb_database,
        users_collection=config.users_collection,
        reviews_collection=config.reviews_collection,
        reading_list_collection=config.reading_list_collection,
    )
    try:
        await db_manager.connect()
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise

    configure_services(
        app,
        credential_store=CredentialStore(db_manager.users),
        db_service=APIDatabaseService(db_manager.reviews, db_manager.reading_list),
    )
    app.state.db_manager = db_manager

    yield

    logger.info("Shutting down Bookworm API")
    await db_manager.disconnect()


# Dependency accessors
def get_db_service(request: Request) -> APIDatabaseService:
    return request.app.state.db_service


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


def get_search_client(request: Request) -> BookSearchClient:
    return request.app.state.search_client


router = APIRouter()


# Exception handlers
def _error_response(status_code: int, error: str, detail: Optional[str] = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail, status_code=status_code).model_dump(),
        headers=headers
    )


async def bookworm_exception_handler(request: Request, exc: BookwormError):
    """Map domain errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error("Request failed", error=exc.message, detail=exc.detail, path=request.url.path)
    else:
        logger.info("Request rejected", error=exc.message, status_code=exc.status_code, path=request.url.path)

    debug = request.app.state.debug
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _error_response(exc.status_code, exc.message, exc.detail if debug else None, headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Schema validation failures are client errors."""
    return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return _error_response(exc.status_code, str(exc.detail), headers=exc.headers)


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        str(exc) if request.app.state.debug else None
    )


# Health check endpoint (no authentication required)
@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    db_status = "unknown"
    db_manager = getattr(request.app.state, "db_manager", None)
    if db_manager:
        health_info = await db_manager.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=request.app.version,
        database_status=db_status
    )


# Authentication endpoints
@router.post("/api/login", response_model=LoginResponse, tags=["Auth"])
async def login(
    payload: LoginRequest,
    authenticator: Authenticator = Depends(get_authenticator)
):
    """
    Log in, or register on first use.

    This single endpoint covers both sign-up and sign-in:

    - **Unseen email**: an account is created with the supplied password.
    - **Known email**: the password is checked; a mismatch returns 401.

    Both paths return the same body, a bearer token valid for 7 days and the
    account email. Only emails in the accepted domain are allowed (400 otherwise).
    """
    outcome = await authenticator.login(payload.email, payload.password)
    return LoginResponse(token=outcome.token, email=outcome.email)


@router.get("/api/me", response_model=AccountResponse, tags=["Auth"])
async def get_me(
    identity: str = Depends(require_identity),
    store: CredentialStore = Depends(get_credential_store)
):
    """Profile of the authenticated account (password hash omitted)."""
    account = await store.find_by_email(identity)
    if account is None:
        raise NotFound("Account not found")
    return AccountResponse(email=account.email, created_at=account.created_at)


# Book search proxy
@router.get("/api/books/search", tags=["Books"])
async def search_books(
    request: Request,
    search_client: BookSearchClient = Depends(get_search_client)
):
    """
    Search the Open Library catalog.

    All query parameters are forwarded verbatim; **q** defaults to "bestsellers".
    The upstream JSON is returned unchanged.
    """
    return await search_client.search(request.query_params.multi_items())


# Reviews endpoints
@router.get("/api/reviews/{book_key:path}", response_model=List[ReviewResponse], tags=["Reviews"])
async def get_reviews(
    book_key: str,
    db_service: APIDatabaseService = Depends(get_db_service)
):
    """Latest 50 reviews of a book, newest first."""
    return await db_service.get_reviews(normalize_book_key(book_key))


@router.post("/api/reviews/{book_key:path}", response_model=ReviewResponse, tags=["Reviews"])
async def create_review(
    book_key: str,
    payload: ReviewCreate,
    identity: str = Depends(require_identity),
    db_service: APIDatabaseService = Depends(get_db_service)
):
    """Post a review of a book as the authenticated user."""
    if not payload.text or not payload.text.strip():
        raise BadRequest("Review text is required")
    return await db_service.create_review(normalize_book_key(book_key), identity, payload.text, payload.rating)


# Reading list endpoints
@router.get("/api/reading", response_model=List[ReadingListItemResponse], tags=["Reading List"])
async def get_reading_list(
    identity: str = Depends(require_identity),
    db_service: APIDatabaseService = Depends(get_db_service)
):
    """The authenticated user's reading list, most recently added first."""
    return await db_service.get_reading_list(identity)


@router.post("/api/reading", response_model=ReadingListItemResponse, tags=["Reading List"])
async def add_to_reading_list(
    payload: ReadingListCreate,
    identity: str = Depends(require_identity),
    db_service: APIDatabaseService = Depends(get_db_service)
):
    """Add a book to the reading list. Returns 409 if it is already there."""
    if not payload.book_key:
        raise BadRequest("Book key is required")
    return await db_service.add_to_reading_list(identity, payload)


@router.delete("/api/reading/{book_key:path}", response_model=SuccessResponse, tags=["Reading List"])
async def remove_from_reading_list(
    book_key: str,
    identity: str = Depends(require_identity),
    db_service: APIDatabaseService = Depends(get_db_service)
):
    """Remove a book from the reading list. Removing an absent book still succeeds."""
    await db_service.remove_from_reading_list(identity, normalize_book_key(book_key))
    return SuccessResponse()


# Frontend pages
def _page(request: Request, name: str) -> FileResponse:
    static_dir = request.app.state.static_dir
    path = Path(static_dir) / name if static_dir else None
    if path is None or not path.is_file():
        raise NotFound(f"Page not found: {name}")
    return FileResponse(path)


@router.get("/", include_in_schema=False)
async def index_page(request: Request):
    return _page(request, LOGIN_PAGE)


@router.get("/app", include_in_schema=False)
async def app_page(request: Request):
    return _page(request, APP_PAGE)


def create_app(settings: APIConfig = api_config, use_lifespan: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: API server settings
        use_lifespan: Connect to MongoDB on startup; tests disable this and
            wire services with ``configure_services`` instead
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan if use_lifespan else None
    )
    app.state.debug = settings.debug
    app.state.static_dir = settings.static_dir

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(BookwormError, bookworm_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router)
    return app


app = create_app()
