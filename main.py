"""
Main API module for Brevly.

Responsibilities:
    - Expose REST endpoints to create, list, look up, resolve, delete and
      export shortened links
    - Map typed LinkManager failures to HTTP status codes
    - Serve the single-page browser UI and its redirect landing page

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage comes from the factory (memory or postgres, from env) unless
      one is injected; the reachability checker can be injected the same way.
    - LinkManager owns validation, normalization and store access; routes only
      translate Results into responses.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from brevly.config import settings
from brevly.manager.link_manager import LinkManager
from brevly.manager.reachability import ReachabilityChecker
from brevly.manager.result import ErrorKind, LinkError
from brevly.manager.validation import PAGE_MAX, PAGE_SIZE_MAX
from brevly.schemas import CreatedLinkOut, CreateLinkRequest, LinkOut, LinkPageOut, MessageOut
from brevly.storage.base import BaseStorage
from brevly.storage.storage_factory import get_storage

WEB_DIR = Path(__file__).resolve().parent / "brevly" / "web"

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNREACHABLE: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_RESPONSES = {
    400: {"model": MessageOut},
    404: {"model": MessageOut},
    409: {"model": MessageOut},
    500: {"model": MessageOut},
}


def _error_response(error: LinkError) -> JSONResponse:
    code = ERROR_STATUS[error.kind]
    message = error.message
    if error.kind is ErrorKind.UNKNOWN:
        message = "Internal server error"
    return JSONResponse(status_code=code, content={"message": message})


def create_app(
    storage: Optional[BaseStorage] = None,
    checker: Optional[ReachabilityChecker] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage (Optional[BaseStorage]): Record store; chosen from env when omitted.
        checker (Optional[ReachabilityChecker]): Reachability probe; a real
            httpx-backed checker when omitted.

    Returns:
        FastAPI: A fully configured application with its own LinkManager.
    """
    log = logging.getLogger("brevly")

    # basic console logging unless the host already configured it
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage if storage is not None else get_storage()
    owns_checker = checker is None
    checker = checker or ReachabilityChecker(timeout=settings.REACHABILITY_TIMEOUT)
    link_manager = LinkManager(
        storage=storage,
        checker=checker,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
    )
    log.info("Brevly storage backend: %s", type(storage).__name__)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if settings.AUTO_MIGRATE:
            storage.ensure_schema()
        yield
        if owns_checker:
            checker.close()

    app = FastAPI(
        title="Brevly",
        description="URL shortener with search, CSV export and reachability-checked resolution",
        version="1.0.0",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.link_manager = link_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ----------------------------------------------------------------
    # Error handlers
    # ----------------------------------------------------------------
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Validation error", "issues": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.post(
        "/shortened-links",
        status_code=status.HTTP_201_CREATED,
        response_model=CreatedLinkOut,
        responses=ERROR_RESPONSES,
    )
    def create_shortened_link(body: CreateLinkRequest):
        """
        Create a shortened link for a URL under a caller-chosen alias.

        Returns 400 for invalid url/alias, 409 when the alias is taken.
        """
        result = link_manager.create_link(body.url, body.shortened_url)
        if not result.ok:
            return _error_response(result.error)
        return result.value

    @app.get("/shortened-links", response_model=LinkPageOut)
    def list_shortened_links(
        search_query: Optional[str] = Query(None, alias="searchQuery"),
        sort_by: Optional[Literal["createdAt", "url", "shortenedUrl", "visits"]] = Query(
            None, alias="sortBy"
        ),
        sort_direction: Optional[Literal["asc", "desc"]] = Query(None, alias="sortDirection"),
        page: int = Query(1, ge=1, le=PAGE_MAX),
        page_size: Optional[int] = Query(None, ge=1, le=PAGE_SIZE_MAX, alias="pageSize"),
    ):
        """Search (url or alias, case-insensitive), sort and paginate links."""
        result = link_manager.list_links(
            search_query=search_query,
            sort_by=sort_by,
            sort_direction=sort_direction,
            page=page,
            page_size=page_size,
        )
        if not result.ok:
            return _error_response(result.error)
        return result.value

    @app.get("/shortened-links/export/csv", responses={200: {"content": {"text/csv": {}}}})
    def export_shortened_links_csv():
        """Download every link as CSV, newest first."""
        result = link_manager.export_csv()
        if not result.ok:
            return _error_response(result.error)
        return Response(
            content=result.value,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": 'attachment; filename="shortened-links.csv"'},
        )

    @app.get(
        "/shortened-links/shortened/{shortened_url}",
        response_model=LinkOut,
        responses=ERROR_RESPONSES,
    )
    def resolve_shortened_link(shortened_url: str):
        """
        Resolve an alias and count the visit.

        The target is probed first (HEAD, then GET); an unreachable target
        answers 404 and leaves the visit count unchanged.
        """
        result = link_manager.resolve_link(shortened_url)
        if not result.ok:
            return _error_response(result.error)
        return result.value

    @app.get("/shortened-links/{link_id}", response_model=LinkOut, responses=ERROR_RESPONSES)
    def get_shortened_link(link_id: str):
        result = link_manager.get_link_by_id(link_id)
        if not result.ok:
            return _error_response(result.error)
        return result.value

    @app.delete(
        "/shortened-links/{link_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        responses=ERROR_RESPONSES,
    )
    def delete_shortened_link(link_id: str):
        result = link_manager.delete_link(link_id)
        if not result.ok:
            return _error_response(result.error)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # ----------------------------------------------------------------
    # Browser UI
    # ----------------------------------------------------------------
    @app.get("/", include_in_schema=False)
    def index_page():
        return FileResponse(WEB_DIR / "index.html")

    @app.get("/r/{shortened_url}", include_in_schema=False)
    def redirect_page(shortened_url: str):
        # The page itself calls the resolve endpoint; the alias is read from the path
        return FileResponse(WEB_DIR / "redirect.html")

    app.mount("/static", StaticFiles(directory=WEB_DIR), name="static")

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
