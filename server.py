"""
Video Share Server - FastAPI Application

This is the main entry point for the video share backend.
It exposes HTTP endpoints for creating and listing videos.

Business logic is delegated to the services module - this file only handles:
- API routing
- Request/response handling
- Middleware and exception handler configuration
- Store / auth collaborator lifecycle
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Config, config
from schemas import (
    CreateVideoRequest,
    CreateVideoResponse,
    EnrichedVideoOut,
    ErrorResponse,
    HealthResponse,
    ListVideosResponse,
    PaginationOut,
    VideoOut,
)
from services.auth import PrincipalResolver, build_principal_resolver
from services.errors import VideoServiceError
from services.pagination import PageRequest
from services.video_service import VideoService
from store import VideoStore, build_store


# Configure logging
logging.basicConfig(
    level=getattr(logging, config.server.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(by_alias=True),
    )


# =============================================================================
# Dependencies
# =============================================================================

def get_video_service(request: Request) -> VideoService:
    """FastAPI dependency returning the process-wide VideoService."""
    return request.app.state.video_service


def get_current_user_id(request: Request) -> str:
    """FastAPI dependency resolving the request principal (raises AuthError)."""
    resolver: PrincipalResolver = request.app.state.principal_resolver
    return resolver.resolve_principal(request.headers)


# =============================================================================
# Application factory
# =============================================================================

def create_app(
    store: Optional[VideoStore] = None,
    principal_resolver: Optional[PrincipalResolver] = None,
    cfg: Config = config,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Pre-built store to use. When omitted, the lifespan hook builds
            one from ``cfg`` on startup and closes it on shutdown.
        principal_resolver: Auth collaborator. Defaults to the one selected
            by ``cfg.auth.mode``.
        cfg: Configuration to read.
    """

    def _wire(app: FastAPI, active_store: VideoStore) -> None:
        app.state.store = active_store
        app.state.video_service = VideoService(active_store)
        app.state.principal_resolver = principal_resolver or build_principal_resolver(
            cfg.auth.mode,
            active_store,
            header_name=cfg.auth.header_name,
            dev_username=cfg.auth.dev_username,
            dev_avatar_url=cfg.auth.dev_avatar_url,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan handler for startup/shutdown events.

        Builds the store once per process (unless one was injected) and
        releases it on shutdown.
        """
        # Startup
        logger.info("Starting video share server...")

        for warning in cfg.validate():
            logger.warning(f"Config warning: {warning}")

        owns_store = store is None
        if owns_store:
            active_store = build_store(cfg)
            if cfg.storage.auto_create:
                active_store.initialize()
            _wire(app, active_store)
        logger.info(f"Using {app.state.store.name} storage backend")

        yield

        # Shutdown
        logger.info("Shutting down video share server...")
        if owns_store:
            app.state.store.close()

    app = FastAPI(
        title="Video Share API",
        description="Create videos with metadata and list them with interaction stats",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if cfg.server.debug else None,
        redoc_url="/redoc" if cfg.server.debug else None,
    )

    if store is not None:
        _wire(app, store)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    _register_routes(app)
    return app


# =============================================================================
# Exception handlers
# =============================================================================

def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(VideoServiceError)
    async def handle_service_error(request: Request, exc: VideoServiceError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"Invalid request body on {request.url.path}: {exc.errors()}")
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _error_response(exc.status_code, "Route not found")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Global error handler: {exc}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# =============================================================================
# Routes
# =============================================================================

def _register_routes(app: FastAPI) -> None:

    @app.get("/api/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for container orchestration."""
        return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())

    @app.post(
        "/api/videos",
        response_model=CreateVideoResponse,
        status_code=status.HTTP_201_CREATED,
        responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
                   500: {"model": ErrorResponse}},
        tags=["Videos"],
    )
    def create_video(
        request: CreateVideoRequest,
        user_id: str = Depends(get_current_user_id),
        service: VideoService = Depends(get_video_service),
    ) -> CreateVideoResponse:
        """
        Create a video with optional meta items.

        The video and its meta items are written in one transaction.

        Returns:
            CreateVideoResponse with the video, its owner and meta items
        """
        logger.info(
            f"Create video request: user={user_id}, "
            f"meta_items={len(request.meta_items or [])}"
        )
        created = service.create_video(
            user_id=user_id,
            title=request.title,
            video_url=request.video_url,
            description=request.description,
            meta_items=[item.to_new_meta_item() for item in request.meta_items or []],
        )
        return CreateVideoResponse(data=VideoOut.from_created(created))

    @app.get(
        "/api/videos",
        response_model=ListVideosResponse,
        responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        tags=["Videos"],
    )
    def list_videos(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        user_id: str = Depends(get_current_user_id),
        service: VideoService = Depends(get_video_service),
    ) -> ListVideosResponse:
        """
        List videos newest first with owner, meta items and interaction stats.

        Missing or invalid page/limit fall back to 1 and 10.
        """
        page_request = PageRequest.from_query(page, limit)
        video_page = service.list_videos(page_request)
        return ListVideosResponse(
            data=[EnrichedVideoOut.from_enriched(item) for item in video_page.items],
            pagination=PaginationOut.from_pagination(video_page.pagination),
        )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
        log_level=config.server.log_level.lower()
    )
