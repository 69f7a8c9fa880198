"""FastAPI app entrypoint for todolist-api."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todolist_api.api.deps import ApiError, get_context, get_owner_id, unwrap
from todolist_api.api.schemas import (
    CreateTaskRequest,
    CredentialsRequest,
    ErrorResponse,
    MessageResponse,
    TokenResponse,
)
from todolist_api.config.settings import Settings, get_settings
from todolist_api.context import AppContext, build_context
from todolist_api.errors import StorageError
from todolist_api.services.identity import CREDENTIALS_REQUIRED_MESSAGE
from todolist_api.services.tasks import TEXT_REQUIRED_MESSAGE
from todolist_api.storage.base import Storage
from todolist_api.storage.models import TaskItem
from todolist_api.storage.postgres import PostgresStorage

logger = logging.getLogger(__name__)

LIVENESS_MESSAGE = "Server is running successfully!"

# Body validation failures are reported with the route's own message.
_BODY_ERROR_MESSAGES = {
    "/register": CREDENTIALS_REQUIRED_MESSAGE,
    "/login": CREDENTIALS_REQUIRED_MESSAGE,
    "/tasks": TEXT_REQUIRED_MESSAGE,
}

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    storage_override: Storage | None,
) -> None:
    if hasattr(app.state, "context"):
        return

    database_url = settings.database_url
    if storage_override is None and not database_url:
        raise RuntimeError(
            "Missing database URL. Set TODOLIST_DATABASE_URL "
            "or DATABASE_URL before starting the app."
        )
    storage = storage_override or PostgresStorage(
        database_url,
        connect_timeout_s=settings.db_connect_timeout_s,
    )
    # An unreachable database must not stop the server; requests fail until it is back.
    try:
        storage.migrate()
    except StorageError:
        logger.exception("startup event=storage_unavailable app=%s", settings.app_name)
    else:
        logger.info("startup event=storage_ready app=%s", settings.app_name)

    app.state.context = build_context(settings, storage)


def create_app(
    *,
    storage: Storage | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _ensure_runtime_state(app, settings=settings, storage_override=storage)
        yield

    app_lifespan = lifespan if storage is None else None
    app = FastAPI(title=settings.app_name, lifespan=app_lifespan)

    # Keep test paths reliable when lifespan is not executed by the client.
    if storage is not None:
        _ensure_runtime_state(app, settings=settings, storage_override=storage)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    def home() -> str:
        return LIVENESS_MESSAGE

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/register",
        status_code=201,
        response_model=MessageResponse,
        responses=_ERROR_RESPONSES,
    )
    def register(
        payload: CredentialsRequest,
        context: AppContext = Depends(get_context),
    ) -> MessageResponse:
        message = unwrap(context.identity.register(payload.username, payload.password))
        return MessageResponse(message=message)

    @app.post("/login", response_model=TokenResponse, responses=_ERROR_RESPONSES)
    def login(
        payload: CredentialsRequest,
        context: AppContext = Depends(get_context),
    ) -> TokenResponse:
        token = unwrap(context.identity.login(payload.username, payload.password))
        return TokenResponse(token=token)

    @app.get("/tasks", response_model=list[TaskItem], responses=_ERROR_RESPONSES)
    def list_tasks(
        owner_id: str = Depends(get_owner_id),
        context: AppContext = Depends(get_context),
    ) -> list[TaskItem]:
        return unwrap(context.tasks.list_tasks(owner_id))

    @app.post(
        "/tasks",
        status_code=201,
        response_model=TaskItem,
        responses=_ERROR_RESPONSES,
    )
    def create_task(
        payload: CreateTaskRequest,
        owner_id: str = Depends(get_owner_id),
        context: AppContext = Depends(get_context),
    ) -> TaskItem:
        return unwrap(context.tasks.create_task(owner_id, payload.text))

    @app.delete(
        "/tasks/{task_id}",
        response_model=MessageResponse,
        responses=_ERROR_RESPONSES,
    )
    def delete_task(
        task_id: str,
        owner_id: str = Depends(get_owner_id),
        context: AppContext = Depends(get_context),
    ) -> MessageResponse:
        message = unwrap(context.tasks.delete_task(owner_id, task_id))
        return MessageResponse(message=message)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.error.status_code,
            content={"error": exc.error.message},
        )

    @app.exception_handler(RequestValidationError)
    async def body_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _BODY_ERROR_MESSAGES.get(request.url.path, "Invalid request")
        logger.info(
            "request event=invalid_body path=%s errors=%d", request.url.path, len(exc.errors())
        )
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    # ServerErrorMiddleware re-raises after this runs, so the server logs the traceback.
    @app.exception_handler(Exception)
    async def unexpected_error_handler(_: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


app = create_app()
