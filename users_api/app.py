import re

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from users_api.core.config import get_settings
from users_api.core.logging import configure_logging, get_logger
from users_api.repositories.json_storage import JsonUserStorage
from users_api.routers import users as users_router
from users_api.services.user_service import UserService

logger = get_logger(__name__)

_NEWLINE_TEXT = re.compile(r"%0[AD]|[\r\n]", re.IGNORECASE)
_NEWLINE_BYTES = re.compile(rb"%0[AD]|[\r\n]", re.IGNORECASE)


def clean_path(path: str) -> str:
    """Drop encoded or raw CR/LF characters from a request path."""
    return _NEWLINE_TEXT.sub("", path)


class PathCleaningMiddleware(BaseHTTPMiddleware):
    """Strip newline sequences from the path before routing (request splitting / log injection)."""

    async def dispatch(self, request, call_next):
        scope = request.scope
        cleaned = clean_path(scope["path"])
        if cleaned != scope["path"]:
            logger.debug("Cleaned URL: %r", cleaned)
            scope["path"] = cleaned
        raw_path = scope.get("raw_path")
        if raw_path:
            scope["raw_path"] = _NEWLINE_BYTES.sub(b"", raw_path)
        return await call_next(request)


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn; reads Settings on every call."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Users JSON API")
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(PathCleaningMiddleware)

    storage = JsonUserStorage(settings.users_file)
    app.state.user_service = UserService(storage, strict_reads=settings.strict_reads)
    app.include_router(users_router.router)
    logger.info("Users stored in %s", storage.path)
    return app


app = create_app()
