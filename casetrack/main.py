# casetrack/main.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from casetrack.config import Settings, get_settings
from casetrack.database import Database
from casetrack.exceptions import AppError, RateLimited, Unauthenticated, ValidationError
from casetrack.routes.admin import router as admin_router
from casetrack.routes.auth import router as auth_router
from casetrack.routes.documents import router as documents_router
from casetrack.routes.logs import router as logs_router
from casetrack.routes.people import router as people_router
from casetrack.routes.status import router as status_router
from casetrack.utils import rate_limit
from casetrack.utils.storage import UploadStorage

logger = logging.getLogger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Answers 504 once a request runs past its wall-clock budget.

    The handler's worker thread is not interrupted and may still finish its
    database work in the background.
    """

    def __init__(self, app, timeout: float):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Request %s %s timed out after %.1fs", request.method, request.url.path, self.timeout)
            return JSONResponse(status_code=504, content={"error": "Request timed out."})


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turns uncaught exceptions into a logged 500 inside the CORS layer.

    Starlette's own fallback handler runs outside every user middleware, so
    its responses would reach the browser without CORS headers.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def app_error_handler(request: Request, exc: AppError):
    content = {"error": exc.detail}
    headers = {}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    if isinstance(exc, RateLimited):
        headers["Retry-After"] = str(exc.retry_after)
    if isinstance(exc, Unauthenticated):
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers or None)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Validation failed.", "errors": errors})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    db = Database(settings.DATABASE_URL, pool_size=settings.DB_POOL_SIZE)
    storage = UploadStorage(settings.UPLOAD_DIR, max_size=settings.MAX_UPLOAD_SIZE)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: tables and upload directory
        db.init_db()
        storage.ensure_dir()
        yield
        # Shutdown
        db.dispose()

    app = FastAPI(title="Casetrack API", version="1.0.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.db = db
    app.state.storage = storage
    app.state.rate_limiters = {
        rate_limit.AUTH: rate_limit.SlidingWindowLimiter(settings.AUTH_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECONDS),
        rate_limit.API: rate_limit.SlidingWindowLimiter(settings.API_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECONDS),
    }

    # Innermost first: error fallback, then timeout, then CORS outside both
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(TimeoutMiddleware, timeout=settings.REQUEST_TIMEOUT_SECONDS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(auth_router, prefix="/api")
    app.include_router(people_router, prefix="/api")
    app.include_router(status_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(logs_router, prefix="/api")

    @app.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("casetrack.main:create_app", factory=True, host="0.0.0.0", port=3001)
