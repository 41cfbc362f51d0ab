import logging
import os
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.metrics import REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL
from api.routers import analytics, categories, context, notifications, ops, suggestions, tasks
from api.state import AppState, build_state
from smart_todo.config import LLM_PROVIDER, LOG_LEVEL
from smart_todo.errors import TaskManagerError, UnexpectedError

# Logging configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = err.get("msg", "invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


async def _task_manager_error_handler(request: Request, exc: TaskManagerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed unexpectedly: {exc!r}", exc_info=exc)
    return JSONResponse(status_code=UnexpectedError.status_code, content={"error": "Internal server error"})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


def create_app(state: Optional[AppState] = None) -> FastAPI:
    app = FastAPI(title="Smart Todo API")
    app.state.smart_todo = state or build_state()

    app.add_exception_handler(TaskManagerError, _task_manager_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    @app.middleware("http")
    async def record_request_metrics(request: Request, call_next):
        start = time.time()
        response = await call_next(request)

        route = request.scope.get("route")
        endpoint = getattr(route, "path", "unmatched")
        # Prometheus counters (best-effort)
        try:
            REQUESTS_TOTAL.labels(endpoint=endpoint, status=str(response.status_code)).inc()
            REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
        except Exception:
            logger.debug("Failed to record request metrics", exc_info=True)
        return response

    @app.on_event("startup")
    async def startup() -> None:
        logger.info(f"Smart Todo API started (llm provider: {LLM_PROVIDER})")

    app.include_router(ops.router)
    app.include_router(tasks.router)
    app.include_router(categories.router)
    app.include_router(context.router)
    app.include_router(suggestions.router)
    app.include_router(notifications.router)
    app.include_router(analytics.router)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
