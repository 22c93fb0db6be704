import json
import logging
import sys
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from .config import (
    ALLOWED_ORIGINS,
    APP_ENV,
    APP_NAME,
    DB_WAIT_ATTEMPTS,
    DB_WAIT_DELAY_SECONDS,
    HOST,
    LOG_LEVEL,
    PORT,
    require_database_url,
)
from .database import init_engine, mask_url, store_ready, wait_for_db
from .routes import include_modular_routers
from .services.intake import IntakeError

logger = logging.getLogger(__name__)

app = FastAPI(title=APP_NAME)
include_modular_routers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    body = await request.body()
    logger.info(
        "[request] %s - %s %s",
        datetime.now(timezone.utc).isoformat(),
        request.method,
        request.url.path,
    )
    logger.debug("[request] headers=%s", json.dumps(dict(request.headers), indent=2))
    if body:
        logger.debug("[request] body=%s", body.decode("utf-8", errors="replace"))
    return await call_next(request)


@app.exception_handler(IntakeError)
async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [str(err.get("msg")) for err in exc.errors()]
    logger.error("[request] unparseable body path=%s details=%s", request.url.path, details)
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[request] unhandled error name=%s message=%s", type(exc).__name__, exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


@app.on_event("startup")
def on_startup() -> None:
    url = require_database_url()
    reachable = True
    try:
        wait_for_db(url, max_attempts=DB_WAIT_ATTEMPTS, delay_seconds=DB_WAIT_DELAY_SECONDS)
    except OperationalError as exc:
        # the table is created by the first write that reaches the store
        reachable = False
        logger.error("[db] connection error url=%s name=%s message=%s", mask_url(url), type(exc).__name__, exc)
    init_engine(url, create_tables=reachable)
    logger.info(
        "[startup] %s env=%s port=%s store=%s",
        APP_NAME,
        APP_ENV,
        PORT,
        "connected" if store_ready() else "disconnected",
    )


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    try:
        require_database_url()
    except RuntimeError as exc:
        logger.error("[startup] %s", exc)
        sys.exit(1)
    uvicorn.run(app, host=HOST, port=PORT)
