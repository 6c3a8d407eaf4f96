import logging
import uuid
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .api import router
from .errors import AccountBlocked, AccountNotFound, InsufficientFunds, InvalidArgument, TransactionError
from .logger_config import setup_logging
from .store import AccountStore, seed_if_empty

# ---- logging ----
setup_logging()
log = logging.getLogger("app")

# ---- status -> code mapping ----
STATUS_TO_CODE = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "UNPROCESSABLE_ENTITY",
}
def code_for(status: int) -> str:
    return STATUS_TO_CODE.get(status, f"HTTP_{status}")

def error_response(status: int, message: str, code: str | None = None, values: list[str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": {"code": code or code_for(status), "message": message, "values": values or []}},
    )

# ---- middleware ----
JSON_BODY_PATHS = {"/account"}

class EnforceJSONMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.method in {"POST", "PUT", "PATCH"} and request.url.path.rstrip("/") in JSON_BODY_PATHS:
            ct = request.headers.get("content-type", "").split(";")[0].strip().lower()
            if ct != "application/json":
                log.warning("Unsupported media type: %s %s", request.method, request.url.path)
                return error_response(415, "Content-Type must be application/json")
        return await call_next(request)

class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

# ---- lifespan ----
@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.getenv("LEDGER_SEED") == "1":
        seed_if_empty(app.state.store)
    log.info("Ledger API started accounts=%d", len(app.state.store))
    try:
        yield
    finally:
        log.info("Ledger API stopped")

def create_app(store: AccountStore | None = None) -> FastAPI:
    app = FastAPI(title="Ledger", lifespan=lifespan)
    app.state.store = store if store is not None else AccountStore()

    # middleware
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(EnforceJSONMiddleware)

    # ledger errors
    @app.exception_handler(AccountNotFound)
    async def account_not_found_handler(request: Request, exc: AccountNotFound):
        log.info("%s %s -> 404 account not found id=%s", request.method, request.url.path, exc.account_id)
        return error_response(404, str(exc), "ACCOUNT_NOT_FOUND", [exc.account_id])

    @app.exception_handler(AccountBlocked)
    async def account_blocked_handler(request: Request, exc: AccountBlocked):
        log.info("%s %s -> 403 account blocked id=%s", request.method, request.url.path, exc.account_id)
        return error_response(403, str(exc), "ACCOUNT_IS_BLOCKED", [exc.account_id])

    @app.exception_handler(InsufficientFunds)
    async def insufficient_funds_handler(request: Request, exc: InsufficientFunds):
        log.info("%s %s -> 400 insufficient funds", request.method, request.url.path)
        return error_response(
            400, "insufficient funds", "NOT_ENOUGH_FUNDS",
            [str(exc.amount_requested), str(exc.amount_available)],
        )

    @app.exception_handler(InvalidArgument)
    async def invalid_argument_handler(request: Request, exc: InvalidArgument):
        log.warning("%s %s -> 400 invalid param %s", request.method, request.url.path, exc.param_name)
        return error_response(400, str(exc), "INVALID_PARAM", [exc.param_name])

    @app.exception_handler(TransactionError)
    async def transaction_error_handler(request: Request, exc: TransactionError):
        log.error("%s %s -> 500 transaction failed: %s", request.method, request.url.path, exc)
        return error_response(500, "transaction failed", "UNKNOWN")

    # framework errors
    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        msg = "Invalid request."
        errors = exc.errors()
        if errors:
            err = errors[0]
            loc = ".".join(str(x) for x in err.get("loc", []))
            detail = err.get("msg", "")
            msg = f"{loc}: {detail}" if loc else (detail or msg)
        log.warning("422 validation: %s %s -> %s", request.method, request.url.path, msg)
        return error_response(422, msg)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else code_for(exc.status_code).replace("_", " ").title()
        log.warning("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, detail)
        return error_response(exc.status_code, str(detail))

    # routers
    app.include_router(router)
    return app

app = create_app()
