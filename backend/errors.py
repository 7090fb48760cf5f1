"""Custom exceptions and centralized FastAPI error handlers."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "/health",
    "/api/datasets",
    "/api/dataset/:id",
    "/api/datastore/:resource_id",
    "/api/saude/medicamentos",
    "/api/mobilidade/acidentes",
    "/api/financeiro/receitas",
    "/api/financeiro/despesas",
    "/api/empresas/cadastro",
    "/api/156/demandas",
    "/api/search",
]


class ProxyError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class ClientInputError(ProxyError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class UpstreamError(ProxyError):
    """Upstream fetch failed after exhausting every retry."""

    def __init__(self, details: str, url: str | None = None):
        super().__init__("Error accessing upstream API", status_code=500)
        self.details = details
        self.url = url


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(_request: Request, exc: UpstreamError):
        return JSONResponse({"error": str(exc), "details": exc.details}, status_code=exc.status_code)

    @app.exception_handler(ProxyError)
    async def handle_proxy_error(_request: Request, exc: ProxyError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse({"error": f"Invalid parameters: {problems}"}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                {"error": "Endpoint not found", "availableEndpoints": AVAILABLE_ENDPOINTS},
                status_code=404,
            )
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error", "timestamp": _now()},
            status_code=500,
        )
