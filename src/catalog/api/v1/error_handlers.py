"""
FastAPI exception handlers.

The status code and body come from the exception itself (`http_status()` and
`to_payload()` on `CatalogError`), so this module only decides how loudly to
log. Register once from the app factory with `register_exception_handlers(app)`.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog.exceptions.base import BadRequestError, CatalogError, InternalServerError, ValidationError

logger = logging.getLogger(__name__)


def _log_extra(request: Request, exc: CatalogError) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "error_code": exc.error_code,
        "error_metadata": exc.metadata,
    }


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = exc.http_status()
    if status_code >= 500:
        # the cause was already logged with its stack where it was classified
        logger.error("api.error.%s", exc.error_code.lower(), extra=_log_extra(request, exc))
    else:
        logger.info("api.error.%s", exc.error_code.lower(), extra=_log_extra(request, exc))
    return JSONResponse(status_code=status_code, content=exc.to_payload())


def _field(loc: tuple) -> str:
    return ".".join(str(p) for p in loc if p not in ("body", "query", "path")) or "body"


def _message(loc: tuple, err: dict) -> str:
    if loc == ("body",) and err.get("type") == "missing":
        return "Request body is required"
    return err.get("msg", "Invalid value")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    FastAPI's own parsing errors, rendered in the catalog's shapes: an unparsable
    or non-object body is a 400, anything else a 422 listing every error.
    """
    errors = []
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        if err.get("type") == "json_invalid":
            return await catalog_error_handler(request, BadRequestError("Malformed JSON body"))
        if loc == ("body",) and err.get("type") == "dict_type":
            return await catalog_error_handler(request, BadRequestError("Request body must be a JSON object"))
        errors.append(
            {
                "field": _field(loc),
                "message": _message(loc, err),
                "value": err.get("input") if isinstance(err.get("input"), (str, int, float, bool)) else None,
            }
        )
    return await catalog_error_handler(request, ValidationError("Validation failed", errors=errors))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api.error.unhandled", extra={"method": request.method, "path": request.url.path})
    return JSONResponse(status_code=500, content=InternalServerError().to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
