# marketpay/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from marketpay.domain.errors import MarketplaceError
from marketpay.utils.logging import get_logger

logger = get_logger(__name__)


def _field_names(exc: RequestValidationError) -> list[str]:
    names = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "header")]
        if loc:
            names.append(".".join(loc))
    return names


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}", status=exc.http_status)
    return JSONResponse(status_code=exc.http_status, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = _field_names(exc)
    message = f"Missing or invalid fields: {', '.join(fields)}" if fields else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
