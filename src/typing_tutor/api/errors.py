"""Exception handlers for the REST API."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 with the validation errors, minus the rejected input values.

    The body parser accepts ``Infinity`` and ``NaN``; echoing them back would
    make the response itself invalid JSON.
    """
    errors = [
        {key: value for key, value in error.items() if key != "input"}
        for error in exc.errors()
    ]
    logger.info("request_rejected", path=request.url.path, errors=len(errors))
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the API's exception handlers on ``app``."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
