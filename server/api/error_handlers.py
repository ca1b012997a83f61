"""Translation of BridgeError into JSON error responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.models.errors import BridgeError, MalformedIdentifier


async def handle_bridge_error(request: Request, exc: BridgeError) -> JSONResponse:
    """Respond with the status carried by the error and a {code, message} body."""
    logger = request.app.state.logging
    if isinstance(exc, MalformedIdentifier):
        logger.error("Internal consistency error on %s: %s", request.url.path, exc.message)
    elif exc.http_status >= 500:
        logger.error("Upstream failure on %s: %s", request.url.path, exc.message)
    else:
        logger.warning("Rejected request on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content={"code": exc.code, "message": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BridgeError, handle_bridge_error)
