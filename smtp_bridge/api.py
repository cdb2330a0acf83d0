"""FastAPI application factory for the SMTP bridge.

The application exposes two endpoints:

- ``GET /healthz``: liveness check, never touches the SMTP relay
- ``POST /send-email``: validate a ``{title, to, body}`` payload and relay it

Every response uses the ``{"ok": bool, "message": str}`` envelope. The
request handler (and through it the shared transport) is stored on
``app.state`` and resolved per request with a dependency, so several
applications with different transports can live in one process.

Example:
    Creating and running the API application::

        from smtp_bridge.api import create_app

        app = create_app(transport, sender)
        uvicorn.run(app, host="127.0.0.1", port=8080)
"""

from typing import AsyncContextManager, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import MalformedBodyError
from .handler import HTTP_BAD_REQUEST, SendEmailHandler
from .logger import get_logger
from .mailbox import Mailbox
from .models import ApiResponse, SendEmailRequest
from .transport import MailTransport

logger = get_logger("smtp_bridge.api")


def get_handler(request: Request) -> SendEmailHandler:
    """Return the handler bound to the application serving ``request``."""
    return request.app.state.handler


def create_app(
    transport: MailTransport,
    sender: Mailbox,
    lifespan: Callable[[FastAPI], AsyncContextManager] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    transport:
        Shared transport used for every delivery.
    sender:
        Mailbox placed in the ``From`` header of every message.
    lifespan:
        Optional lifespan context manager for startup/shutdown events.

    Returns
    -------
    FastAPI
        A configured application ready to be served by Uvicorn or any ASGI
        server.
    """
    api = FastAPI(title="SMTP Bridge", lifespan=lifespan)
    api.state.handler = SendEmailHandler(transport, sender)

    @api.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Turn payload shape errors into the normalized 400 envelope."""
        logger.warning(f"Malformed request on {request.method} {request.url.path}: {exc.errors()}")
        body = ApiResponse.failure(str(MalformedBodyError()))
        return JSONResponse(status_code=HTTP_BAD_REQUEST, content=body.model_dump())

    @api.get("/healthz", response_model=ApiResponse)
    async def healthz():
        """Health check endpoint for container monitoring."""
        return ApiResponse.success("ok")

    @api.post("/send-email", response_model=ApiResponse)
    async def send_email(payload: SendEmailRequest, handler: SendEmailHandler = Depends(get_handler)):
        """Relay one email through the configured SMTP transport."""
        status_code, response = await handler.handle(payload)
        return JSONResponse(status_code=status_code, content=response.model_dump())

    return api
