# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Per-request pipeline: validate, build the message, deliver.

The handler is stateless across requests. Its only collaborator with side
effects is the shared transport, injected at construction time.
"""

from __future__ import annotations

from .errors import (
    DeliveryError,
    EmptyBodyError,
    EmptyRecipientError,
    EmptyTitleError,
    InvalidRecipientError,
    ValidationError,
)
from .logger import get_logger
from .mailbox import Mailbox
from .message import build_message
from .models import ApiResponse, SendEmailRequest
from .transport import MailTransport

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_INTERNAL_SERVER_ERROR = 500


def validate_request(request: SendEmailRequest) -> Mailbox:
    """Check the request fields in order and return the parsed recipient.

    Raises:
        ValidationError: The first field that fails its check.
    """
    if not request.title.strip():
        raise EmptyTitleError()
    if not request.body.strip():
        raise EmptyBodyError()
    if not request.to.strip():
        raise EmptyRecipientError()
    try:
        return Mailbox.parse(request.to)
    except ValueError as exc:
        raise InvalidRecipientError() from exc


class SendEmailHandler:
    """Relay one :class:`SendEmailRequest` through ``transport``."""

    def __init__(self, transport: MailTransport, sender: Mailbox):
        self.transport = transport
        self.sender = sender
        self.logger = get_logger("smtp_bridge.handler")

    async def handle(self, request: SendEmailRequest) -> tuple[int, ApiResponse]:
        """Process ``request`` and return ``(http_status, response)``."""
        try:
            recipient = validate_request(request)
            message = build_message(self.sender, recipient, request.title, request.body)
        except ValidationError as exc:
            if exc.__cause__ is not None:
                self.logger.warning("Rejected send request (%s): %s", exc.code, exc.__cause__)
            return HTTP_BAD_REQUEST, ApiResponse.failure(str(exc))

        try:
            await self.transport.send(message)
        except DeliveryError as exc:
            self.logger.error("smtp send failed (to=%s): %s", recipient, exc)
            return HTTP_INTERNAL_SERVER_ERROR, ApiResponse.failure(DeliveryError.public_message)

        self.logger.info("email sent (to=%s)", recipient)
        return HTTP_OK, ApiResponse.success("sent")
