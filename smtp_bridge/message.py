# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Translate a validated send request into an :class:`EmailMessage`."""

from __future__ import annotations

from email.message import EmailMessage
from email.utils import formatdate, make_msgid

from .errors import InvalidPayloadError
from .mailbox import Mailbox


def build_message(sender: Mailbox, recipient: Mailbox, subject: str, body: str) -> EmailMessage:
    """Assemble a plain-text message.

    Raises:
        InvalidPayloadError: A header value is not representable, for
            example a subject containing CR or LF characters.
    """
    msg = EmailMessage()
    try:
        msg["From"] = sender.to_header()
        msg["To"] = recipient.to_header()
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=False, usegmt=True)
        msg["Message-ID"] = make_msgid(domain=sender.address.rpartition("@")[2])
        msg.set_content(body)
    except (ValueError, TypeError) as exc:
        raise InvalidPayloadError() from exc
    return msg
