# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for the SMTP bridge.

Startup failures (:class:`ConfigError`, :class:`TransportError`) abort the
process. Request failures (:class:`ValidationError`, :class:`DeliveryError`)
are contained within the request that raised them and are turned into the
``{"ok": false, "message": ...}`` envelope by the request handler.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for every error raised by the bridge."""


# --------------------------------------------------------------- startup errors
class ConfigError(BridgeError):
    """Raised when the environment does not describe a usable deployment."""

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name


class MissingVariableError(ConfigError):
    """A required environment variable is unset or blank."""

    def __init__(self, name: str):
        super().__init__(name, f"missing env var: {name}")


class InvalidValueError(ConfigError):
    """An environment variable is set but cannot be parsed."""

    def __init__(self, name: str, detail: str | None = None):
        message = f"invalid value for {name}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(name, message)


class TransportError(BridgeError):
    """Raised when the SMTP transport cannot be constructed."""


class TlsSetupError(TransportError):
    """The relay host cannot be used for a TLS-enforcing transport."""

    def __init__(self, host: str, detail: str | None = None):
        message = f"failed to create TLS SMTP transport for {host!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.host = host


# --------------------------------------------------------------- request errors
class ValidationError(BridgeError):
    """A send request was rejected before any delivery attempt.

    ``str(exc)`` is the reason returned to the HTTP caller.
    """

    reason = "invalid request"
    code = "invalid_request"

    def __init__(self, reason: str | None = None):
        super().__init__(reason or self.reason)


class MalformedBodyError(ValidationError):
    reason = "invalid request body"
    code = "malformed_body"


class EmptyTitleError(ValidationError):
    reason = "title cannot be empty"
    code = "empty_title"


class EmptyBodyError(ValidationError):
    reason = "body cannot be empty"
    code = "empty_body"


class EmptyRecipientError(ValidationError):
    reason = "to cannot be empty"
    code = "empty_recipient"


class InvalidRecipientError(ValidationError):
    reason = "invalid recipient email"
    code = "invalid_recipient"


class InvalidPayloadError(ValidationError):
    reason = "invalid email payload"
    code = "invalid_payload"


class DeliveryError(BridgeError):
    """The relay refused the message or could not be reached.

    The original exception is kept as ``__cause__`` for operator logs; the
    HTTP caller only ever sees :attr:`public_message`.
    """

    public_message = "smtp send failed"
