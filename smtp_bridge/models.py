# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic schemas for the HTTP surface.

Models:
    - SendEmailRequest: payload of ``POST /send-email``
    - ApiResponse: envelope returned by every endpoint
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SendEmailRequest(BaseModel):
    """A single email to relay."""

    title: str = Field(description="Message subject")
    to: str = Field(description="Recipient mailbox, 'Name <addr>' or 'addr'")
    body: str = Field(description="Plain-text message body")


class ApiResponse(BaseModel):
    """Normalized response envelope."""

    ok: bool
    message: str

    @classmethod
    def success(cls, message: str) -> "ApiResponse":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "ApiResponse":
        return cls(ok=False, message=message)
