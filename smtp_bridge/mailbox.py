# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mailbox parsing: ``Display Name <local@domain>`` or a bare address.

Addresses are checked for syntax only with ``email-validator``: no DNS
lookup and no public-deliverability policy, so dotless hosts and private
names such as ``relay.local`` are accepted for internal relays.
"""

from __future__ import annotations

from dataclasses import dataclass
from email.headerregistry import Address

import email_validator
from email_validator import EmailNotValidError

# Private relay names (localhost, *.local, *.test, ...) are valid mailbox domains.
email_validator.SPECIAL_USE_DOMAIN_NAMES.clear()


@dataclass(frozen=True)
class Mailbox:
    """A validated ``(display name, address)`` pair."""

    address: str
    display_name: str | None = None

    @classmethod
    def parse(cls, raw: str) -> "Mailbox":
        """Parse ``raw`` into a :class:`Mailbox`.

        Raises:
            ValueError: If ``raw`` is not a syntactically valid mailbox.
        """
        value = raw.strip()
        if not value:
            raise ValueError("empty mailbox")
        try:
            parsed = email_validator.validate_email(
                value,
                allow_display_name=True,
                check_deliverability=False,
                globally_deliverable=False,
            )
        except EmailNotValidError as exc:
            raise ValueError(f"invalid mailbox {value!r}: {exc}") from exc
        display_name = (parsed.display_name or "").strip() or None
        return cls(address=parsed.normalized, display_name=display_name)

    def to_header(self) -> Address:
        """Return an :class:`email.headerregistry.Address` for message headers."""
        return Address(display_name=self.display_name or "", addr_spec=self.address)

    def __str__(self) -> str:
        if self.display_name:
            return f"{self.display_name} <{self.address}>"
        return self.address
