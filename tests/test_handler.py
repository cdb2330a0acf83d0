"""Tests for the per-request send pipeline."""

import pytest

from smtp_bridge.errors import (
    DeliveryError,
    EmptyBodyError,
    EmptyRecipientError,
    EmptyTitleError,
    InvalidRecipientError,
)
from smtp_bridge.handler import SendEmailHandler, validate_request
from smtp_bridge.models import SendEmailRequest


class DummyTransport:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send(self, message):
        self.sent.append(message)
        if self.fail:
            raise DeliveryError("connection refused")


def make_request(**overrides):
    data = {"title": "Hi", "to": "user@example.com", "body": "hello"}
    data.update(overrides)
    return SendEmailRequest(**data)


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"title": ""}, EmptyTitleError),
        ({"title": "  \t"}, EmptyTitleError),
        ({"body": "\n"}, EmptyBodyError),
        ({"to": " "}, EmptyRecipientError),
        ({"to": "not-an-email"}, InvalidRecipientError),
        ({"to": "a@"}, InvalidRecipientError),
        # first failing check wins
        ({"title": "", "body": "", "to": ""}, EmptyTitleError),
        ({"body": "", "to": "bad"}, EmptyBodyError),
    ],
)
def test_validation_order(overrides, error):
    with pytest.raises(error):
        validate_request(make_request(**overrides))


def test_validation_returns_trimmed_recipient():
    recipient = validate_request(make_request(to="  Jane <jane@example.com>  "))
    assert recipient.address == "jane@example.com"
    assert recipient.display_name == "Jane"


@pytest.mark.asyncio
async def test_successful_send(sender):
    transport = DummyTransport()
    handler = SendEmailHandler(transport, sender)

    status, response = await handler.handle(make_request())

    assert status == 200
    assert response.model_dump() == {"ok": True, "message": "sent"}
    assert len(transport.sent) == 1
    msg = transport.sent[0]
    assert msg["From"] == "Bridge Bot <bot@example.com>"
    assert msg["To"] == "user@example.com"
    assert msg["Subject"] == "Hi"


@pytest.mark.asyncio
async def test_subject_and_body_are_not_trimmed(sender):
    transport = DummyTransport()
    handler = SendEmailHandler(transport, sender)

    await handler.handle(make_request(title="Hi ", body="  indented"))

    msg = transport.sent[0]
    assert msg.get_content().startswith("  indented")


@pytest.mark.asyncio
async def test_delivery_failure_maps_to_500(sender, caplog):
    transport = DummyTransport(fail=True)
    handler = SendEmailHandler(transport, sender)

    with caplog.at_level("ERROR", logger="smtp_bridge.handler"):
        status, response = await handler.handle(make_request())

    assert status == 500
    assert response.model_dump() == {"ok": False, "message": "smtp send failed"}
    assert len(transport.sent) == 1
    assert "user@example.com" in caplog.text
    assert "connection refused" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"title": " "}, "title cannot be empty"),
        ({"body": ""}, "body cannot be empty"),
        ({"to": ""}, "to cannot be empty"),
        ({"to": "not-an-email"}, "invalid recipient email"),
        ({"title": "Hi\r\nBcc: x@example.com"}, "invalid email payload"),
    ],
)
async def test_rejections_never_reach_transport(sender, overrides, reason):
    transport = DummyTransport()
    handler = SendEmailHandler(transport, sender)

    status, response = await handler.handle(make_request(**overrides))

    assert status == 400
    assert response.model_dump() == {"ok": False, "message": reason}
    assert transport.sent == []


@pytest.mark.asyncio
async def test_internal_recipient_is_delivered(sender):
    transport = DummyTransport()
    handler = SendEmailHandler(transport, sender)

    status, response = await handler.handle(make_request(to="Ops <ops@relay.local>"))

    assert status == 200
    assert transport.sent[0]["To"] == "Ops <ops@relay.local>"
