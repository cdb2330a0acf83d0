import pytest
from fastapi.testclient import TestClient

from smtp_bridge.api import create_app
from smtp_bridge.errors import DeliveryError


class DummyTransport:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send(self, message):
        if self.fail:
            raise DeliveryError("relay said no")
        self.sent.append(message)


@pytest.fixture
def transport():
    return DummyTransport()


@pytest.fixture
def client(transport, sender):
    return TestClient(create_app(transport, sender))


VALID = {"title": "Hi", "to": "user@example.com", "body": "hello"}


def test_healthz(client, transport):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "ok"}
    assert transport.sent == []


def test_healthz_ignores_transport_state(sender):
    client = TestClient(create_app(DummyTransport(fail=True), sender))
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "ok"}


def test_send_email_success(client, transport):
    response = client.post("/send-email", json=VALID)
    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "sent"}
    assert len(transport.sent) == 1
    assert transport.sent[0]["To"] == "user@example.com"


def test_send_email_transport_failure(sender):
    client = TestClient(create_app(DummyTransport(fail=True), sender))
    response = client.post("/send-email", json=VALID)
    assert response.status_code == 500
    assert response.json() == {"ok": False, "message": "smtp send failed"}


@pytest.mark.parametrize(
    "field, value, reason",
    [
        ("title", "", "title cannot be empty"),
        ("title", "   ", "title cannot be empty"),
        ("body", "", "body cannot be empty"),
        ("body", " \n ", "body cannot be empty"),
        ("to", "", "to cannot be empty"),
        ("to", "   ", "to cannot be empty"),
        ("to", "not-an-email", "invalid recipient email"),
        ("to", "a@", "invalid recipient email"),
    ],
)
def test_send_email_validation(client, transport, field, value, reason):
    payload = dict(VALID, **{field: value})
    response = client.post("/send-email", json=payload)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "message": reason}
    assert transport.sent == []


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "Hi", "to": "user@example.com"},
        {"title": 1, "to": "user@example.com", "body": "hello"},
        ["not", "an", "object"],
        {},
    ],
)
def test_send_email_malformed_body(client, transport, payload):
    response = client.post("/send-email", json=payload)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "message": "invalid request body"}
    assert transport.sent == []


def test_send_email_invalid_json(client, transport):
    response = client.post(
        "/send-email",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"ok": False, "message": "invalid request body"}


def test_send_email_header_injection(client, transport):
    payload = dict(VALID, title="Hi\nBcc: other@example.com")
    response = client.post("/send-email", json=payload)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "message": "invalid email payload"}
    assert transport.sent == []


def test_apps_do_not_share_handlers(sender):
    first, second = DummyTransport(), DummyTransport()
    TestClient(create_app(first, sender)).post("/send-email", json=VALID)
    assert len(first.sent) == 1
    assert second.sent == []
