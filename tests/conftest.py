import pytest

from smtp_bridge.mailbox import Mailbox

BASE_ENV = {
    "SMTP_HOST": "smtp.example.com",
    "SMTP_USERNAME": "mailer",
    "SMTP_PASSWORD": "secret",
    "SMTP_FROM": "Bridge Bot <bot@example.com>",
}


@pytest.fixture
def base_env():
    return dict(BASE_ENV)


@pytest.fixture
def sender():
    return Mailbox.parse("Bridge Bot <bot@example.com>")
