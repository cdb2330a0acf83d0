"""HTTP-to-SMTP bridge microservice.

This package exposes a tiny REST surface that lets internal callers send a
single email with one HTTP call. Each request is validated, turned into an
:class:`email.message.EmailMessage` and relayed through a shared SMTP
transport bound to one relay.

Example:
    Building the application from the environment::

        from smtp_bridge.config import load_settings
        from smtp_bridge.transport import build_transport
        from smtp_bridge.api import create_app

        settings = load_settings()
        transport = build_transport(settings)
        app = create_app(transport, settings.smtp_from)
"""

__version__ = "0.1.0"
