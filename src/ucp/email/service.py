"""
Outgoing email: rendered messages and the providers that deliver them.

A template renders to an ``OutgoingEmail``; the configured provider
(SMTP by default, or the Resend HTTP API) delivers it and reports success
as a bool. Delivery errors are logged here and never raised.
"""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib
import httpx
import structlog

from ucp.config import Settings, get_settings
from ucp.email.templates import (
    character_accepted,
    character_rejected,
    confirm_account,
    password_reset,
)

logger = structlog.get_logger()

RESEND_ENDPOINT = "https://api.resend.com/emails"
SMTPS_PORT = 465
SEND_TIMEOUT_SECONDS = 10.0

_TEMPLATE_REGISTRY: dict[str, Callable[..., tuple[str, str, str]]] = {
    "confirm_account": confirm_account,
    "password_reset": password_reset,
    "character_accepted": character_accepted,
    "character_rejected": character_rejected,
}


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html: str
    text: str


class BaseEmailProvider(ABC):
    """Delivers one rendered email. Returns False instead of raising."""

    name = "base"

    def __init__(self, from_address: str, from_name: str) -> None:
        self.from_address = from_address
        self.from_name = from_name

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_address}>"

    @abstractmethod
    async def deliver(self, message: OutgoingEmail) -> bool: ...


class SMTPProvider(BaseEmailProvider):
    """aiosmtplib delivery. Port 465 speaks TLS from the start, other ports upgrade with STARTTLS."""

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        from_address: str,
        from_name: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
    ) -> None:
        super().__init__(from_address, from_name)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls

    @classmethod
    def from_settings(cls, settings: Settings) -> SMTPProvider:
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_address=settings.email_from_address,
            from_name=settings.email_from_name,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )

    def _mime(self, message: OutgoingEmail) -> EmailMessage:
        mime = EmailMessage()
        mime["From"] = self.sender
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.set_content(message.text)
        mime.add_alternative(message.html, subtype="html")
        return mime

    async def deliver(self, message: OutgoingEmail) -> bool:
        implicit_tls = self.use_tls and self.port == SMTPS_PORT
        try:
            await aiosmtplib.send(
                self._mime(message),
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=implicit_tls,
                start_tls=self.use_tls and not implicit_tls,
                tls_context=ssl.create_default_context() if self.use_tls else None,
                timeout=SEND_TIMEOUT_SECONDS,
            )
        except (aiosmtplib.SMTPException, OSError):
            logger.exception("email_send_failed", to=message.to, provider=self.name)
            return False
        return True


class ResendProvider(BaseEmailProvider):
    """Delivery through the Resend HTTP API."""

    name = "resend"

    def __init__(self, api_key: str, from_address: str, from_name: str) -> None:
        super().__init__(from_address, from_name)
        self.api_key = api_key

    @classmethod
    def from_settings(cls, settings: Settings) -> ResendProvider:
        return cls(settings.resend_api_key, settings.email_from_address, settings.email_from_name)

    async def deliver(self, message: OutgoingEmail) -> bool:
        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        try:
            async with httpx.AsyncClient(timeout=SEND_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    RESEND_ENDPOINT,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("email_send_failed", to=message.to, provider=self.name)
            return False
        return True


_PROVIDERS: dict[str, Callable[[Settings], BaseEmailProvider]] = {
    SMTPProvider.name: SMTPProvider.from_settings,
    ResendProvider.name: ResendProvider.from_settings,
}


def provider_from_settings(settings: Settings) -> BaseEmailProvider:
    """Build the provider named by ``settings.email_provider``."""
    factory = _PROVIDERS.get(settings.email_provider.lower())
    if factory is None:
        msg = f"Unsupported email provider: {settings.email_provider}"
        raise ValueError(msg)
    return factory(settings)


def render(template_name: str, to: str, **context: str) -> OutgoingEmail:
    """
    Render a registered template for ``to``.

    Raises:
        ValueError: If the template name is unknown.
    """
    template = _TEMPLATE_REGISTRY.get(template_name)
    if template is None:
        msg = f"Unknown template: {template_name}"
        raise ValueError(msg)
    subject, html, text = template(**context)
    return OutgoingEmail(to=to, subject=subject, html=html, text=text)


class EmailService:
    """Renders templates and hands them to one provider."""

    def __init__(self, provider: BaseEmailProvider | None = None) -> None:
        self.provider = provider or provider_from_settings(get_settings())

    async def send(self, message: OutgoingEmail) -> bool:
        sent = await self.provider.deliver(message)
        if sent:
            logger.info("email_sent", to=message.to, subject=message.subject, provider=self.provider.name)
        return sent

    async def send_template(self, to: str, template_name: str, **context: str) -> bool:
        """Render ``template_name`` with ``context`` and send it to ``to``."""
        return await self.send(render(template_name, to, **context))


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get or create the email service singleton."""
    global _email_service  # noqa: PLW0603
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


def reset_email_service() -> None:
    """Reset the email service singleton (for testing)."""
    global _email_service  # noqa: PLW0603
    _email_service = None
