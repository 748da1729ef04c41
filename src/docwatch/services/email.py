"""Email service for sending transactional emails."""

import logging
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib
import httpx

from docwatch.config import settings

logger = logging.getLogger(__name__)

# Fragments of the sample SMTP config that mean "not configured yet"
SMTP_PLACEHOLDERS = ("your-provider.com", "your_smtp_user", "your_smtp_password")


class EmailBackend(ABC):
    """Abstract base class for email backends."""

    name: str = "abstract"

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """Send an email.

        Args:
            to: Recipient email address
            subject: Email subject
            html: HTML content
            text: Plain text content (optional)

        Returns:
            True if sent successfully
        """
        pass


class ConsoleEmailBackend(EmailBackend):
    """Email backend that logs to console (local fallback)."""

    name = "console"

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """Log email to console instead of sending."""
        logger.info(
            f"\n{'='*60}\n"
            f"EMAIL (console backend - not sent)\n"
            f"{'='*60}\n"
            f"To: {to}\n"
            f"Subject: {subject}\n"
            f"{'='*60}\n"
            f"{text or html}\n"
            f"{'='*60}\n"
        )
        return True


class SMTPEmailBackend(EmailBackend):
    """Email backend using SMTP."""

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
        timeout: float = 15.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.timeout = timeout

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """Send email via SMTP."""
        message = MIMEMultipart("alternative")
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject

        if text:
            message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=self.use_tls,
                timeout=self.timeout,
            )
            logger.info(f"Email sent via SMTP to {to}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email via SMTP to {to}: {e}")
            return False


class BrevoEmailBackend(EmailBackend):
    """Email backend using the Brevo transactional API."""

    name = "brevo"

    def __init__(self, api_key: str, from_address: str, from_name: str, timeout: float = 15.0):
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name
        self.timeout = timeout

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """Send email via Brevo API."""
        payload = {
            "sender": {"name": self.from_name, "email": self.from_address},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html,
        }
        if text:
            payload["textContent"] = text

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    "https://api.brevo.com/v3/smtp/email",
                    headers={"api-key": self.api_key, "Content-Type": "application/json"},
                    json=payload,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                logger.info(f"Email sent via Brevo to {to}")
                return True
            except httpx.HTTPStatusError as e:
                logger.error(f"Brevo API error: {e.response.status_code} - {e.response.text}")
                return False
            except Exception as e:
                logger.error(f"Failed to send email via Brevo to {to}: {e}")
                return False


def has_brevo_config() -> bool:
    return bool(settings.brevo_api_key.strip() and settings.email_from.strip())


def has_smtp_config() -> bool:
    """SMTP is usable when fully configured with something other than the sample values."""
    values = (settings.smtp_host, settings.smtp_username, settings.smtp_password)
    if not all(values) or not settings.smtp_port:
        return False
    return not any(p in v for p in SMTP_PLACEHOLDERS for v in values)


def resolve_backend_name() -> str:
    """Pick the concrete backend, resolving "auto" from the available credentials."""
    if settings.email_backend != "auto":
        return settings.email_backend
    if has_brevo_config():
        return "brevo"
    if has_smtp_config():
        return "smtp"
    return "console"


def get_email_backend() -> EmailBackend:
    """Get the configured email backend."""
    backend_name = resolve_backend_name()
    timeout = settings.email_send_timeout_seconds

    if backend_name == "console":
        return ConsoleEmailBackend()
    elif backend_name == "smtp":
        return SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_address=settings.email_from,
            timeout=timeout,
        )
    elif backend_name == "brevo":
        return BrevoEmailBackend(
            api_key=settings.brevo_api_key,
            from_address=settings.email_from,
            from_name=settings.email_from_name,
            timeout=timeout,
        )
    else:
        raise ValueError(f"Unknown email backend: {backend_name}")


class EmailService:
    """High-level email service for sending application emails."""

    def __init__(self, backend: EmailBackend | None = None):
        self._backend = backend

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend()
            logger.info(f"Mail mode: {self._backend.name}")
            if settings.is_production and self._backend.name == "console":
                logger.warning(
                    "No mail provider configured in production; "
                    "magic links will be written to the log instead of sent"
                )
        return self._backend

    async def send_magic_link(
        self,
        to: str,
        magic_link: str,
        expires_minutes: int | None = None,
    ) -> bool:
        """Send a magic link sign-in email.

        Args:
            to: Recipient email address
            magic_link: The full magic link URL
            expires_minutes: Link lifetime shown to the recipient

        Returns:
            True if sent successfully
        """
        minutes = expires_minutes or settings.magic_link_expiration_minutes
        product = settings.email_from_name
        subject = f"Your {product} sign-in link"

        html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2 style="margin-top: 0; color: #1a1a1a;">Sign in to {product}</h2>
    <p>Click the button below to sign in. This link can be used once and expires in {minutes} minutes.</p>

    <div style="text-align: center; margin: 30px 0;">
        <a href="{magic_link}"
           style="background: #2563eb; color: white; padding: 12px 30px; border-radius: 6px; text-decoration: none; font-weight: 500; display: inline-block;">
            Sign in
        </a>
    </div>

    <p style="color: #666; font-size: 14px;">
        If you didn't request this email, you can safely ignore it.
    </p>
    <p style="color: #666; font-size: 12px;">
        If the button doesn't work, copy and paste this link into your browser:<br>
        <a href="{magic_link}" style="color: #2563eb; word-break: break-all;">{magic_link}</a>
    </p>
</body>
</html>
"""

        text = f"""
Sign in to {product}

Use this link within {minutes} minutes. It works once.

{magic_link}

If you didn't request this email, you can safely ignore it.
"""

        return await self.backend.send(to=to, subject=subject, html=html, text=text)


# Global email service instance
email_service = EmailService()
