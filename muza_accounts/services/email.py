"""
Email service for sending verification codes and account notices.

WHAT: A unified interface for sending transactional emails through an
injected provider (SMTP, Resend API, or an in-memory mock).

WHY: Email is how users prove control of an address:
1. Registration - a code sent to the address being registered
2. Email change - a code sent to the new address
3. Security notice - the previous address learns the email was changed

HOW: EmailService renders templates and hands an EmailMessage to an
EmailProvider. The provider is chosen once, when the application is built,
and injected into request handlers through app.state.

Design decisions:
- Provider abstraction: SMTP in production, mock in tests
- Code emails are critical: a failed send raises EmailServiceError
- Notices are best effort: a failed send is logged and reported, never raised
- Codes are never written to logs
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage as MIMEMessage
from email.utils import formataddr
from enum import Enum
from typing import Optional, List

import aiosmtplib
import httpx

from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import EmailServiceError
from muza_accounts.core.messages import get_message
from muza_accounts.models.base import utcnow
from muza_accounts.models.verification_code import VerificationPurpose

logger = logging.getLogger(__name__)


# ============================================================================
# Email Types and Messages
# ============================================================================


class EmailType(str, Enum):
    """Types of transactional emails."""

    REGISTRATION_CODE = "registration_code"
    EMAIL_CHANGE_CODE = "email_change_code"
    EMAIL_CHANGED_NOTICE = "email_changed_notice"


PURPOSE_EMAIL_TYPES = {
    VerificationPurpose.REGISTRATION: EmailType.REGISTRATION_CODE,
    VerificationPurpose.EMAIL_CHANGE: EmailType.EMAIL_CHANGE_CODE,
}


@dataclass
class EmailMessage:
    """
    Represents an email to be sent.

    WHY: Providers receive one structured object, so the mock provider can
    record exactly what a real provider would have sent.
    """

    to_email: str
    subject: str
    html_content: str
    text_content: str
    email_type: EmailType = EmailType.REGISTRATION_CODE
    from_email: Optional[str] = None
    from_name: Optional[str] = None


@dataclass
class EmailResult:
    """Result of an email send operation."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    provider: Optional[str] = None


# ============================================================================
# Email Provider Interface
# ============================================================================


class EmailProvider(ABC):
    """
    Abstract base class for email providers.

    WHY: Provider abstraction allows switching transports by configuration
    and testing with a mock provider.
    """

    name: str = "base"

    @abstractmethod
    async def send(self, message: EmailMessage) -> EmailResult:
        """
        Send an email message.

        Implementations report transport failures in the returned
        EmailResult instead of raising.
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """True if credentials/host needed for sending are present."""


class SMTPProvider(EmailProvider):
    """
    SMTP provider backed by aiosmtplib.

    WHY: The production mailbox is a plain SMTP account. Port 465 uses
    implicit TLS, every other port upgrades with STARTTLS when TLS is on.
    """

    name = "smtp"

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        timeout: float = 30.0,
    ):
        self._host = host or settings.SMTP_HOST
        self._port = port or settings.SMTP_PORT
        self._username = username or settings.SMTP_USER
        self._password = password or settings.SMTP_PASSWORD
        self._use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self._timeout = timeout

    def is_configured(self) -> bool:
        return bool(self._host)

    def _build_mime(self, message: EmailMessage) -> MIMEMessage:
        mime = MIMEMessage()
        mime["From"] = formataddr(
            (
                message.from_name or settings.EMAIL_FROM_NAME,
                message.from_email or settings.EMAIL_FROM,
            )
        )
        mime["To"] = message.to_email
        mime["Subject"] = message.subject
        mime.set_content(message.text_content)
        mime.add_alternative(message.html_content, subtype="html")
        return mime

    async def send(self, message: EmailMessage) -> EmailResult:
        if not self.is_configured():
            return EmailResult(
                success=False,
                error="SMTP host not configured",
                provider=self.name,
            )

        implicit_tls = self._use_tls and self._port == 465
        try:
            await aiosmtplib.send(
                self._build_mime(message),
                hostname=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                use_tls=implicit_tls,
                start_tls=self._use_tls and not implicit_tls,
                timeout=self._timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP send error: {e}")
            return EmailResult(success=False, error=str(e), provider=self.name)

        return EmailResult(success=True, provider=self.name)


class ResendProvider(EmailProvider):
    """Resend HTTP API provider."""

    name = "resend"

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key or settings.RESEND_API_KEY

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def send(self, message: EmailMessage) -> EmailResult:
        """
        Send email via Resend API.

        HOW: Uses httpx for async HTTP requests to Resend API.
        """
        if not self.is_configured():
            return EmailResult(
                success=False,
                error="Resend API key not configured",
                provider=self.name,
            )

        sender = formataddr(
            (
                message.from_name or settings.EMAIL_FROM_NAME,
                message.from_email or settings.EMAIL_FROM,
            )
        )

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    "https://api.resend.com/emails",
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": sender,
                        "to": [message.to_email],
                        "subject": message.subject,
                        "html": message.html_content,
                        "text": message.text_content,
                    },
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logger.error(f"Resend send error: {e}")
            return EmailResult(success=False, error=str(e), provider=self.name)

        if response.status_code in (200, 201):
            return EmailResult(
                success=True,
                message_id=response.json().get("id"),
                provider=self.name,
            )

        return EmailResult(
            success=False,
            error=f"Resend API error: {response.status_code} - {response.text}",
            provider=self.name,
        )


class MockEmailProvider(EmailProvider):
    """
    Mock email provider for testing and development.

    WHY: Allows exercising email flows without sending real emails. Sent
    messages are kept on the instance so tests can read the code back.
    """

    name = "mock"

    def __init__(self, fail: bool = False):
        self.sent_emails: List[EmailMessage] = []
        self.fail = fail

    def is_configured(self) -> bool:
        return True

    async def send(self, message: EmailMessage) -> EmailResult:
        if self.fail:
            return EmailResult(success=False, error="Mock delivery failure", provider=self.name)

        logger.info(
            f"[MOCK EMAIL] To: {message.to_email}, "
            f"Subject: {message.subject}, "
            f"Type: {message.email_type.value}"
        )
        self.sent_emails.append(message)

        return EmailResult(
            success=True,
            message_id=f"mock-{utcnow().timestamp()}",
            provider=self.name,
        )

    def clear_sent_emails(self) -> None:
        self.sent_emails = []


# ============================================================================
# Email Templates
# ============================================================================


class EmailTemplates:
    """
    Email templates for the code and notice emails.

    WHY: Every email ships an HTML body and a plaintext alternative; both
    carry the same facts (code, validity window).
    """

    @staticmethod
    def _base_template(content: str, title: str = "") -> str:
        """Base HTML template wrapper."""
        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
            <title>{title}</title>
            <style>
                body {{
                    font-family: Arial, sans-serif;
                    line-height: 1.6;
                    color: #333;
                    margin: 0;
                    padding: 0;
                    background-color: #f5f5f5;
                }}
                .container {{
                    max-width: 600px;
                    margin: 40px auto;
                    background-color: #ffffff;
                    border-radius: 8px;
                    overflow: hidden;
                }}
                .header {{
                    background-color: #7c3aed;
                    color: white;
                    padding: 24px;
                    text-align: center;
                }}
                .content {{
                    padding: 32px;
                }}
                .code {{
                    background-color: #f3f4f6;
                    padding: 16px;
                    border-radius: 6px;
                    font-family: monospace;
                    font-size: 28px;
                    letter-spacing: 6px;
                    text-align: center;
                    margin: 16px 0;
                }}
                .footer {{
                    background-color: #f9fafb;
                    padding: 16px 32px;
                    text-align: center;
                    font-size: 14px;
                    color: #6b7280;
                }}
            </style>
        </head>
        <body>
            <div class="container">
                <div class="header">
                    <h1>Muza Life</h1>
                </div>
                <div class="content">
                    {content}
                </div>
                <div class="footer">
                    <p>&copy; {utcnow().year} Muza Life</p>
                </div>
            </div>
        </body>
        </html>
        """

    @classmethod
    def verification_code_email(
        cls,
        code: str,
        purpose: VerificationPurpose,
        ttl_minutes: Optional[int] = None,
    ) -> tuple[str, str, str]:
        """
        Generate a code email for registration or email change.

        Returns:
            Tuple of (subject, html_content, text_content)
        """
        minutes = ttl_minutes or settings.VERIFICATION_CODE_TTL_MINUTES
        subject = get_message(f"subject_{purpose.value}")
        intro = get_message(f"email_code_intro_{purpose.value}")
        validity = get_message("email_code_validity", minutes=minutes)
        ignore = get_message("email_code_ignore")

        content = f"""
        <p>{intro}</p>
        <div class="code">{code}</div>
        <p><strong>{validity}</strong></p>
        <p>{ignore}</p>
        """

        html_content = cls._base_template(content, title=subject)
        text_content = f"{intro}\n\n{code}\n\n{validity}\n\n{ignore}\n"

        return subject, html_content, text_content

    @classmethod
    def email_changed_notice(cls, new_email: str) -> tuple[str, str, str]:
        """Notice for the previous address after an email change."""
        subject = get_message("subject_email_changed_notice")
        notice = get_message("email_changed_notice", new_email=new_email)
        warning = get_message("email_changed_warning")

        content = f"""
        <p>{notice}</p>
        <p style="color: #dc2626;"><strong>{warning}</strong></p>
        """

        html_content = cls._base_template(content, title=subject)
        text_content = f"{notice}\n\n{warning}\n"

        return subject, html_content, text_content


# ============================================================================
# Email Service
# ============================================================================


def default_provider() -> EmailProvider:
    """
    Pick a provider from settings: SMTP, then Resend, then the mock.

    WHY: Local development runs without mail credentials; the mock provider
    logs instead of failing every registration.
    """
    if settings.smtp_enabled:
        return SMTPProvider()
    if settings.RESEND_API_KEY:
        return ResendProvider()
    logger.warning("No email provider configured, using mock provider")
    return MockEmailProvider()


class EmailService:
    """
    High-level email service for verification codes and notices.

    HOW: Built once per application with a provider; request handlers get
    it through the get_email_service dependency.
    """

    def __init__(self, provider: Optional[EmailProvider] = None):
        self._provider = provider or default_provider()

    @property
    def provider(self) -> EmailProvider:
        return self._provider

    async def send_email(self, message: EmailMessage) -> EmailResult:
        """
        Send an email message through the provider and log the outcome.

        Returns:
            EmailResult with send status
        """
        logger.info(
            f"Sending {message.email_type.value} email to {message.to_email}",
            extra={
                "email_type": message.email_type.value,
                "to": message.to_email,
            },
        )

        result = await self._provider.send(message)

        if result.success:
            logger.info(
                f"Email sent successfully: {result.message_id}",
                extra={
                    "message_id": result.message_id,
                    "provider": result.provider,
                },
            )
        else:
            logger.error(
                f"Email send failed: {result.error}",
                extra={
                    "email_type": message.email_type.value,
                    "to": message.to_email,
                    "error": result.error,
                },
            )

        return result

    async def send_verification_code(
        self,
        to_email: str,
        code: str,
        purpose: VerificationPurpose,
    ) -> EmailResult:
        """
        Send a verification code email.

        Raises:
            EmailServiceError: If the provider could not deliver the email
        """
        subject, html_content, text_content = EmailTemplates.verification_code_email(
            code, purpose
        )

        message = EmailMessage(
            to_email=to_email,
            subject=subject,
            html_content=html_content,
            text_content=text_content,
            email_type=PURPOSE_EMAIL_TYPES[purpose],
        )

        result = await self.send_email(message)
        if not result.success:
            raise EmailServiceError(
                message=get_message("email_send_failed"),
                provider=result.provider,
                reason=result.error,
            )
        return result

    async def send_email_changed_notice(self, old_email: str, new_email: str) -> EmailResult:
        """
        Tell the previous address that the account email changed.

        WHY: Best effort. The change is already applied, so delivery
        failures are logged by send_email and returned, never raised.
        """
        subject, html_content, text_content = EmailTemplates.email_changed_notice(new_email)

        message = EmailMessage(
            to_email=old_email,
            subject=subject,
            html_content=html_content,
            text_content=text_content,
            email_type=EmailType.EMAIL_CHANGED_NOTICE,
        )

        return await self.send_email(message)
