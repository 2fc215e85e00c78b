"""
Email Service

Sends transactional mail (password recovery) over SMTP with aiosmtplib and
renders bodies from Jinja2 templates.
"""

import os
import asyncio
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


class EmailServiceConfig:
    """Configuration for email service from environment variables."""

    def __init__(self):
        self.smtp_host = os.getenv('SMTP_HOST', '')
        self.smtp_port = int(os.getenv('SMTP_PORT', '587'))
        self.smtp_username = os.getenv('SMTP_USERNAME', '')
        self.smtp_password = os.getenv('SMTP_PASSWORD', '')
        self.smtp_use_tls = os.getenv('SMTP_USE_TLS', 'false').lower() == 'true'
        self.smtp_start_tls = os.getenv('SMTP_START_TLS', 'true').lower() == 'true'
        self.from_email = os.getenv('FROM_EMAIL', 'noreply@unify.local')
        self.from_name = os.getenv('FROM_NAME', 'Unify')
        self.template_dir = os.getenv('EMAIL_TEMPLATE_DIR', str(_DEFAULT_TEMPLATE_DIR))

    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port and self.from_email)

    def validate(self) -> List[str]:
        errors = []
        if not self.smtp_host:
            errors.append("SMTP_HOST is required")
        if not self.smtp_port or self.smtp_port <= 0:
            errors.append("SMTP_PORT must be a positive integer")
        if not self.from_email:
            errors.append("FROM_EMAIL is required")
        if self.smtp_use_tls and self.smtp_start_tls:
            errors.append("Cannot use both implicit TLS and STARTTLS")
        return errors


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(self, config: Optional[EmailServiceConfig] = None):
        self.config = config or EmailServiceConfig()
        template_path = Path(self.config.template_dir)
        if not template_path.exists():
            logger.warning("Email template directory not found: %s", template_path)
        self.template_env = Environment(
            loader=FileSystemLoader(str(template_path)),
            autoescape=select_autoescape(["html"]),
        )

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send an email via SMTP.

        Returns:
            Dict with 'success' and either 'message_id' or 'error'
        """
        if not self.config.is_configured():
            logger.info("Email service not configured; skipping mail to %s (%s)", to_email, subject)
            return {'success': False, 'error': 'Email service not configured'}

        message = MIMEMultipart('alternative')
        message['From'] = f"{self.config.from_name} <{self.config.from_email}>"
        message['To'] = to_email
        message['Subject'] = subject
        if text_content:
            message.attach(MIMEText(text_content, 'plain', 'utf-8'))
        message.attach(MIMEText(html_content, 'html', 'utf-8'))

        try:
            async with aiosmtplib.SMTP(
                hostname=self.config.smtp_host,
                port=self.config.smtp_port,
                use_tls=self.config.smtp_use_tls,
                start_tls=self.config.smtp_start_tls,
            ) as smtp:
                if self.config.smtp_username and self.config.smtp_password:
                    await smtp.login(self.config.smtp_username, self.config.smtp_password)
                await smtp.send_message(message)
        except (aiosmtplib.SMTPException, OSError) as e:
            error_msg = f"Failed to send email to {to_email}: {e}"
            logger.error(error_msg, exc_info=True)
            return {'success': False, 'error': error_msg}

        logger.info("Email sent successfully to %s: %s", to_email, subject)
        return {'success': True, 'message_id': message.get('Message-ID', '')}

    def render_template(self, template_name: str, context: Dict[str, Any]) -> Tuple[str, str]:
        """Render the ``.html`` and ``.txt`` variants of ``template_name``."""
        html_content = self.template_env.get_template(f"{template_name}.html").render(**context)
        text_content = self.template_env.get_template(f"{template_name}.txt").render(**context)
        return html_content, text_content


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


PASSWORD_RESET_SUBJECT = "Reset your password"


def send_password_reset_email(to_email: str, first_name: Optional[str], reset_link: str) -> Dict[str, Any]:
    """Render and send the password recovery mail, blocking until SMTP answers.

    Runs its own event loop, so call it from a worker thread rather than from
    a coroutine.
    """
    service = get_email_service()
    html_content, text_content = service.render_template(
        "password_reset", {"first_name": first_name, "reset_link": reset_link}
    )
    return asyncio.run(service.send_email(
        to_email=to_email,
        subject=PASSWORD_RESET_SUBJECT,
        html_content=html_content,
        text_content=text_content,
    ))
