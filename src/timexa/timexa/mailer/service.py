from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from email.utils import make_msgid
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from ..core.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


@dataclass(frozen=True)
class MailConfig:
    host: str
    port: int = 587
    username: str = ""
    password: str = ""
    from_email: str = "Timexa Team <no-reply@timexa.app>"
    use_tls: bool = True
    timeout: int = 10
    suppress_send: bool = False

    @classmethod
    def from_dict(cls, mail_config: dict) -> "MailConfig":
        return cls(
            host=str(mail_config.get("host", "")),
            port=int(mail_config.get("port", 587)),
            username=str(mail_config.get("username", "")),
            password=str(mail_config.get("password", "")),
            from_email=str(mail_config.get("from_email") or cls.from_email),
            use_tls=bool(mail_config.get("use_tls", True)),
            timeout=int(mail_config.get("timeout", 10)),
            suppress_send=bool(mail_config.get("suppress_send", False)),
        )


@dataclass(frozen=True)
class DeliveryReceipt:
    message_id: str
    delivered: bool


class MailerService:
    """Renders HTML templates with Jinja2 and delivers them over SMTP."""

    def __init__(self, config: MailConfig, *, template_dir: Path = TEMPLATE_DIR):
        self._config = config
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
        )

    def render(self, template: str, context: dict[str, Any]) -> str:
        try:
            return self._env.get_template(f"{template}.html").render(**context)
        except TemplateError as e:
            logger.error("Failed to render template %s: %s", template, e)
            raise MailDeliveryError(f"Template rendering failed: {template}") from e

    def send(self, to: str, subject: str, template: str, context: Optional[dict[str, Any]] = None) -> DeliveryReceipt:
        ctx = {"year": datetime.now().year, **(context or {})}
        html = self.render(template, ctx)

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.from_email
        msg["To"] = to
        msg["Message-ID"] = make_msgid(domain="timexa.app")
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")

        if self._config.suppress_send:
            logger.info("Mail delivery suppressed: %r to %s", subject, to)
            return DeliveryReceipt(message_id=msg["Message-ID"], delivered=False)

        if not self._config.host:
            raise MailDeliveryError("SMTP host is not configured")

        try:
            with smtplib.SMTP(self._config.host, self._config.port, timeout=self._config.timeout) as smtp:
                smtp.ehlo()
                if self._config.use_tls:
                    smtp.starttls()
                    smtp.ehlo()
                if self._config.username:
                    smtp.login(self._config.username, self._config.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send %r to %s: %s", subject, to, e)
            raise MailDeliveryError(f"Failed to send email: {e}") from e

        logger.info("Email %r sent to %s", subject, to)
        return DeliveryReceipt(message_id=msg["Message-ID"], delivered=True)

    def send_welcome_email(self, to: str, name: str) -> DeliveryReceipt:
        return self.send(to, "Welcome to Timexa!", "welcome", {"name": name})

    def send_otp_email(self, to: str, otp: str, expires_in_minutes: int) -> DeliveryReceipt:
        return self.send(to, "Your Timexa OTP Code", "otp", {"otp": otp, "minutes": expires_in_minutes})
