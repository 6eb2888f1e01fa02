from __future__ import annotations

import logging
import re
import smtplib
from dataclasses import dataclass
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from ..config import EmailConfig
from ..logging_utils import log_extra

_TAG_RE = re.compile(r"<[^>]+>")
_STYLE_RE = re.compile(r"<(style|head)[^>]*>.*?</\1>", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class EmailResult:
    success: bool
    error: str | None = None


def single_line(value: str) -> str:
    """Collapse line breaks so the value stays inside one header."""
    return " ".join(value.splitlines()).strip()


def html_to_text(html: str) -> str:
    text = _TAG_RE.sub(" ", _STYLE_RE.sub("", html))
    return "\n".join(" ".join(line.split()) for line in text.splitlines() if line.strip())


class SmtpSender:
    def __init__(self, config: EmailConfig) -> None:
        self._config = config
        self._log = logging.getLogger(__name__)

    def _from_header(self) -> str:
        address = self._config.from_address or self._config.smtp_user or "noreply@example.com"
        if self._config.from_name:
            return formataddr((self._config.from_name, address))
        return address

    def send(self, to: str, subject: str, html: str, text: str | None = None) -> EmailResult:
        if not to:
            return EmailResult(False, "Recipient address is empty")

        if not self._config.smtp_configured:
            # Development mode: nothing is delivered.
            self._log.info(
                "SMTP not configured, email not sent",
                extra=log_extra(recipient=to, subject=subject),
            )
            return EmailResult(True)

        try:
            message = MIMEMultipart("alternative")
            message["Subject"] = single_line(subject)
            message["From"] = self._from_header()
            message["To"] = single_line(to)
            message.attach(MIMEText(text or html_to_text(html), "plain"))
            message.attach(MIMEText(html, "html"))

            with smtplib.SMTP(self._config.smtp_host, self._config.smtp_port) as server:
                server.starttls()
                server.login(self._config.smtp_user, self._config.smtp_password)
                server.send_message(message)
        except (smtplib.SMTPException, MessageError, OSError) as exc:
            self._log.warning(
                "Email send failed",
                extra=log_extra(recipient=to, subject=subject, error_message=str(exc)),
            )
            return EmailResult(False, str(exc))

        self._log.info("Email sent", extra=log_extra(recipient=to, subject=subject))
        return EmailResult(True)
