from __future__ import annotations

from ..config import EmailConfig
from . import templates
from .sender import EmailResult, SmtpSender


class GymMailer:
    """Owner-facing notifications: renders a template and hands it to the sender."""

    def __init__(self, config: EmailConfig, sender: SmtpSender | None = None) -> None:
        self._app_name = config.app_name
        self._sender = sender or SmtpSender(config)

    def send_welcome(self, gym_name: str, owner_email: str, formatted_gym_id: str) -> EmailResult:
        subject, html = templates.welcome_email(gym_name, formatted_gym_id, self._app_name)
        return self._sender.send(owner_email, subject, html)

    def send_rejection(self, gym_name: str, email: str) -> EmailResult:
        subject, html = templates.rejection_email(gym_name, self._app_name)
        return self._sender.send(email, subject, html)

    def send_status_change(
        self, gym_name: str, owner_email: str, formatted_gym_id: str, status: str
    ) -> EmailResult:
        subject, html = templates.status_change_email(
            gym_name, formatted_gym_id, status, self._app_name
        )
        return self._sender.send(owner_email, subject, html)

    def send_promotional(
        self, gym_name: str, owner_email: str, subject: str, body: str
    ) -> EmailResult:
        subject, html = templates.promotional_email(gym_name, subject, body, self._app_name)
        return self._sender.send(owner_email, subject, html)
