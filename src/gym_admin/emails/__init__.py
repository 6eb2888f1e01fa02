"""Email rendering and delivery."""

from .mailer import GymMailer
from .sender import EmailResult, SmtpSender

__all__ = ["EmailResult", "GymMailer", "SmtpSender"]
