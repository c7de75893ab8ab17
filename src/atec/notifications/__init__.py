"""
Outbound notifications.
"""

from .mailer import BrevoMailer, MailError

__all__ = ["BrevoMailer", "MailError"]
