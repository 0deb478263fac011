"""Run notification mail."""

from __future__ import annotations

import getpass
import smtplib
import socket
from email.message import EmailMessage
from typing import List

from .config import get_settings

# Messages "sent" while BIOPIPE_ENV=test.
deliveries: List[EmailMessage] = []


def send(to: str, subject: str, body: str) -> EmailMessage:
    """Send one message; in the test environment it is only recorded."""
    settings = get_settings()

    message = EmailMessage()
    message["From"] = settings.mail_from or f"{getpass.getuser()}@{socket.gethostname()}"
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    if settings.is_test:
        deliveries.append(message)
        return message

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as smtp:
        smtp.send_message(message)
    return message


__all__ = ["deliveries", "send"]
