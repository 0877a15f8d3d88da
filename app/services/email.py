"""Best-effort email delivery for notifications.

Dispatchers report success as a bool and never raise: a failed delivery must
not undo the notification it belongs to.
"""

from __future__ import annotations

import logging
import smtplib
from contextlib import contextmanager
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Iterator, Protocol, runtime_checkable

from app.db.models import Notification, User

logger = logging.getLogger(__name__)


@runtime_checkable
class EmailDispatcher(Protocol):
    """Contract for notification email delivery."""

    def send(self, notification: Notification, recipient: User) -> bool:
        ...


class LoggingEmailDispatcher:
    """Logs the email instead of sending it (no SMTP configured)."""

    def send(self, notification: Notification, recipient: User) -> bool:
        logger.info(
            "Email to %s [%s]: %s",
            recipient.email,
            notification.priority.value,
            notification.title,
        )
        return True


class SmtpEmailDispatcher:
    """SMTP delivery, one connection per message."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_ssl: bool = False,
        timeout: float = 10.0,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.timeout = timeout

    @contextmanager
    def _connection(self) -> Iterator[smtplib.SMTP]:
        server: smtplib.SMTP | None = None
        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout)
            else:
                server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout)
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            yield server
        finally:
            if server is not None:
                try:
                    server.quit()
                except smtplib.SMTPException as e:
                    logger.warning("Error closing SMTP connection: %s", e)

    def _build_message(self, notification: Notification, recipient: User) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = self.sender
        msg["To"] = recipient.email
        msg["Subject"] = notification.title
        msg.attach(MIMEText(f"Hello {recipient.first_name},\n\n{notification.message}\n", "plain"))
        return msg

    def send(self, notification: Notification, recipient: User) -> bool:
        msg = self._build_message(notification, recipient)
        try:
            with self._connection() as server:
                server.sendmail(self.sender, [recipient.email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", recipient.email, e)
            return False
        logger.info("Email sent to %s: %s", recipient.email, notification.title)
        return True


__all__ = ["EmailDispatcher", "LoggingEmailDispatcher", "SmtpEmailDispatcher"]
