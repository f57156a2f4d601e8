"""
SMTP delivery of digests.

Sending is best effort: a failure is logged and reported as False, never
raised into the campaign.
"""

import smtplib
import socket
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional, Protocol

from src.core.logging import get_logger
from src.notify.digest import Digest

logger = get_logger(__name__)

SMTP_TIMEOUT_SECONDS = 30
SENDER_NAME = "BMW Alert Bot"


class Notifier(Protocol):
    def send(self, digest: Digest) -> bool: ...


def parse_recipients(value: Optional[str]) -> List[str]:
    return [r.strip() for r in (value or "").split(",") if r.strip()]


class EmailNotifier:
    def __init__(self, host: str, port: int, user: Optional[str], password: Optional[str], to: Optional[str]):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.recipients = parse_recipients(to)

    @classmethod
    def from_config(cls, config) -> "EmailNotifier":
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            user=config.alert_email_user,
            password=config.alert_email_pass,
            to=config.alert_email_to,
        )

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password and self.recipients)

    def build_message(self, digest: Digest) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = f'"{SENDER_NAME}" <{self.user}>'
        msg["To"] = ", ".join(self.recipients)
        msg["Subject"] = digest.subject
        msg.attach(MIMEText(digest.body, "plain", "utf-8"))
        return msg

    def send(self, digest: Digest) -> bool:
        if not self.configured:
            logger.warning("[notify] Email not configured, digest not sent")
            return False
        try:
            server = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)
            try:
                server.starttls()
                server.login(self.user, self.password)
                server.sendmail(self.user, self.recipients, self.build_message(digest).as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, socket.error, socket.timeout, OSError) as e:
            logger.warning(f"[notify] Email failed: {e}")
            return False
        logger.info(f"[notify] Email sent: {digest.subject} ({len(self.recipients)} recipient(s))")
        return True
