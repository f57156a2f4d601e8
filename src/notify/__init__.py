"""
Digest building and email delivery.
"""

from src.notify.digest import Digest, build_digest, format_vehicle_alert, rank
from src.notify.email_sender import EmailNotifier, Notifier, parse_recipients

__all__ = [
    "Digest",
    "build_digest",
    "format_vehicle_alert",
    "rank",
    "EmailNotifier",
    "Notifier",
    "parse_recipients",
]
