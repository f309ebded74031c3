"""Out-of-band notification channel for interview invitations.

Delivery is fire-and-forget: ``notify`` returns a success flag that callers
log, and it never raises into the interview lifecycle.
"""

from __future__ import annotations

import os
import smtplib
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import parseaddr
from typing import Any

from ..observability.logger import get_logger

logger = get_logger(__name__)


def is_valid_email(value: str | None) -> bool:
    raw = (value or "").strip()
    if not raw or "@" not in raw:
        return False
    _, addr = parseaddr(raw)
    if not addr or "@" not in addr:
        return False
    local, domain = addr.rsplit("@", 1)
    return bool(local) and "." in domain


class Notifier(ABC):
    """Delivers a payload to a candidate."""

    def notify(self, candidate_id: str, payload: dict[str, Any]) -> bool:
        try:
            self._deliver(candidate_id, payload)
        except Exception as exc:
            logger.warning(
                "notification_failed",
                channel=self.__class__.__name__,
                candidate_id=candidate_id,
                error=str(exc),
            )
            return False
        return True

    @abstractmethod
    def _deliver(self, candidate_id: str, payload: dict[str, Any]) -> None:
        """Send the payload; raise on failure."""


class LoggingNotifier(Notifier):
    """Simulated email: the invitation is written to the log only."""

    def _deliver(self, candidate_id: str, payload: dict[str, Any]) -> None:
        logger.info(
            "notification_simulated",
            candidate_id=candidate_id,
            subject=payload.get("subject"),
            to=payload.get("to"),
        )


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    use_tls: bool
    user: str
    password: str
    mail_from: str

    @staticmethod
    def from_env() -> "SmtpConfig":
        host = os.getenv("SMTP_HOST", "").strip()
        user = os.getenv("SMTP_USER", "").strip()
        password = os.getenv("SMTP_PASSWORD", "").strip()
        mail_from = os.getenv("SMTP_FROM", user).strip()
        port = int(os.getenv("SMTP_PORT", "587") or 587)
        use_tls = os.getenv("SMTP_USE_TLS", "1").strip().lower() not in ("0", "false", "no")

        if not host or not user or not password or not mail_from:
            raise ValueError("SMTP configuration is incomplete. Set SMTP_HOST/SMTP_USER/SMTP_PASSWORD/SMTP_FROM.")

        return SmtpConfig(host=host, port=port, use_tls=use_tls, user=user, password=password, mail_from=mail_from)


class SmtpNotifier(Notifier):
    """Sends the invitation as a plain-text email."""

    def __init__(self, config: SmtpConfig):
        self.config = config

    def _deliver(self, candidate_id: str, payload: dict[str, Any]) -> None:
        to_email = payload.get("to")
        if not is_valid_email(to_email):
            raise ValueError(f"Destination email is invalid for candidate {candidate_id}")

        msg = EmailMessage()
        msg["From"] = self.config.mail_from
        msg["To"] = to_email
        msg["Subject"] = payload.get("subject", "Interview invitation")
        msg.set_content(payload.get("body", ""))

        context = ssl.create_default_context()
        with smtplib.SMTP(self.config.host, self.config.port, timeout=20) as smtp:
            smtp.ehlo()
            if self.config.use_tls:
                smtp.starttls(context=context)
                smtp.ehlo()
            smtp.login(self.config.user, self.config.password)
            smtp.send_message(msg)


def get_notifier(config: dict[str, Any]) -> Notifier:
    """Build the configured notification channel (``log`` or ``smtp``)."""
    channel = config.get("notifications", {}).get("channel", "log")
    if channel == "smtp":
        return SmtpNotifier(SmtpConfig.from_env())
    return LoggingNotifier()
