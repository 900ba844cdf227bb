# collabhub/notifications/service.py
"""
Best-effort outbound email. Nothing here is allowed to fail a request:
dispatch() settles every send and only logs the failures.
"""
import asyncio
import logging
import smtplib
from email.message import EmailMessage
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, EmailStr

from collabhub.shared.artifacts import save_json
from collabhub.shared.config import settings

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    to: EmailStr
    subject: str
    text: str
    html: str


class Notifier:
    async def send(self, to: str, subject: str, text: str, html: str) -> None:
        raise NotImplementedError


class DryRunNotifier(Notifier):
    """Writes each email as a JSON draft instead of sending it."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = directory

    async def send(self, to: str, subject: str, text: str, html: str) -> None:
        draft = Notification(to=to, subject=subject, text=text, html=html).model_dump()
        path = save_json("share-email", {"status": "dry-run", **draft}, self.directory)
        logger.info("Dry-run email to %s saved at %s", to, path)


class SmtpNotifier(Notifier):
    def __init__(self, host: str, port: int, sender: str,
                 username: Optional[str] = None, password: Optional[str] = None, use_tls: bool = True):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def _send_sync(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    async def send(self, to: str, subject: str, text: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send_sync, msg)
        logger.info("Email sent to %s", to)


async def dispatch(notifier: Notifier, batch: Iterable[Notification]) -> dict:
    """Fan out independently; one slow or failing recipient never affects the others."""
    batch = list(batch)
    if not batch:
        return {"sent": 0, "failed": 0}
    results = await asyncio.gather(
        *(notifier.send(n.to, n.subject, n.text, n.html) for n in batch),
        return_exceptions=True,
    )
    failed = 0
    for n, res in zip(batch, results):
        if isinstance(res, Exception):
            failed += 1
            logger.error("Error sending email to %s: %s", n.to, res)
    return {"sent": len(batch) - failed, "failed": failed}


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    # FastAPI dep
    if settings.MAIL_MODE == "smtp":
        return SmtpNotifier(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            sender=settings.MAIL_FROM,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
        )
    return DryRunNotifier()
