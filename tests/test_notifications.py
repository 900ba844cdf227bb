import asyncio
import json

from collabhub.notifications import service as notifications
from collabhub.notifications.service import DryRunNotifier, SmtpNotifier


def test_dry_run_writes_a_draft(tmp_path):
    n = DryRunNotifier(directory=tmp_path)
    asyncio.run(n.send("b@example.com", "Files Shared with You", "hello", "<p>hello</p>"))
    drafts = list(tmp_path.glob("share-email-*.json"))
    assert len(drafts) == 1
    saved = json.loads(drafts[0].read_text(encoding="utf-8"))
    assert saved["status"] == "dry-run"
    assert saved["to"] == "b@example.com"
    assert saved["html"] == "<p>hello</p>"


class _FakeSMTP:
    outbox = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.calls = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))

    def send_message(self, msg):
        _FakeSMTP.outbox.append((self.calls, msg))


def test_smtp_sends_multipart(monkeypatch):
    _FakeSMTP.outbox = []
    monkeypatch.setattr(notifications.smtplib, "SMTP", _FakeSMTP)
    n = SmtpNotifier("mail.example.com", 587, "no-reply@example.com", username="u", password="p")
    asyncio.run(n.send("b@example.com", "Subject", "plain body", "<b>html body</b>"))

    calls, msg = _FakeSMTP.outbox[0]
    assert calls == ["starttls", ("login", "u")]
    assert msg["To"] == "b@example.com"
    assert msg["From"] == "no-reply@example.com"
    assert msg.is_multipart()
    assert "html body" in msg.get_body(preferencelist=("html",)).get_content()
