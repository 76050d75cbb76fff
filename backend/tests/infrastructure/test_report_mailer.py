"""Report mailer - message building and delivery outcomes without a real SMTP server.

Invariants:
    - Disabled or recipient-less mailers never open a connection
    - SMTP failures are reported as False, not raised
"""

import smtplib

import pytest

from sis.config import Settings
from sis.infrastructure.report_mailer import ReportMailer


def _mailer(**overrides):
    values = {
        "email_report_notification_enabled": True,
        "report_recipients": ["principal@school.test", "office@school.test"],
        "smtp_sender": "reports@school.test",
    }
    values.update(overrides)
    return ReportMailer(Settings(**values))


class _RecordingSMTP:
    sent = []

    def __init__(self, host, port, timeout):
        self.address = (host, port)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def send_message(self, msg):
        self.sent.append(msg)


@pytest.fixture
def smtp(monkeypatch):
    _RecordingSMTP.sent = []
    monkeypatch.setattr(smtplib, "SMTP", _RecordingSMTP)
    return _RecordingSMTP


def test_build_message_attaches_report():
    msg = _mailer().build_message(
        "Daily report", "Attached.", b"a,b\n", "daily.csv", "text/csv",
    )
    assert msg["To"] == "principal@school.test, office@school.test"
    assert msg["From"] == "reports@school.test"
    [attachment] = list(msg.iter_attachments())
    assert attachment.get_filename() == "daily.csv"
    assert attachment.get_content_type() == "text/csv"


def test_send_delivers_one_message(smtp):
    assert _mailer().send_report("S", "B", b"x", "r.pdf", "application/pdf") is True
    assert len(smtp.sent) == 1


def test_disabled_mailer_does_not_send(smtp):
    mailer = _mailer(email_report_notification_enabled=False)
    assert mailer.send_report("S", "B", b"x", "r.pdf", "application/pdf") is False
    assert smtp.sent == []


def test_no_recipients_does_not_send(smtp):
    assert _mailer(report_recipients=[]).send_report(
        "S", "B", b"x", "r.pdf", "application/pdf",
    ) is False
    assert smtp.sent == []


def test_smtp_failure_returns_false(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("no server")

    monkeypatch.setattr(smtplib, "SMTP", refuse)
    assert _mailer().send_report("S", "B", b"x", "r.csv", "text/csv") is False
