"""Report Mailer - e-mails generated reports to configured recipients over SMTP.

Invariants:
    - Disabled by default (email_report_notification_enabled=False)
    - send_report() never raises: delivery failures are logged and reported as False
    - Runs as a FastAPI background task, after the download response is sent

Design Decisions:
    - smtplib (blocking) is fine here: Starlette runs sync background tasks in its threadpool
    - One message per report with the report attached, all recipients on one envelope
"""

import logging
import smtplib
from email.message import EmailMessage

from sis.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ReportMailer:
    """SMTP delivery for report attachments."""

    def __init__(self, settings: Settings):
        self.enabled = settings.email_report_notification_enabled
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.sender = settings.smtp_sender
        self.timeout = settings.smtp_timeout_seconds
        self.recipients = list(settings.report_recipients)

    def build_message(
        self, subject: str, body: str, attachment: bytes, filename: str, media_type: str,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = ", ".join(self.recipients)
        msg.set_content(body)
        maintype, _, subtype = media_type.partition("/")
        msg.add_attachment(
            attachment, maintype=maintype, subtype=subtype, filename=filename,
        )
        return msg

    def send_report(
        self, subject: str, body: str, attachment: bytes, filename: str, media_type: str,
    ) -> bool:
        if not self.enabled:
            logger.debug("Report e-mail notifications disabled")
            return False
        if not self.recipients:
            logger.warning("Report e-mail requested but no recipients configured")
            return False
        msg = self.build_message(subject, body, attachment, filename, media_type)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                f"Failed to e-mail report {filename}: {e}",
                extra={"report_type": filename},
            )
            return False
        logger.info(f"Report {filename} e-mailed to {len(self.recipients)} recipient(s)")
        return True


def get_report_mailer() -> ReportMailer:
    return ReportMailer(get_settings())
