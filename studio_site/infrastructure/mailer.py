# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional
from studio_site.core.config import SmtpConfig
from studio_site.core.errors import DeliveryError

DEV_MESSAGE_ID = "dev-mode-message-id"


class SmtpMailer:
    """
    Sends one message per call over SMTP. No retry, no queue.
    """

    def __init__(self, smtp: SmtpConfig, display_name: str = "The Wedding Shade", dev_mode: bool = False):
        self.smtp = smtp
        self.display_name = display_name
        self.dev_mode = dev_mode
        self.logger = logging.getLogger(__name__)

    def _connect(self) -> smtplib.SMTP:
        if self.smtp.secure:
            return smtplib.SMTP_SSL(self.smtp.host, self.smtp.port, timeout=self.smtp.timeout_seconds)

        conn = smtplib.SMTP(self.smtp.host, self.smtp.port, timeout=self.smtp.timeout_seconds)
        try:
            conn.ehlo()
            if conn.has_extn("starttls"):
                conn.starttls()
                conn.ehlo()
        except (smtplib.SMTPException, OSError):
            conn.close()
            raise
        return conn

    def build_message(self, subject: str, text: str, html: Optional[str] = None,
                      to: Optional[str] = None, sender: Optional[str] = None,
                      reply_to: Optional[str] = None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = sender or formataddr((self.display_name, self.smtp.sender))
        msg["To"] = to or self.smtp.recipient
        msg["Subject"] = subject
        if reply_to:
            msg["Reply-To"] = reply_to
        msg["Message-ID"] = make_msgid(domain=self.smtp.sender.rpartition("@")[2] or None)
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")
        return msg

    def send(self, subject: str, text: str, html: Optional[str] = None,
             to: Optional[str] = None, sender: Optional[str] = None,
             reply_to: Optional[str] = None) -> str:
        """
        Returns the Message-ID once the server accepts the message.
        """
        if not self.smtp.host and self.dev_mode:
            self.logger.info("=== EMAIL NOT SENT (development mode) ===")
            self.logger.info(f"To: {to or self.smtp.recipient}")
            self.logger.info(f"Subject: {subject}")
            self.logger.debug(f"Body:\n{text}")
            return DEV_MESSAGE_ID

        if not self.smtp.host:
            raise DeliveryError("SMTP host is not configured")
        if not (to or self.smtp.recipient):
            raise DeliveryError("No recipient configured for outgoing mail")

        msg = self.build_message(subject, text, html, to=to, sender=sender, reply_to=reply_to)
        try:
            with self._connect() as conn:
                if self.smtp.user:
                    conn.login(self.smtp.user, self.smtp.password or "")
                conn.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Error sending email via {self.smtp.host}:{self.smtp.port}: {e}")
            raise DeliveryError(f"Failed to send email: {e}") from e

        message_id = msg["Message-ID"]
        self.logger.info(f"Email sent: {message_id}")
        return message_id
