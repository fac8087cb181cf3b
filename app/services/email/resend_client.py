import logging

import resend

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when the mail provider rejects or fails to send a message."""


class ResendMailer:
    """Thin wrapper around the Resend SDK.

    Built once at startup (see ``app.main``) and passed to whoever needs to
    send mail, so tests can substitute any object with the same ``send``.
    """

    def __init__(self, api_key: str, sender: str):
        self.api_key = api_key
        self.sender = sender

    def send(self, to: str, subject: str, html: str) -> dict:
        # The SDK reads its key from module state; set it per call so several
        # mailers never leak keys into each other.
        resend.api_key = self.api_key
        try:
            response = resend.Emails.send({
                "from": self.sender,
                "to": [to],
                "subject": subject,
                "html": html,
            })
        except Exception as exc:
            raise MailDeliveryError(f"Failed to send email to {to}: {exc}") from exc
        logger.info("Resend -> to=%s subject=%r id=%s", to, subject, (response or {}).get("id"))
        return response
