import logging
import resend
from flask import current_app

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends account lifecycle emails via Resend."""

    def __init__(self, api_key=None, from_email=None):
        self.api_key = api_key if api_key is not None else current_app.config.get('RESEND_API_KEY')
        self.from_email = from_email or current_app.config.get('NOTIFY_EMAIL_FROM')
        self.enabled = bool(self.api_key)

        if self.enabled:
            resend.api_key = self.api_key
        else:
            logger.debug("No Resend API key found - account emails are disabled")

    def _send(self, to_email, subject, html_content):
        if not self.enabled:
            logger.info(f"Notifications disabled - skipping '{subject}' to {to_email}")
            return False
        try:
            response = resend.Emails.send({
                "from": self.from_email,
                "to": to_email,
                "subject": subject,
                "html": html_content,
            })
            logger.info(f"Sent '{subject}' to {to_email}: {response.get('id')}")
            return True
        except Exception as e:
            # Email delivery never fails the request that triggered it
            logger.error(f"Failed to send '{subject}' to {to_email}: {str(e)}")
            return False

    def send_account_activated(self, user):
        name = user.name or user.username
        return self._send(
            user.email,
            "Your Outleads account has been activated",
            f"<p>Hello {name},</p>"
            "<p>Your Outleads account has been activated. You can now sign in.</p>",
        )

    def send_account_rejected(self, user):
        name = user.name or user.username
        return self._send(
            user.email,
            "Your Outleads access request",
            f"<p>Hello {name},</p>"
            "<p>Your request for access to Outleads has been declined. "
            "Contact your administrator if you believe this is a mistake.</p>",
        )
