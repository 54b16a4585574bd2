"""
Email sending via Resend API for notification rules.

Sends one rendered rule message to one recipient.
"""

from typing import Any, Dict

import resend

from notifications.templates import html_to_text
from shared.config import get_settings

# Initialize Resend with API key from settings
resend.api_key = get_settings().resend_api_key

DEFAULT_SUBJECT = "Notification"


def is_email_configured() -> bool:
    """True when a Resend API key is available."""
    return bool(resend.api_key)


def send_notification_email(
    to_email: str, subject: str | None, html_body: str
) -> Dict[str, Any]:
    """
    Send a rendered notification message.

    Args:
        to_email: Recipient email address
        subject: Rendered subject line (defaults to "Notification")
        html_body: Rendered message template (HTML allowed)

    Returns:
        Dictionary with 'success' (bool), 'email_id' (str if success), 'error' (str if failed)
    """
    if not is_email_configured():
        return {"success": False, "error": "Email provider not configured"}

    from_email = get_settings().from_email

    try:
        response = resend.Emails.send(
            {
                "from": from_email,
                "to": [to_email],
                "subject": subject or DEFAULT_SUBJECT,
                "html": html_body,
                "text": html_to_text(html_body),
            }
        )

        return {"success": True, "email_id": response.get("id")}

    except Exception as e:
        return {"success": False, "error": str(e)}
