"""
Unit tests for notifications/email_sender.py

Tests the Resend API integration for rule messages.
"""

import os
import unittest
from unittest.mock import patch

from notifications.email_sender import is_email_configured, send_notification_email


@patch("notifications.email_sender.resend.api_key", "re_test_key")
class TestSendNotificationEmail(unittest.TestCase):
    """Tests for send_notification_email() function."""

    @patch("notifications.email_sender.resend.Emails.send")
    def test_send_success(self, mock_send):
        """Email sent successfully via Resend API."""
        mock_send.return_value = {"id": "email_123"}

        result = send_notification_email("client@example.com", "Reminder", "<p>Hi</p>")

        self.assertTrue(result["success"])
        self.assertEqual(result["email_id"], "email_123")

    @patch("notifications.email_sender.resend.Emails.send")
    def test_payload(self, mock_send):
        """Recipient, subject, HTML and text alternative are sent."""
        mock_send.return_value = {"id": "email_123"}

        send_notification_email("client@example.com", "Reminder", "<p>Your <b>note</b></p>")

        payload = mock_send.call_args[0][0]
        self.assertEqual(payload["to"], ["client@example.com"])
        self.assertEqual(payload["subject"], "Reminder")
        self.assertEqual(payload["html"], "<p>Your <b>note</b></p>")
        self.assertIn("note", payload["text"])
        self.assertNotIn("<b>", payload["text"])

    @patch("notifications.email_sender.resend.Emails.send")
    def test_default_subject(self, mock_send):
        mock_send.return_value = {"id": "email_123"}

        send_notification_email("client@example.com", None, "Body")

        self.assertEqual(mock_send.call_args[0][0]["subject"], "Notification")

    @patch("notifications.email_sender.resend.Emails.send")
    def test_from_address_from_environment(self, mock_send):
        mock_send.return_value = {"id": "email_123"}

        with patch.dict(os.environ, {"NOTIFICATION_FROM_EMAIL": "Clinic <alerts@clinic.test>"}):
            send_notification_email("client@example.com", "Hi", "Body")

        self.assertEqual(mock_send.call_args[0][0]["from"], "Clinic <alerts@clinic.test>")

    @patch("notifications.email_sender.resend.Emails.send")
    def test_send_failure(self, mock_send):
        """API errors are returned, not raised."""
        mock_send.side_effect = Exception("API Error: Rate limit exceeded")

        result = send_notification_email("client@example.com", "Hi", "Body")

        self.assertFalse(result["success"])
        self.assertIn("Rate limit", result["error"])


class TestEmailConfiguration(unittest.TestCase):
    """Tests for behaviour without an API key."""

    @patch("notifications.email_sender.resend.api_key", None)
    @patch("notifications.email_sender.resend.Emails.send")
    def test_not_configured(self, mock_send):
        self.assertFalse(is_email_configured())

        result = send_notification_email("client@example.com", "Hi", "Body")

        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "Email provider not configured")
        mock_send.assert_not_called()


if __name__ == "__main__":
    unittest.main()
