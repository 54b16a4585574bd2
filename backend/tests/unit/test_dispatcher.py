"""
Unit tests for notifications/dispatcher.py

Tests per-channel delivery, one log row per attempt, and isolation of
failures between channels.
"""

import unittest
from unittest.mock import patch

from models.notification import NotificationRule, Recipient, RuleType
from notifications.dispatcher import dispatch_to_recipient, related_entity_type
from tests.fixtures.mock_helpers import InMemorySupabase
from tests.fixtures.rule_factory import create_test_rule


def make_rule(**kwargs) -> NotificationRule:
    return NotificationRule.model_validate(create_test_rule(rule_id="rule-1", **kwargs))


@patch("builtins.print")
@patch("notifications.email_sender.resend.api_key", "re_test_key")
@patch("notifications.email_sender.resend.Emails.send")
class TestDispatchToRecipient(unittest.TestCase):
    """Tests for dispatch_to_recipient()"""

    def setUp(self):
        self.supabase = InMemorySupabase()
        self.recipient = Recipient(id="c1", type="Client", email="c1@example.com", phone="555")

    def dispatch(self, rule, recipient=None):
        return dispatch_to_recipient(
            self.supabase,
            rule,
            recipient or self.recipient,
            "<p>Note is late</p>",
            "Late note",
            "Note Overdue",
            "note-9",
        )

    def test_email_rule(self, mock_send, mock_print):
        mock_send.return_value = {"id": "email_1"}

        outcomes = self.dispatch(make_rule(rule_type="Email"))

        self.assertEqual(len(outcomes), 1)
        self.assertTrue(outcomes[0].success)
        logs = self.supabase.rows("notification_logs")
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0]["notification_type"], "Email")
        self.assertEqual(logs[0]["rule_id"], "rule-1")
        self.assertEqual(logs[0]["recipient_email"], "c1@example.com")
        self.assertEqual(logs[0]["recipient_phone"], "555")
        self.assertEqual(logs[0]["message_content"], "<p>Note is late</p>")
        self.assertEqual(logs[0]["message_subject"], "Late note")
        self.assertTrue(logs[0]["sent_successfully"])
        self.assertIsNone(logs[0]["error_message"])
        self.assertEqual(logs[0]["related_entity_type"], "note_overdue")
        self.assertEqual(logs[0]["related_entity_id"], "note-9")

    def test_email_without_address_is_skipped(self, mock_send, mock_print):
        recipient = Recipient(id="u1", type="User", email=None)

        outcomes = self.dispatch(make_rule(rule_type="Email"), recipient)

        self.assertEqual(outcomes, [])
        self.assertEqual(self.supabase.rows("notification_logs"), [])
        mock_send.assert_not_called()

    def test_email_failure_logged(self, mock_send, mock_print):
        mock_send.side_effect = Exception("Domain not verified")

        outcomes = self.dispatch(make_rule(rule_type="Email"))

        self.assertFalse(outcomes[0].success)
        log = self.supabase.rows("notification_logs")[0]
        self.assertFalse(log["sent_successfully"])
        self.assertEqual(log["error_message"], "Domain not verified")

    def test_dashboard_alert(self, mock_send, mock_print):
        outcomes = self.dispatch(make_rule(rule_type="Dashboard Alert"))

        self.assertTrue(outcomes[0].success)
        alerts = self.supabase.rows("portal_notifications")
        self.assertEqual(len(alerts), 1)
        self.assertEqual(alerts[0]["client_id"], "c1")
        self.assertEqual(alerts[0]["notification_type"], "alert")
        self.assertEqual(alerts[0]["title"], "Late note")
        self.assertEqual(alerts[0]["message"], "Note is late")
        self.assertEqual(alerts[0]["priority"], "normal")
        self.assertEqual(
            self.supabase.rows("notification_logs")[0]["notification_type"], "Dashboard Alert"
        )
        mock_send.assert_not_called()

    def test_dashboard_alert_default_title(self, mock_send, mock_print):
        dispatch_to_recipient(
            self.supabase, make_rule(rule_type="Dashboard Alert"), self.recipient,
            "Body", None, "Note Due", "n1",
        )

        self.assertEqual(self.supabase.rows("portal_notifications")[0]["title"], "Notification")

    def test_all_logs_each_channel(self, mock_send, mock_print):
        mock_send.return_value = {"id": "email_1"}

        outcomes = self.dispatch(make_rule(rule_type="All"))

        self.assertEqual([o.channel for o in outcomes], [RuleType.EMAIL, RuleType.DASHBOARD_ALERT])
        logs = self.supabase.rows("notification_logs")
        self.assertEqual([log["notification_type"] for log in logs], ["Email", "Dashboard Alert"])
        self.assertTrue(all(log["related_entity_id"] == "note-9" for log in logs))

    def test_all_email_failure_does_not_block_alert(self, mock_send, mock_print):
        mock_send.side_effect = Exception("Resend down")

        outcomes = self.dispatch(make_rule(rule_type="All"))

        self.assertEqual([o.success for o in outcomes], [False, True])
        self.assertEqual(len(self.supabase.rows("portal_notifications")), 1)

    def test_alert_insert_failure_recorded(self, mock_send, mock_print):
        self.supabase.fail("portal_notifications", "insert", Exception("violates foreign key"))

        outcomes = self.dispatch(make_rule(rule_type="Dashboard Alert"))

        self.assertFalse(outcomes[0].success)
        log = self.supabase.rows("notification_logs")[0]
        self.assertFalse(log["sent_successfully"])
        self.assertIn("foreign key", log["error_message"])

    def test_sms_recorded_as_unsupported(self, mock_send, mock_print):
        outcomes = self.dispatch(make_rule(rule_type="SMS"))

        self.assertFalse(outcomes[0].success)
        log = self.supabase.rows("notification_logs")[0]
        self.assertEqual(log["notification_type"], "SMS")
        self.assertEqual(log["error_message"], "SMS delivery is not supported")

    @patch("notifications.dispatcher.log_notification_error", return_value="/tmp/report.txt")
    def test_log_insert_failure_does_not_raise(self, mock_log_error, mock_send, mock_print):
        mock_send.return_value = {"id": "email_1"}
        self.supabase.fail("notification_logs", "insert", Exception("logs table missing"))

        outcomes = self.dispatch(make_rule(rule_type="Email"))

        self.assertTrue(outcomes[0].success)
        mock_log_error.assert_called_once()
        self.assertEqual(mock_log_error.call_args.kwargs["error_type"], "logging")


class TestRelatedEntityType(unittest.TestCase):
    def test_lowercase_with_underscores(self):
        self.assertEqual(related_entity_type("Note Overdue"), "note_overdue")
        self.assertEqual(related_entity_type("Critical Assessment Score"), "critical_assessment_score")


if __name__ == "__main__":
    unittest.main()
