"""
Delivery of rendered rule messages.

Each recipient is tried on every channel of the rule's type. Every attempt,
successful or not, is appended to notification_logs. Failures never stop the
remaining attempts.
"""

from typing import Any, List, Optional

from models.notification import (
    DeliveryOutcome,
    NotificationLogEntry,
    NotificationRule,
    Recipient,
    RuleType,
)
from notifications.email_sender import DEFAULT_SUBJECT, send_notification_email
from notifications.error_logger import log_notification_error
from notifications.rule_store import insert_notification_log
from notifications.templates import strip_html

ALERTS_TABLE = "portal_notifications"


def related_entity_type(trigger_event: str) -> str:
    """'Note Overdue' -> 'note_overdue'"""
    return trigger_event.lower().replace(" ", "_")


def _send_email(recipient: Recipient, subject: Optional[str], message: str) -> DeliveryOutcome:
    result = send_notification_email(recipient.email or "", subject, message)
    return DeliveryOutcome(
        channel=RuleType.EMAIL,
        recipient_id=recipient.id,
        success=bool(result.get("success")),
        error=None if result.get("success") else result.get("error", "Unknown error"),
    )


def _create_dashboard_alert(
    supabase: Any, recipient: Recipient, subject: Optional[str], message: str
) -> DeliveryOutcome:
    try:
        supabase.table(ALERTS_TABLE).insert(
            {
                "client_id": recipient.id,
                "notification_type": "alert",
                "title": subject or DEFAULT_SUBJECT,
                "message": strip_html(message),
                "priority": "normal",
            }
        ).execute()
    except Exception as e:
        return DeliveryOutcome(
            channel=RuleType.DASHBOARD_ALERT,
            recipient_id=recipient.id,
            success=False,
            error=str(e),
        )
    return DeliveryOutcome(
        channel=RuleType.DASHBOARD_ALERT, recipient_id=recipient.id, success=True
    )


def _attempt(
    supabase: Any,
    channel: RuleType,
    recipient: Recipient,
    subject: Optional[str],
    message: str,
) -> Optional[DeliveryOutcome]:
    """Try one channel. Returns None when the channel does not apply to the recipient."""
    if channel is RuleType.EMAIL:
        if not recipient.email:
            return None
        return _send_email(recipient, subject, message)
    if channel is RuleType.DASHBOARD_ALERT:
        return _create_dashboard_alert(supabase, recipient, subject, message)
    return DeliveryOutcome(
        channel=channel,
        recipient_id=recipient.id,
        success=False,
        error="SMS delivery is not supported",
    )


def _write_log(
    supabase: Any,
    rule: NotificationRule,
    recipient: Recipient,
    outcome: DeliveryOutcome,
    message: str,
    subject: Optional[str],
    trigger_event: str,
    entity_id: Optional[str],
) -> None:
    entry = NotificationLogEntry(
        rule_id=rule.id,
        recipient_id=recipient.id,
        recipient_type=recipient.type,
        recipient_email=recipient.email,
        recipient_phone=recipient.phone,
        notification_type=outcome.channel.value,
        message_content=message,
        message_subject=subject,
        sent_successfully=outcome.success,
        error_message=outcome.error if not outcome.success else None,
        related_entity_type=related_entity_type(trigger_event),
        related_entity_id=entity_id,
    )
    try:
        insert_notification_log(supabase, entry)
    except Exception as e:
        error_file = log_notification_error(
            error_type="logging",
            error_message=str(e),
            context={
                "rule_id": rule.id,
                "recipient_id": recipient.id,
                "channel": outcome.channel.value,
                "sent_successfully": outcome.success,
            },
        )
        print(f"    ⚠️  Could not write notification log. Details logged to: {error_file}")


def dispatch_to_recipient(
    supabase: Any,
    rule: NotificationRule,
    recipient: Recipient,
    message: str,
    subject: Optional[str],
    trigger_event: str,
    entity_id: Optional[str],
) -> List[DeliveryOutcome]:
    """
    Deliver a rendered message to one recipient on every channel of the rule.

    Args:
        supabase: Supabase client (alerts and logs)
        rule: Rule being fired
        recipient: Resolved recipient
        message: Rendered message template
        subject: Rendered subject, if the rule has one
        trigger_event: Event name, used for the log's related entity type
        entity_id: Id of the triggering entity

    Returns:
        One outcome per attempted channel
    """
    outcomes = []
    for channel in rule.rule_type.channels():
        try:
            outcome = _attempt(supabase, channel, recipient, subject, message)
        except Exception as e:
            outcome = DeliveryOutcome(
                channel=channel, recipient_id=recipient.id, success=False, error=str(e)
            )

        if outcome is None:
            continue

        mark = "✓" if outcome.success else "✗"
        detail = "" if outcome.success else f": {outcome.error}"
        print(f"    {mark} {channel.value} to {recipient.type} {recipient.id}{detail}")

        _write_log(
            supabase, rule, recipient, outcome, message, subject, trigger_event, entity_id
        )
        outcomes.append(outcome)

    return outcomes
