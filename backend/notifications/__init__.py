"""
Notification rules for the MentalSpace practice management backend.

This module handles:
- Evaluating administrator-defined rules against application events
- Resolving rule recipients (users, roles, clients, clinicians)
- Rendering message templates from event data
- Delivering messages by email (Resend) and in-app alerts, with a delivery log
"""

from .rule_evaluator import fire_trigger_event, process_notification_rules
from .email_sender import send_notification_email

__all__ = [
    'fire_trigger_event',
    'process_notification_rules',
    'send_notification_email',
]
