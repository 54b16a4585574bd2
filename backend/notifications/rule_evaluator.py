"""
Rule evaluation for the notification system.

Given a trigger event and the data of the entity that fired it, finds the
active rules for the event, checks their conditions and frequency policy,
resolves recipients, renders the message and hands it to the dispatcher.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from models.notification import EvaluationResult, FiredRule, NotificationRule
from notifications.conditions import UnknownOperatorError, evaluate_conditions
from notifications.dispatcher import dispatch_to_recipient
from notifications.error_logger import log_notification_error
from notifications.recipient_resolver import resolve_recipients
from notifications.rule_store import claim_rule_execution, fetch_active_rules
from notifications.templates import render_template
from shared.config import get_settings
from shared.db import get_supabase_client


def process_notification_rules(
    trigger_event: str,
    entity_id: Optional[str],
    entity_data: Optional[Dict[str, Any]],
    dry_run: bool = False,
) -> EvaluationResult:
    """
    Evaluate and fire every active rule listening to a trigger event.

    Rules are processed one at a time in the order the store returns them.
    A failure for one rule or one recipient never stops the others, but a
    failure to load the rules propagates to the caller.

    Args:
        trigger_event: Event name, e.g. "Note Overdue"
        entity_id: Id of the entity that fired the event
        entity_data: Entity fields used by conditions and templates
        dry_run: If True, report what would fire without sending, logging
                 or updating counters

    Returns:
        EvaluationResult with processed (rules fired) and sent
        (successful channel deliveries)
    """
    settings = get_settings()
    supabase = get_supabase_client()
    entity_data = entity_data or {}
    result = EvaluationResult()

    print(f"Processing notification rules for event: {trigger_event}")

    rows = fetch_active_rules(supabase, trigger_event)
    if not rows:
        print(f"No active rules found for event: {trigger_event}")
        return result

    result.matched = len(rows)

    for row in rows:
        try:
            rule = NotificationRule.model_validate(row)
        except ValidationError as e:
            error_file = log_notification_error(
                error_type="validation",
                error_message=str(e),
                context={"trigger_event": trigger_event, "rule_id": row.get("id")},
            )
            print(f"  ⚠️  Invalid rule {row.get('id')}, skipping. Details logged to: {error_file}")
            continue

        print(f"\nProcessing rule: {rule.rule_name}")

        try:
            conditions_met = evaluate_conditions(
                rule.conditions,
                entity_data,
                strict=settings.strict_condition_operators,
            )
        except UnknownOperatorError as e:
            error_file = log_notification_error(
                error_type="conditions",
                error_message=str(e),
                context={"trigger_event": trigger_event, "rule_id": rule.id},
            )
            print(f"  ✗ {e}. Rule skipped, details logged to: {error_file}")
            continue

        if not conditions_met:
            print("  ⊘ Conditions not met")
            continue

        if not rule.frequency_allows_firing():
            reason = "already executed (send once)" if rule.send_once else "max repeats reached"
            print(f"  ⊘ Rule {reason}")
            continue

        try:
            recipients = resolve_recipients(
                supabase, rule, entity_data, dedupe=settings.dedupe_recipients
            )
        except Exception as e:
            error_file = log_notification_error(
                error_type="resolving",
                error_message=str(e),
                context={
                    "trigger_event": trigger_event,
                    "rule_id": rule.id,
                    "recipient_type": rule.recipient_type.value,
                },
            )
            print(f"  ✗ Could not resolve recipients. Details logged to: {error_file}")
            continue

        if not recipients:
            print("  ⊘ No recipients found")
            continue

        message = render_template(rule.message_template, entity_data)
        subject = (
            render_template(rule.message_subject, entity_data)
            if rule.message_subject
            else None
        )
        fired = FiredRule(
            rule_id=rule.id, rule_name=rule.rule_name, recipient_count=len(recipients)
        )

        if dry_run:
            for recipient in recipients:
                channels = ", ".join(c.value for c in rule.rule_type.channels())
                print(f"  [DRY RUN] Would notify {recipient.type} {recipient.id} via {channels}")
            result.processed += 1
            result.fired.append(fired)
            continue

        # Counter is claimed before sending so a concurrent invocation that
        # loses the claim never delivers
        try:
            claimed = claim_rule_execution(supabase, rule)
        except Exception as e:
            error_file = log_notification_error(
                error_type="counting",
                error_message=str(e),
                context={
                    "trigger_event": trigger_event,
                    "rule_id": rule.id,
                    "execution_count": rule.execution_count,
                },
            )
            print(f"  ✗ Could not update rule counter. Details logged to: {error_file}")
            continue

        if claimed is None:
            print("  ⊘ Rule can no longer fire")
            continue

        for recipient in recipients:
            outcomes = dispatch_to_recipient(
                supabase, claimed, recipient, message, subject, trigger_event, entity_id
            )
            fired.outcomes.extend(outcomes)
            result.sent += sum(1 for outcome in outcomes if outcome.success)

        result.processed += 1
        result.fired.append(fired)

    return result


def fire_trigger_event(
    trigger_event: str,
    entity_id: Optional[str],
    entity_data: Optional[Dict[str, Any]],
) -> Optional[EvaluationResult]:
    """
    Fire an event from application code without ever raising.

    Notification problems must not disrupt the action that produced the
    event, so any error is reported and None is returned.
    """
    try:
        return process_notification_rules(trigger_event, entity_id, entity_data)
    except Exception as e:
        error_file = log_notification_error(
            error_type="loading",
            error_message=str(e),
            context={"trigger_event": trigger_event, "entity_id": entity_id},
        )
        print(f"  ⚠️  Error processing notification rules. Details logged to: {error_file}")
        return None
