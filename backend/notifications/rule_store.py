"""
Persistence helpers for notification rules and notification logs.

All functions take a Supabase client so a single invocation can share one
client across loading, counter updates and log writes.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional, cast

from pydantic import ValidationError

from models.notification import (
    LogStats,
    NotificationLogEntry,
    NotificationRule,
    NotificationRuleCreate,
    NotificationRuleUpdate,
)
from shared.utils import utc_now_iso

RULES_TABLE = "notification_rules"
LOGS_TABLE = "notification_logs"

# Attempts at the compare-and-set counter update before giving up
MAX_CLAIM_ATTEMPTS = 3


class RuleStoreError(Exception):
    """A rule administration request referenced a rule that does not exist."""


def fetch_active_rules(supabase: Any, trigger_event: str) -> List[dict[str, Any]]:
    """
    Load raw rows for active rules listening to a trigger event.

    Rows are returned unvalidated so one malformed rule can be skipped
    without hiding the others. Errors from the store propagate.
    """
    response = (
        supabase.table(RULES_TABLE)
        .select("*")
        .eq("is_active", True)
        .eq("trigger_event", trigger_event)
        .execute()
    )
    return cast(List[dict[str, Any]], response.data or [])


def get_rule(supabase: Any, rule_id: str) -> Optional[NotificationRule]:
    response = (
        supabase.table(RULES_TABLE).select("*").eq("id", rule_id).limit(1).execute()
    )
    if not response.data:
        return None
    return NotificationRule.model_validate(response.data[0])


def list_rules(supabase: Any, active_only: bool = False) -> List[NotificationRule]:
    """List rules newest first. Rows that fail validation are reported and skipped."""
    query = supabase.table(RULES_TABLE).select("*")
    if active_only:
        query = query.eq("is_active", True)
    response = query.order("created_date", desc=True).execute()

    rules = []
    for row in response.data or []:
        try:
            rules.append(NotificationRule.model_validate(row))
        except ValidationError as e:
            print(f"  ⚠️  Skipping invalid rule {row.get('id')}: {e.error_count()} error(s)")
    return rules


def create_rule(supabase: Any, rule: NotificationRuleCreate) -> NotificationRule:
    """Insert a new rule. Execution counters always start at zero."""
    payload = rule.model_dump(mode="json")
    payload["execution_count"] = 0

    response = supabase.table(RULES_TABLE).insert(payload).execute()
    if not response.data:
        raise RuleStoreError("Rule insert returned no data")
    return NotificationRule.model_validate(response.data[0])


def update_rule(
    supabase: Any, rule_id: str, updates: NotificationRuleUpdate
) -> NotificationRule:
    """Apply a partial update and return the stored rule."""
    payload = updates.model_dump(mode="json", exclude_unset=True)
    if not payload:
        existing = get_rule(supabase, rule_id)
        if existing is None:
            raise RuleStoreError(f"Notification rule {rule_id} not found")
        return existing

    payload["updated_at"] = utc_now_iso()
    response = supabase.table(RULES_TABLE).update(payload).eq("id", rule_id).execute()
    if not response.data:
        raise RuleStoreError(f"Notification rule {rule_id} not found")
    return NotificationRule.model_validate(response.data[0])


def set_rule_active(supabase: Any, rule_id: str, is_active: bool) -> NotificationRule:
    return update_rule(supabase, rule_id, NotificationRuleUpdate(is_active=is_active))


def delete_rule(supabase: Any, rule_id: str) -> None:
    response = supabase.table(RULES_TABLE).delete().eq("id", rule_id).execute()
    if not response.data:
        raise RuleStoreError(f"Notification rule {rule_id} not found")


def claim_rule_execution(
    supabase: Any, rule: NotificationRule
) -> Optional[NotificationRule]:
    """
    Record one firing of a rule with a compare-and-set update.

    The update only applies while execution_count still holds the value this
    invocation observed. When another invocation got there first, the rule is
    re-read and its frequency policy checked again.

    Returns:
        The rule with its new counters, or None if it may no longer fire
    """
    current: Optional[NotificationRule] = rule

    for _ in range(MAX_CLAIM_ATTEMPTS):
        if current is None or not current.is_active:
            return None
        if not current.frequency_allows_firing():
            return None

        now = datetime.now(timezone.utc)
        new_count = current.execution_count + 1
        response = (
            supabase.table(RULES_TABLE)
            .update({"execution_count": new_count, "last_executed_at": now.isoformat()})
            .eq("id", current.id)
            .eq("execution_count", current.execution_count)
            .execute()
        )
        if response.data:
            return current.model_copy(
                update={"execution_count": new_count, "last_executed_at": now}
            )

        print(f"  ⚠️  Rule {current.id} was fired concurrently, re-checking")
        current = get_rule(supabase, current.id)

    return None


def insert_notification_log(supabase: Any, entry: NotificationLogEntry) -> None:
    """Append one delivery attempt to the audit trail."""
    payload = entry.model_dump(
        mode="json", exclude={"id", "sent_date", "opened", "clicked"}
    )
    supabase.table(LOGS_TABLE).insert(payload).execute()


def list_notification_logs(
    supabase: Any,
    rule_id: Optional[str] = None,
    since: Optional[str] = None,
    limit: int = 100,
) -> List[NotificationLogEntry]:
    """
    Fetch delivery log rows, newest first.

    Args:
        rule_id: Only rows written for this rule
        since: ISO timestamp; only rows sent at or after it
        limit: Maximum rows returned
    """
    query = supabase.table(LOGS_TABLE).select("*")
    if rule_id:
        query = query.eq("rule_id", rule_id)
    if since:
        query = query.gte("sent_date", since)
    response = query.order("sent_date", desc=True).limit(limit).execute()

    return [NotificationLogEntry.model_validate(row) for row in response.data or []]


def summarize_logs(logs: List[NotificationLogEntry]) -> LogStats:
    return LogStats(
        total=len(logs),
        successful=sum(1 for log in logs if log.sent_successfully),
        failed=sum(1 for log in logs if not log.sent_successfully),
        opened=sum(1 for log in logs if log.opened),
        clicked=sum(1 for log in logs if log.clicked),
    )
