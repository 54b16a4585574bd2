"""
Report on notification rules and their delivery logs.

Usage:
    # List all rules with their derived state
    uv run python -m notifications.rule_report

    # Only active rules
    uv run python -m notifications.rule_report --active-only

    # Delivery statistics and recent log rows for one rule
    uv run python -m notifications.rule_report --logs RULE_ID --since 2026-01-01
"""

import argparse
from typing import Any

from notifications.rule_store import list_notification_logs, list_rules, summarize_logs
from shared.db import get_supabase_client
from shared.utils import parse_date_string


def report_rules(supabase: Any, active_only: bool = False) -> None:
    rules = list_rules(supabase, active_only=active_only)

    if not rules:
        print("No notification rules found")
        return

    print(f"Found {len(rules)} notification rule(s)")
    print("-" * 60)
    for rule in rules:
        limit = ""
        if rule.send_once:
            limit = " (send once)"
        elif rule.send_repeatedly and rule.max_repeats:
            limit = f" (max {rule.max_repeats})"
        print(f"  [{rule.state.value}] {rule.rule_name}")
        print(f"    ID: {rule.id}")
        print(f"    Event: {rule.trigger_event} -> {rule.rule_type.value} to {rule.recipient_type.value}")
        print(f"    Executions: {rule.execution_count}{limit}")
        if rule.last_executed_at:
            print(f"    Last executed: {rule.last_executed_at.isoformat()}")


def report_logs(
    supabase: Any, rule_id: str | None, since: str | None, limit: int
) -> None:
    logs = list_notification_logs(supabase, rule_id=rule_id, since=since, limit=limit)
    stats = summarize_logs(logs)

    print(f"Notification logs{' for rule ' + rule_id if rule_id else ''}")
    print("=" * 60)
    print(f"Total:      {stats.total}")
    print(f"Successful: {stats.successful}")
    print(f"Failed:     {stats.failed}")
    print(f"Opened:     {stats.opened}")
    print(f"Clicked:    {stats.clicked}")
    print("-" * 60)

    for log in logs:
        mark = "✓" if log.sent_successfully else "✗"
        print(
            f"  {mark} {log.sent_date or '-'} {log.notification_type} -> "
            f"{log.recipient_email or log.recipient_id}"
        )
        if log.error_message:
            print(f"      {log.error_message}")


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Report on notification rules and logs")

    parser.add_argument("--active-only", action="store_true", help="Only list active rules")
    parser.add_argument(
        "--logs",
        nargs="?",
        const="",
        metavar="RULE_ID",
        help="Show delivery logs (optionally for one rule) instead of rules",
    )
    parser.add_argument("--since", type=str, help="Only logs sent on or after this date")
    parser.add_argument("--limit", type=int, default=50, help="Maximum log rows to show")

    args = parser.parse_args()

    since = None
    if args.since:
        since = parse_date_string(args.since)
        if since is None:
            parser.error(f"Could not parse date: {args.since}")

    supabase = get_supabase_client()

    if args.logs is not None:
        report_logs(supabase, args.logs or None, since, args.limit)
    else:
        report_rules(supabase, active_only=args.active_only)


if __name__ == "__main__":
    main()
