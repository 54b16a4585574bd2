"""
CLI script for firing a trigger event through the notification rules.

Usage:
    # Fire an event for an entity
    uv run python -m notifications.process_event \
        --event "Note Overdue" --entity-id note-123 \
        --entity-data '{"client_id": "c1", "days_overdue": 5}'

    # Read entity data from a JSON file
    uv run python -m notifications.process_event \
        --event "Payment Due" --entity-id inv-9 --entity-file invoice.json

    # Dry run (don't send, log or update counters)
    uv run python -m notifications.process_event --event "Note Due" --dry-run
"""

import argparse
import json
from typing import Any, Dict

from models.notification import TRIGGER_EVENTS, EvaluationResult
from notifications.rule_evaluator import process_notification_rules


def _load_entity_data(args: argparse.Namespace) -> Dict[str, Any]:
    if args.entity_file:
        with open(args.entity_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    elif args.entity_data:
        data = json.loads(args.entity_data)
    else:
        data = {}

    if not isinstance(data, dict):
        raise ValueError("Entity data must be a JSON object")
    return data


def print_result(trigger_event: str, result: EvaluationResult, dry_run: bool) -> None:
    print(f"\n{'=' * 60}")
    print("Notification Rules Processing Complete" + (" (dry run)" if dry_run else ""))
    print(f"{'=' * 60}")
    print(f"Event:      {trigger_event}")
    print(f"Processed:  {result.processed}")
    print(f"Sent:       {result.sent}")
    for fired in result.fired:
        failed = sum(1 for o in fired.outcomes if not o.success)
        print(
            f"  - {fired.rule_name}: {fired.recipient_count} recipient(s)"
            + (f", {failed} failed delivery(ies)" if failed else "")
        )


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Evaluate notification rules for a trigger event"
    )

    parser.add_argument("--event", required=True, help="Trigger event name, e.g. 'Note Overdue'")
    parser.add_argument("--entity-id", type=str, help="Id of the entity that fired the event")

    data_group = parser.add_mutually_exclusive_group()
    data_group.add_argument("--entity-data", type=str, help="Entity data as a JSON object")
    data_group.add_argument("--entity-file", type=str, help="Path to a JSON file with entity data")

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't send, log or update rule counters)",
    )

    args = parser.parse_args()

    try:
        entity_data = _load_entity_data(args)
    except (OSError, ValueError) as e:
        parser.error(f"Invalid entity data: {e}")

    if args.event not in TRIGGER_EVENTS:
        print(f"⚠️  '{args.event}' is not a standard trigger event")

    result = process_notification_rules(
        args.event, args.entity_id, entity_data, dry_run=args.dry_run
    )
    print_result(args.event, result, args.dry_run)


if __name__ == "__main__":
    main()
