"""
Error reports for the notification pipeline.

Unexpected failures (rule loading, broken rule rows, log inserts that fail)
are written to timestamped text files under notifications/logs/ so they can
be inspected after an invocation has returned.
"""

import json
import os
import uuid
from datetime import datetime
from typing import Any

LOG_DIR = os.path.join(os.path.dirname(__file__), "logs")


def log_notification_error(
    error_type: str, error_message: str, context: dict[str, Any] | None = None
) -> str:
    """
    Write a notification error report to a timestamped file.

    Args:
        error_type: Stage that failed (e.g. 'loading', 'resolving', 'logging')
        error_message: The error message
        context: Optional details (trigger_event, rule_id, recipient_id, ...)

    Returns:
        Path to the report file created
    """
    os.makedirs(LOG_DIR, exist_ok=True)

    # Several reports can be written within the same second
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = uuid.uuid4().hex[:6]
    filename = os.path.join(
        LOG_DIR, f"notification_error_{error_type}_{timestamp}_{suffix}.txt"
    )

    with open(filename, "w", encoding="utf-8") as f:
        f.write(f"Notification Error Report - {datetime.now()}\n")
        f.write("=" * 60 + "\n\n")
        f.write(f"Error Type: {error_type}\n")
        f.write(f"Error Message: {error_message}\n\n")

        if context:
            f.write("Context:\n")
            f.write("-" * 60 + "\n")
            for key, value in context.items():
                if isinstance(value, (dict, list)):
                    value = json.dumps(value, default=str, indent=2)
                f.write(f"{key}: {value}\n")

    return filename
