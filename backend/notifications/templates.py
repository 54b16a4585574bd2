"""
Message template rendering for notification rules.

Templates contain {field.path} placeholders that are filled in from the
triggering entity's data. There are no loops, conditionals or escaping.
"""

import re
from typing import Any

from bs4 import BeautifulSoup
from html2text import html2text

PLACEHOLDER_PATTERN = re.compile(r"\{([^}]+)\}")

# Returned by get_nested_value when a path segment does not exist
MISSING = object()


def get_nested_value(data: Any, path: str) -> Any:
    """
    Walk a dot-separated path through nested dicts (and lists).

    Args:
        data: Entity data (usually a dict decoded from JSON)
        path: Field path like "client.first_name" or "items.0.name"

    Returns:
        The value found, or MISSING if any segment is absent
    """
    current = data
    for key in path.split("."):
        if isinstance(current, dict):
            if key not in current:
                return MISSING
            current = current[key]
        elif isinstance(current, (list, tuple)) and key.isdigit():
            index = int(key)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def stringify(value: Any) -> str:
    """String form used for template output and text comparisons."""
    if value is MISSING:
        return ""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_template(template: str, data: Any) -> str:
    """
    Replace {path} tokens with values from data.

    Unknown paths leave the token text unchanged, e.g. rendering
    "{missing.path}" against {} returns "{missing.path}". Paths are used
    exactly as written, so "{ a }" only matches a key named " a ".
    An explicit null renders as "null".
    """
    if not template:
        return ""

    def _replace(match: re.Match[str]) -> str:
        value = get_nested_value(data, match.group(1))
        if value is MISSING:
            return match.group(0)
        return stringify(value)

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def strip_html(html: str) -> str:
    """Remove markup for in-app alerts, which are displayed as plain text."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text()


def html_to_text(html: str) -> str:
    """Plain-text alternative body for emails."""
    if not html:
        return ""
    return html2text(html).strip()
