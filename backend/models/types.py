"""Shared type definitions for type checking.

Uses NewType for IDs to provide compile-time type safety - prevents mixing
different ID types (e.g., passing a LogID where a RuleID is expected).

Uses TypeAlias for complex types that are purely structural.
"""

from typing import Any, NewType, TypeAlias

# ID types using NewType for type safety
# These create distinct types that mypy can differentiate
RuleID = NewType("RuleID", str)
LogID = NewType("LogID", str)

# Structural aliases using TypeAlias
# These are for complex types where structural compatibility is desired
TriggerEvent: TypeAlias = str  # e.g. "Note Overdue"
FieldPath: TypeAlias = str  # dot-separated, e.g. "client.first_name"
DateString: TypeAlias = str  # ISO 8601 format
