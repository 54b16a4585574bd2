"""Pydantic models for data validation and type checking."""

from models.notification import (
    TRIGGER_EVENTS,
    ConditionOperator,
    DeliveryOutcome,
    EvaluationResult,
    FiredRule,
    LogStats,
    NotificationLogEntry,
    NotificationRule,
    NotificationRuleCreate,
    NotificationRuleUpdate,
    Recipient,
    RecipientType,
    RuleCondition,
    RuleState,
    RuleType,
    TimingType,
)

__all__ = [
    "TRIGGER_EVENTS",
    "ConditionOperator",
    "DeliveryOutcome",
    "EvaluationResult",
    "FiredRule",
    "LogStats",
    "NotificationLogEntry",
    "NotificationRule",
    "NotificationRuleCreate",
    "NotificationRuleUpdate",
    "Recipient",
    "RecipientType",
    "RuleCondition",
    "RuleState",
    "RuleType",
    "TimingType",
]
