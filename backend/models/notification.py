"""Pydantic models for the notification rule pipeline."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.types import DateString, FieldPath, LogID, RuleID, TriggerEvent

# Events offered by the rule editor. Rules may still use any string.
TRIGGER_EVENTS: tuple[str, ...] = (
    "Note Due",
    "Note Overdue",
    "Note Locked",
    "Supervisor Review Needed",
    "Appointment Reminder",
    "Payment Due",
    "License Expiring",
    "Form Completed",
    "Message Received",
    "Critical Assessment Score",
    "Document Uploaded",
    "Client Registered",
    "Insurance Expiring",
    "Authorization Needed",
    "Other",
)


class RuleType(str, Enum):
    """Delivery channel(s) selected by a rule."""

    EMAIL = "Email"
    SMS = "SMS"
    DASHBOARD_ALERT = "Dashboard Alert"
    ALL = "All"

    def channels(self) -> list["RuleType"]:
        if self is RuleType.ALL:
            return [RuleType.EMAIL, RuleType.DASHBOARD_ALERT]
        return [self]


class RecipientType(str, Enum):
    SPECIFIC_USER = "Specific User"
    CLIENT = "Client"
    CLINICIAN = "Clinician"
    SUPERVISOR = "Supervisor"
    ADMINISTRATOR = "Administrator"
    ROLE = "Role"


class TimingType(str, Enum):
    IMMEDIATE = "Immediate"
    SCHEDULED = "Scheduled"
    BEFORE_EVENT = "Before Event"
    AFTER_EVENT = "After Event"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


class RuleState(str, Enum):
    """Effective state of a rule, derived from its flags and counters."""

    INACTIVE = "Inactive"
    EXHAUSTED = "Exhausted"
    ARMED = "Armed"


class RuleCondition(BaseModel):
    """Single predicate on the triggering entity's data."""

    field: FieldPath = Field(..., min_length=1)
    # Kept as a plain string so unknown operators survive loading
    operator: str
    value: Any = None


class NotificationRuleBase(BaseModel):
    """Fields an administrator edits on a notification rule."""

    rule_name: str = Field(..., min_length=1)
    rule_type: RuleType
    trigger_event: TriggerEvent = Field(..., min_length=1)
    conditions: list[RuleCondition] = Field(default_factory=list)
    recipient_type: RecipientType
    recipients: list[str] = Field(default_factory=list)
    timing_type: TimingType = TimingType.IMMEDIATE
    timing_offset: int | None = None
    message_template: str = Field(..., min_length=1)
    message_subject: str | None = None
    send_once: bool = False
    send_repeatedly: bool = False
    repeat_interval: int | None = None
    max_repeats: int | None = Field(None, ge=0)
    is_active: bool = True

    @field_validator("conditions", "recipients", mode="before")
    @classmethod
    def _null_lists_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class NotificationRuleCreate(NotificationRuleBase):
    """Payload for creating a rule. Counters are owned by the evaluator."""


class NotificationRuleUpdate(BaseModel):
    """Partial update of a rule; unset fields are left untouched."""

    rule_name: str | None = Field(None, min_length=1)
    rule_type: RuleType | None = None
    trigger_event: TriggerEvent | None = Field(None, min_length=1)
    conditions: list[RuleCondition] | None = None
    recipient_type: RecipientType | None = None
    recipients: list[str] | None = None
    timing_type: TimingType | None = None
    timing_offset: int | None = None
    message_template: str | None = Field(None, min_length=1)
    message_subject: str | None = None
    send_once: bool | None = None
    send_repeatedly: bool | None = None
    repeat_interval: int | None = None
    max_repeats: int | None = Field(None, ge=0)
    is_active: bool | None = None


class NotificationRule(NotificationRuleBase):
    """Notification rule as stored in the notification_rules table."""

    model_config = ConfigDict(extra="ignore")

    id: RuleID
    execution_count: int = Field(0, ge=0)
    last_executed_at: datetime | None = None
    created_date: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("execution_count", mode="before")
    @classmethod
    def _count_defaults_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    def frequency_allows_firing(self) -> bool:
        """
        Check the send_once / max_repeats policy.

        send_once is checked first, so it wins when both flags are set.
        A max_repeats of 0 or None means no limit.
        """
        if self.send_once and self.execution_count > 0:
            return False
        if (
            self.send_repeatedly
            and self.max_repeats
            and self.execution_count >= self.max_repeats
        ):
            return False
        return True

    @property
    def state(self) -> RuleState:
        if not self.is_active:
            return RuleState.INACTIVE
        if not self.frequency_allows_firing():
            return RuleState.EXHAUSTED
        return RuleState.ARMED


class Recipient(BaseModel):
    """Concrete contactable identity resolved from a rule."""

    id: str
    type: str = Field(..., pattern="^(User|Client)$")
    email: str | None = None
    phone: str | None = None


class NotificationLogEntry(BaseModel):
    """One delivery attempt to one recipient through one channel."""

    model_config = ConfigDict(extra="ignore")

    id: LogID | None = None
    rule_id: RuleID | None = None
    recipient_id: str
    recipient_type: str
    recipient_email: str | None = None
    recipient_phone: str | None = None
    notification_type: str
    message_content: str
    message_subject: str | None = None
    sent_successfully: bool
    error_message: str | None = None
    related_entity_type: str | None = None
    related_entity_id: str | None = None
    sent_date: DateString | None = None
    opened: bool | None = None
    clicked: bool | None = None


class DeliveryOutcome(BaseModel):
    """Result of a single dispatch attempt."""

    channel: RuleType
    recipient_id: str
    success: bool
    error: str | None = None


class FiredRule(BaseModel):
    """Summary of one rule firing inside an evaluation."""

    rule_id: RuleID
    rule_name: str
    recipient_count: int
    outcomes: list[DeliveryOutcome] = Field(default_factory=list)


class EvaluationResult(BaseModel):
    """Counts returned to the caller of the evaluator."""

    matched: int = 0
    processed: int = 0
    sent: int = 0
    fired: list[FiredRule] = Field(default_factory=list)


class LogStats(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    opened: int = 0
    clicked: int = 0
