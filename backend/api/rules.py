"""
Rule administration router - /notification-rules endpoints.

Backs the admin screens: rule list and editor, activation toggle, and the
delivery log viewer with its statistics cards.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from models.notification import (
    LogStats,
    NotificationLogEntry,
    NotificationRule,
    NotificationRuleCreate,
    NotificationRuleUpdate,
    TRIGGER_EVENTS,
)
from notifications import rule_store
from shared.db import get_supabase_client
from shared.utils import parse_date_string

router = APIRouter()


# =============================================================================
# Schemas
# =============================================================================


class ToggleRequest(BaseModel):
    is_active: bool


class NotificationLogsResponse(BaseModel):
    """Log rows plus the summary shown above the log table."""

    items: list[NotificationLogEntry]
    stats: LogStats


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/trigger-events", response_model=list[str])
def list_trigger_events() -> list[str]:
    return list(TRIGGER_EVENTS)


@router.get("", response_model=list[NotificationRule])
def list_rules(
    active_only: bool = False, supabase: Any = Depends(get_supabase_client)
) -> list[NotificationRule]:
    return rule_store.list_rules(supabase, active_only=active_only)


@router.post("", response_model=NotificationRule, status_code=201)
def create_rule(
    rule: NotificationRuleCreate, supabase: Any = Depends(get_supabase_client)
) -> NotificationRule:
    return rule_store.create_rule(supabase, rule)


@router.get("/logs", response_model=NotificationLogsResponse)
def list_all_logs(
    since: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    supabase: Any = Depends(get_supabase_client),
) -> NotificationLogsResponse:
    return _logs_response(supabase, None, since, limit)


@router.get("/{rule_id}", response_model=NotificationRule)
def get_rule(rule_id: str, supabase: Any = Depends(get_supabase_client)) -> NotificationRule:
    rule = rule_store.get_rule(supabase, rule_id)
    if rule is None:
        raise HTTPException(status_code=404, detail="Notification rule not found")
    return rule


@router.patch("/{rule_id}", response_model=NotificationRule)
def update_rule(
    rule_id: str,
    updates: NotificationRuleUpdate,
    supabase: Any = Depends(get_supabase_client),
) -> NotificationRule:
    return rule_store.update_rule(supabase, rule_id, updates)


@router.post("/{rule_id}/toggle", response_model=NotificationRule)
def toggle_rule(
    rule_id: str, body: ToggleRequest, supabase: Any = Depends(get_supabase_client)
) -> NotificationRule:
    return rule_store.set_rule_active(supabase, rule_id, body.is_active)


@router.delete("/{rule_id}", status_code=204)
def delete_rule(rule_id: str, supabase: Any = Depends(get_supabase_client)) -> None:
    rule_store.delete_rule(supabase, rule_id)


@router.get("/{rule_id}/logs", response_model=NotificationLogsResponse)
def list_rule_logs(
    rule_id: str,
    since: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    supabase: Any = Depends(get_supabase_client),
) -> NotificationLogsResponse:
    return _logs_response(supabase, rule_id, since, limit)


def _logs_response(
    supabase: Any, rule_id: Optional[str], since: Optional[str], limit: int
) -> NotificationLogsResponse:
    since_iso = None
    if since:
        since_iso = parse_date_string(since)
        if since_iso is None:
            raise HTTPException(status_code=422, detail=f"Could not parse date: {since}")

    logs = rule_store.list_notification_logs(
        supabase, rule_id=rule_id, since=since_iso, limit=limit
    )
    return NotificationLogsResponse(items=logs, stats=rule_store.summarize_logs(logs))
