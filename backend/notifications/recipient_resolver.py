"""
Recipient resolution for notification rules.

Translates a rule's recipient settings (specific users, a role, the
client or clinician on the triggering entity) into contactable identities.
"""

from typing import Any, Dict, List, Optional

from models.notification import NotificationRule, Recipient, RecipientType

PROFILE_COLUMNS = "id, email, phone"


def _fetch_contact(supabase: Any, table: str, record_id: Any) -> Optional[Dict[str, Any]]:
    """Look up one row with contact columns. Failed lookups count as missing."""
    try:
        response = (
            supabase.table(table)
            .select(PROFILE_COLUMNS)
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        print(f"  ⚠️  Could not look up {table} {record_id}: {e}")
        return None

    if not response.data:
        return None
    return response.data[0]


def _to_recipient(row: Dict[str, Any], recipient_type: str) -> Recipient:
    return Recipient(
        id=str(row["id"]),
        type=recipient_type,
        email=row.get("email"),
        phone=row.get("phone"),
    )


def _role_member_ids(supabase: Any, role_name: str) -> List[str]:
    try:
        response = (
            supabase.table("user_roles").select("user_id").eq("role", role_name).execute()
        )
    except Exception as e:
        print(f"  ⚠️  Could not load members of role {role_name}: {e}")
        return []
    return [row["user_id"] for row in response.data or [] if row.get("user_id")]


def _dedupe(recipients: List[Recipient]) -> List[Recipient]:
    seen = set()
    unique = []
    for recipient in recipients:
        key = (recipient.type, recipient.id)
        if key in seen:
            continue
        seen.add(key)
        unique.append(recipient)
    return unique


def resolve_recipients(
    supabase: Any,
    rule: NotificationRule,
    entity_data: Dict[str, Any],
    dedupe: bool = False,
) -> List[Recipient]:
    """
    Resolve the concrete recipients for one rule firing.

    Unknown ids are skipped rather than treated as errors. Supervisor and
    Administrator recipient types have no lookup and resolve to nobody.

    Args:
        supabase: Supabase client
        rule: Rule being fired
        entity_data: Data of the entity that triggered the event
        dedupe: Drop repeated (type, id) pairs, keeping the first occurrence

    Returns:
        List of recipients in resolution order
    """
    recipients: List[Recipient] = []
    entity_data = entity_data or {}

    if rule.recipient_type is RecipientType.SPECIFIC_USER:
        for user_id in rule.recipients:
            profile = _fetch_contact(supabase, "profiles", user_id)
            if profile:
                recipients.append(_to_recipient(profile, "User"))

    elif rule.recipient_type is RecipientType.ROLE:
        for role_name in rule.recipients:
            for user_id in _role_member_ids(supabase, role_name):
                profile = _fetch_contact(supabase, "profiles", user_id)
                if profile:
                    recipients.append(_to_recipient(profile, "User"))

    elif rule.recipient_type is RecipientType.CLIENT:
        client_id = entity_data.get("client_id")
        if client_id:
            client = _fetch_contact(supabase, "clients", client_id)
            if client:
                recipients.append(_to_recipient(client, "Client"))

    elif rule.recipient_type is RecipientType.CLINICIAN:
        clinician_id = entity_data.get("clinician_id")
        if clinician_id:
            profile = _fetch_contact(supabase, "profiles", clinician_id)
            if profile:
                recipients.append(_to_recipient(profile, "User"))

    else:
        print(
            f"  ⚠️  Recipient type '{rule.recipient_type.value}' has no lookup, "
            f"rule '{rule.rule_name}' resolves to no recipients"
        )

    if dedupe:
        recipients = _dedupe(recipients)

    return recipients
