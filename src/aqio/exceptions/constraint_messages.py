"""
Turn raw constraint-violation text into structured data and user-facing messages.

SQLite reports constraint failures as plain text:

    UNIQUE constraint failed: users.email
    UNIQUE constraint failed: event_registrations.event_id, event_registrations.user_id
    NOT NULL constraint failed: users.name
    CHECK constraint failed: ck_users_role

The parsers extract (table, field) from that text with an anchored pattern and
fall back to a plain substring scan when the pattern does not match. The
translator then looks the (table, field, constraint type) triple up in a curated
table of messages and falls back to a generic message built from the field name.
Raw engine text is never returned to callers.
"""

import re

UNIQUE = "unique"
NOT_NULL = "not_null"
CHECK = "check"

_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: (?P<cols>[\w.]+(?:\s*,\s*[\w.]+)*)\s*$", re.IGNORECASE)
_NOT_NULL_RE = re.compile(r"NOT NULL constraint failed: (?P<col>[\w]+\.[\w]+)\s*$", re.IGNORECASE)
_CHECK_PREFIX = "CHECK constraint failed: "
_QUALIFIED_COLUMN_RE = re.compile(r"\b(?P<table>[A-Za-z_]\w*)\.(?P<field>[A-Za-z_]\w*)\b")
_LEADING_IDENTIFIER_RE = re.compile(r"^\s*\(?\s*(?P<name>[A-Za-z_]\w*)")


# (table, field, constraint type) -> message
CONSTRAINT_MESSAGES: dict[tuple[str, str, str], str] = {
    # users
    ("users", "email", UNIQUE): "This email address is already registered. Please use a different email or try signing in.",
    ("users", "keycloak_id", UNIQUE): "This account is already linked to an existing user.",
    ("users", "email", NOT_NULL): "An email address is required.",
    ("users", "name", CHECK): "Name must not be empty.",
    ("users", "role", CHECK): "Role must be one of: admin, organizer, participant.",
    # companies
    ("companies", "org_number", UNIQUE): "A company with this organization number already exists.",
    ("companies", "industry_type", CHECK): "Industry type must be one of: Salmon, Trout, Other.",
    # event categories
    ("event_categories", "id", UNIQUE): "This category ID is already in use. Please choose a different ID.",
    ("event_categories", "name", UNIQUE): "This category name is already taken. Please choose a different name.",
    # events
    ("events", "id", UNIQUE): "An event with this ID already exists.",
    ("events", "title", NOT_NULL): "An event title is required.",
    ("events", "location_type", CHECK): "Location type must be one of: physical, virtual, hybrid.",
    ("events", "status", CHECK): "Event status must be one of: draft, published, cancelled, completed.",
    ("events", "dates", CHECK): "End date must be after start date.",
    # invitations
    ("event_invitations", "invited_user_id", UNIQUE): "This user has already been invited to this event.",
    ("event_invitations", "invited_contact_id", UNIQUE): "This contact has already been invited to this event.",
    ("event_invitations", "invited_email", UNIQUE): "This email address has already been invited to this event.",
    ("event_invitations", "invitation_token", UNIQUE): "This invitation token is already in use.",
    ("event_invitations", "invitation_target", CHECK): "An invitation needs either a user or both an email and a name.",
    ("event_invitations", "status", CHECK): "Invitation status is not valid.",
    ("event_invitations", "invitation_method", CHECK): "Invitation method must be one of: email, sms, manual, bulk_import.",
    # registrations
    ("event_registrations", "user_id", UNIQUE): "You are already registered for this event.",
    ("event_registrations", "external_contact_id", UNIQUE): "This contact is already registered for this event.",
    ("event_registrations", "registrant_email", UNIQUE): "This email address is already registered for this event.",
    ("event_registrations", "registrant_identity", CHECK): "A registration needs a user, a contact, or both an email and a name.",
    ("event_registrations", "status", CHECK): "Registration status is not valid.",
    ("event_registrations", "guest_count", CHECK): "Guest count cannot be negative.",
}

_GENERIC_MESSAGES = {
    UNIQUE: "This {field} is already taken. Please choose a different value.",
    NOT_NULL: "The field '{field}' is required and cannot be empty.",
    CHECK: "The value provided for {field} is not valid.",
}

_UNKNOWN_FIELD_MESSAGE = "A database constraint was violated. Please check your input."


# -----------------------
# Parsers
# -----------------------


def _split_qualified(column: str) -> tuple[str | None, str | None]:
    table, _, field = column.strip().rpartition(".")
    return (table or None), (field or None)


def parse_unique_constraint_error(message: str) -> tuple[str | None, str | None, str | None]:
    """
    Parse a UNIQUE violation into (table, field, value).

    Composite keys report their last column, which is the one that tells the
    duplicates apart (e.g. `user_id` in `(event_id, user_id)`). SQLite never
    includes the value, so the third element is always None here.
    """
    if not message:
        return None, None, None

    m = _UNIQUE_RE.search(message)
    if m:
        last = re.split(r"\s*,\s*", m.group("cols"))[-1]
        table, field = _split_qualified(last)
        if table and field:
            return table, field, None

    # Fallback: any "table.column" token after the word UNIQUE
    idx = message.upper().find("UNIQUE")
    if idx != -1:
        matches = list(_QUALIFIED_COLUMN_RE.finditer(message[idx:]))
        if matches:
            return matches[-1].group("table"), matches[-1].group("field"), None

    return None, None, None


def parse_not_null_constraint_error(message: str) -> tuple[str | None, str | None]:
    """Parse a NOT NULL violation into (table, field)."""
    if not message:
        return None, None

    m = _NOT_NULL_RE.search(message)
    if m:
        return _split_qualified(m.group("col"))

    idx = message.upper().find("NOT NULL")
    if idx != -1:
        found = _QUALIFIED_COLUMN_RE.search(message[idx:])
        if found:
            return found.group("table"), found.group("field")

    return None, None


def parse_check_constraint_error(message: str) -> str | None:
    """Return the constraint name or expression a CHECK violation reports."""
    if not message:
        return None

    idx = message.find(_CHECK_PREFIX)
    if idx == -1:
        idx = message.upper().find(_CHECK_PREFIX.upper())
    if idx == -1:
        return None

    constraint = message[idx + len(_CHECK_PREFIX):].strip()
    return constraint or None


def check_constraint_field(constraint: str | None, table: str | None = None) -> tuple[str | None, str | None]:
    """
    Work out (table, field) for a CHECK violation.

    Handles, in order:
      - names following the metadata naming convention: `ck_<table>_<field>`
      - qualified columns inside an expression: `users.role IN (...)`
      - the leading identifier of an expression: `role IN (...)`
    """
    if not constraint:
        return table, None

    if table and constraint.startswith(f"ck_{table}_"):
        return table, constraint[len(f"ck_{table}_"):]

    qualified = _QUALIFIED_COLUMN_RE.search(constraint)
    if qualified:
        return qualified.group("table"), qualified.group("field")

    leading = _LEADING_IDENTIFIER_RE.search(constraint)
    if leading:
        return table, leading.group("name")

    return table, None


# -----------------------
# Translator
# -----------------------


def humanize_field(field: str) -> str:
    return field.replace("_", " ")


def create_user_friendly_constraint_message(
    table: str | None,
    field: str | None,
    constraint_type: str,
    raw_message: str | None = None,
) -> str:
    """
    Return the message to show for a constraint violation.

    Curated (table, field, constraint_type) messages win; otherwise a generic
    message built from the field name. `raw_message` is accepted so callers can
    pass everything they have, but it is never echoed back.
    """
    if table and field:
        curated = CONSTRAINT_MESSAGES.get((table, field, constraint_type))
        if curated:
            return curated

    if not field:
        return _UNKNOWN_FIELD_MESSAGE

    template = _GENERIC_MESSAGES.get(constraint_type)
    if template is None:
        return _UNKNOWN_FIELD_MESSAGE
    return template.format(field=humanize_field(field))


__all__ = [
    "UNIQUE",
    "NOT_NULL",
    "CHECK",
    "CONSTRAINT_MESSAGES",
    "parse_unique_constraint_error",
    "parse_not_null_constraint_error",
    "parse_check_constraint_error",
    "check_constraint_field",
    "humanize_field",
    "create_user_friendly_constraint_message",
]
