"""
Booking Validators

Validation utilities for the booking API inputs.
"""

import re
import frappe
from frappe import _
from typing import Any, List

from agenda_carrinho.agenda_carrinho.scheduling.participants import (
    Participant,
    ParticipantKind,
    parse_participant,
)
from agenda_carrinho.api.security import sanitize_string


MAX_PARTICIPANTS_PER_BOOKING = 20


def validate_date_string(date_str: str, field_name: str = "date") -> str:
    """
    Validate date string format (YYYY-MM-DD).

    Args:
        date_str: Date string to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated date string

    Raises:
        frappe.ValidationError: If date format is invalid
    """
    if not date_str:
        frappe.throw(_("{0} é obrigatório").format(field_name), frappe.ValidationError)

    date_str = str(date_str).strip()

    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        frappe.throw(
            _("Formato inválido para {0}. Use AAAA-MM-DD").format(field_name), frappe.ValidationError
        )

    return date_str


def validate_time_string(time_str: str, field_name: str = "time") -> str:
    """
    Validate a slot time (HH:MM, seconds optional) and return it as HH:MM.

    Raises:
        frappe.ValidationError: If time format is invalid
    """
    if not time_str:
        frappe.throw(_("{0} é obrigatório").format(field_name), frappe.ValidationError)

    time_str = str(time_str).strip()

    match = re.match(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$", time_str)
    if not match:
        frappe.throw(
            _("Formato inválido para {0}. Use HH:MM").format(field_name), frappe.ValidationError
        )

    return f"{match.group(1)}:{match.group(2)}"


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (ID).

    Ensures the name is not too long and doesn't contain injection patterns.

    Raises:
        frappe.ValidationError: If name is invalid
    """
    if not name:
        frappe.throw(_("{0} é obrigatório").format(field_name), frappe.ValidationError)

    name = str(name).strip()

    if len(name) > 140:
        frappe.throw(_("{0} é longo demais").format(field_name), frappe.ValidationError)

    # Block obvious injection attempts
    dangerous_patterns = [
        r"<script",
        r"javascript:",
        r"SELECT\s+",
        r"INSERT\s+",
        r"UPDATE\s+",
        r"DELETE\s+",
        r"DROP\s+",
        r"UNION\s+",
        r"--",
        r";",
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, name, re.IGNORECASE):
            frappe.throw(_("{0} inválido").format(field_name), frappe.ValidationError)

    return name


def validate_participants_payload(raw: Any) -> List[Participant]:
    """
    Parse the participants argument (JSON string or list).

    Each item is a user id, {"manualName": "..."} or a participant row.

    Raises:
        frappe.ValidationError: If the list is empty, too long or malformed
    """
    items = frappe.parse_json(raw) if isinstance(raw, str) else raw

    if not items or not isinstance(items, list):
        frappe.throw(_("Informe pelo menos um participante"), frappe.ValidationError)

    if len(items) > MAX_PARTICIPANTS_PER_BOOKING:
        frappe.throw(_("Participantes demais"), frappe.ValidationError)

    participants = []
    for idx, item in enumerate(items, 1):
        try:
            participant = parse_participant(item)
        except ValueError:
            frappe.throw(_("Participante {0} inválido").format(idx), frappe.ValidationError)

        if participant.kind is ParticipantKind.WALK_IN:
            participant = Participant.walk_in(sanitize_string(participant.name))
        else:
            participant = Participant.registered(validate_docname(participant.user_id, "user"))

        participants.append(participant)

    return participants
