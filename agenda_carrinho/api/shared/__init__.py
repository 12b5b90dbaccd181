"""
Shared utilities for the Agenda Carrinho API.

Re-exports security helpers and the booking input validators.
"""

from agenda_carrinho.api.security import (
    check_rate_limit,
    get_client_ip,
    sanitize_string,
)

from .validators import (
    validate_date_string,
    validate_time_string,
    validate_docname,
    validate_participants_payload,
)

__all__ = [
    # Security
    "check_rate_limit",
    "get_client_ip",
    "sanitize_string",
    # Validators
    "validate_date_string",
    "validate_time_string",
    "validate_docname",
    "validate_participants_payload",
]
