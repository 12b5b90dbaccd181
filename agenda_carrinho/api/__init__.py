"""
Agenda Carrinho API

Structure:
    api/
    ├── __init__.py              # This file
    ├── booking_api.py           # Whitelisted booking endpoints
    ├── security.py              # Rate limiting and sanitization
    └── shared/                  # Shared utilities
        ├── __init__.py          # Re-exports security helpers and validators
        └── validators.py        # Booking input validators

Usage:
    frappe.call("agenda_carrinho.api.booking_api.get_available_slots", ...)
"""
