"""
Scheduling Services Module

This module provides core business logic for schedule booking:
- Domain model (model.py, participants.py)
- Opening hours per weekday (windows.py)
- Seat counting (occupancy.py)
- Slot generation for UI (slots.py)
- Upcoming appointments and reminders (upcoming.py)
- Frappe-backed loaders (store.py)
- Scheduled tasks (tasks.py)
"""
