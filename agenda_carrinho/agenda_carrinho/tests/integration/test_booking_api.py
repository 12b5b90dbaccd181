"""
Tests for api/booking_api.py

Tests whitelisted booking endpoints against a site.
"""

import unittest
import frappe
from frappe.utils import add_days, getdate

from agenda_carrinho.api.booking_api import (
	cancel_booking,
	create_booking,
	get_active_schedules,
	get_all_appointments,
	get_available_slots,
	get_bookable_dates,
	get_my_appointments,
	get_tomorrow_reminder,
	reschedule_booking,
	validate_booking,
)


SCHEDULE = "Test Agenda API"


class TestBookingAPI(unittest.TestCase):
	"""Tests for booking API endpoints."""

	def setUp(self):
		"""Set up a schedule open every day and reset rate limits."""
		settings = frappe.get_single("Agenda Settings")
		settings.notify_participants = 0
		settings.booking_window_days = 14
		settings.save(ignore_permissions=True)

		if not frappe.db.exists("Agenda Schedule", SCHEDULE):
			frappe.get_doc({
				"doctype": "Agenda Schedule",
				"schedule_name": SCHEDULE,
				"category": "Carrinho",
				"is_active": 1,
				"slot_duration_minutes": 60,
				"max_participants_per_slot": 2,
				"start_time": "08:00:00",
				"end_time": "10:00:00",
				"days": [
					{"weekday": name}
					for name in (
						"Domingo",
						"Segunda-feira",
						"Terça-feira",
						"Quarta-feira",
						"Quinta-feira",
						"Sexta-feira",
						"Sábado",
					)
				],
			}).insert(ignore_permissions=True)

		for action in (
			"validate_booking",
			"create_booking",
			"reschedule_booking",
			"cancel_booking",
		):
			frappe.cache.delete_value(f"rate_limit:agenda_carrinho:{action}:local")

		frappe.set_user("Administrator")
		self.tomorrow = add_days(getdate(), 1).isoformat()

	def test_active_schedules(self):
		"""Test that the schedule is listed with its time range label."""
		result = {row["name"]: row for row in get_active_schedules()}

		self.assertIn(SCHEDULE, result)
		self.assertEqual(result[SCHEDULE]["time_range"], "08:00 - 10:00")
		self.assertEqual(result[SCHEDULE]["days_of_week"], [0, 1, 2, 3, 4, 5, 6])

	def test_bookable_dates_follow_window(self):
		"""Test that dates start today and stay inside the booking window."""
		result = get_bookable_dates(SCHEDULE)

		self.assertEqual(len(result), 14)
		self.assertEqual(result[0], getdate().isoformat())

	def test_available_slots(self):
		"""Test that slots are serialised with remaining seats."""
		result = get_available_slots(SCHEDULE, self.tomorrow)

		self.assertEqual([slot["time"] for slot in result], ["08:00", "09:00"])
		self.assertEqual(result[0]["capacity_remaining"], 2)
		self.assertTrue(result[0]["is_available"])

	def test_available_slots_unknown_schedule(self):
		"""Test that an unknown schedule fails."""
		with self.assertRaises(frappe.ValidationError):
			get_available_slots("Agenda Inexistente", self.tomorrow)

	def test_validate_booking_not_enough_seats(self):
		"""Test that more participants than seats is reported, not raised."""
		result = validate_booking(
			SCHEDULE,
			self.tomorrow,
			"08:00",
			'[{"manualName": "Ana"}, {"manualName": "Bia"}, {"manualName": "Caio"}]'
		)

		self.assertFalse(result["valid"])
		self.assertEqual(result["capacity_remaining"], 2)
		self.assertEqual(len(result["errors"]), 1)

	def test_validate_booking_unknown_time(self):
		"""Test that a time outside the generated slots is reported."""
		result = validate_booking(SCHEDULE, self.tomorrow, "08:30", '["Administrator"]')

		self.assertFalse(result["valid"])
		self.assertIsNone(result["capacity_remaining"])

	def test_validate_booking_past_date(self):
		"""Test that a date before today is reported, as the controller refuses it."""
		yesterday = add_days(getdate(), -1).isoformat()

		result = validate_booking(SCHEDULE, yesterday, "09:00", '["Administrator"]')

		self.assertFalse(result["valid"])
		self.assertIsNone(result["capacity_remaining"])
		self.assertEqual(len(result["errors"]), 1)

	def test_create_list_and_cancel(self):
		"""Test the booking lifecycle for the logged-in user."""
		booking = create_booking(
			SCHEDULE,
			self.tomorrow,
			"09:00",
			'["Administrator", {"manualName": "Maria"}]'
		)

		self.assertEqual(booking["booked_by"], "Administrator")
		self.assertEqual(booking["schedule_name"], SCHEDULE)
		self.assertEqual(booking["time"], "09:00")
		self.assertEqual(
			[p["participant_type"] for p in booking["participants"]],
			["Registered", "Walk-in"]
		)
		self.assertEqual(booking["participants"][1]["name"], "Maria")

		slots = {slot["time"]: slot for slot in get_available_slots(SCHEDULE, self.tomorrow)}
		self.assertEqual(slots["09:00"]["capacity_remaining"], 0)

		mine = [row["name"] for row in get_my_appointments()]
		self.assertIn(booking["name"], mine)

		reminder = get_tomorrow_reminder()
		self.assertIsNotNone(reminder)
		self.assertEqual(reminder["appointment"]["date"], self.tomorrow)

		cancel_booking(booking["name"])
		self.assertFalse(frappe.db.exists("Agenda Appointment", booking["name"]))

	def test_create_booking_full_slot(self):
		"""Test that a booking beyond capacity is refused on save."""
		create_booking(SCHEDULE, self.tomorrow, "08:00", '[{"manualName": "Ana"}, {"manualName": "Bia"}]')

		with self.assertRaises(frappe.ValidationError):
			create_booking(SCHEDULE, self.tomorrow, "08:00", '[{"manualName": "Caio"}]')

	def test_create_booking_bad_payload(self):
		"""Test that malformed participants are rejected."""
		with self.assertRaises(frappe.ValidationError):
			create_booking(SCHEDULE, self.tomorrow, "08:00", "[]")

		with self.assertRaises(frappe.ValidationError):
			create_booking(SCHEDULE, self.tomorrow, "08:00", '[{"manualName": "  "}]')

	def test_reschedule_booking(self):
		"""Test that a booking moves to another slot and frees the old one."""
		booking = create_booking(SCHEDULE, self.tomorrow, "08:00", '["Administrator", {"manualName": "Maria"}]')

		moved = reschedule_booking(booking["name"], self.tomorrow, "09:00")

		self.assertEqual(moved["name"], booking["name"])
		self.assertEqual(moved["time"], "09:00")

		slots = {slot["time"]: slot for slot in get_available_slots(SCHEDULE, self.tomorrow)}
		self.assertEqual(slots["08:00"]["capacity_remaining"], 2)
		self.assertEqual(slots["09:00"]["capacity_remaining"], 0)

	def test_reschedule_booking_into_full_slot(self):
		"""Test that a booking cannot move into a slot without enough seats."""
		booking = create_booking(SCHEDULE, self.tomorrow, "08:00", '[{"manualName": "Ana"}, {"manualName": "Bia"}]')
		create_booking(SCHEDULE, self.tomorrow, "09:00", '[{"manualName": "Caio"}]')

		with self.assertRaises(frappe.ValidationError):
			reschedule_booking(booking["name"], self.tomorrow, "09:00")

	def test_reschedule_booking_not_allowed(self):
		"""Test that only the booker, participants or System Manager may move a booking."""
		booking = create_booking(SCHEDULE, self.tomorrow, "08:00", '[{"manualName": "Ana"}]')

		frappe.set_user("Guest")
		with self.assertRaises(frappe.PermissionError):
			reschedule_booking(booking["name"], self.tomorrow, "09:00")

	def test_all_appointments_search_and_split(self):
		"""Test the staff listing filtered by date and participant name."""
		booking = create_booking(SCHEDULE, self.tomorrow, "08:00", '[{"manualName": "Mariana Listagem"}]')

		found = get_all_appointments(date=self.tomorrow, search="mariana LISTAGEM")
		not_found = get_all_appointments(date=self.tomorrow, search="zzzz")

		self.assertEqual([row["name"] for row in found["upcoming"]], [booking["name"]])
		self.assertEqual(found["past"], [])
		self.assertEqual(not_found, {"upcoming": [], "past": []})

	def test_all_appointments_staff_only(self):
		"""Test that the staff listing requires System Manager."""
		frappe.set_user("Guest")

		with self.assertRaises(frappe.PermissionError):
			get_all_appointments()

	def tearDown(self):
		"""Clean up after tests."""
		frappe.set_user("Administrator")
		frappe.db.rollback()


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
