"""
Tests for scheduling/occupancy.py

Tests seat counting for a single slot.
"""

import unittest
from datetime import date, time

from agenda_carrinho.agenda_carrinho.scheduling.model import Appointment, DayWindow, Schedule
from agenda_carrinho.agenda_carrinho.scheduling.occupancy import check_capacity, count_occupied_seats
from agenda_carrinho.agenda_carrinho.scheduling.participants import Participant


MONDAY = date(2026, 1, 19)


class TestOccupancy(unittest.TestCase):
	"""Tests for count_occupied_seats and check_capacity."""

	def setUp(self):
		"""Set up one schedule with three appointments."""
		self.schedule = Schedule(
			id="Carrinho Estação",
			name="Carrinho Estação",
			default_window=DayWindow(time(8, 0), time(12, 0)),
			slot_duration=60,
			days_of_week=frozenset({1}),
			max_participants_per_slot=3,
		)
		self.appointments = [
			Appointment(
				id="AGD-1",
				schedule_id="Carrinho Estação",
				date=MONDAY,
				time=time(9, 0),
				participants=(Participant.registered("a@example.com"), Participant.walk_in("Ana")),
			),
			Appointment(
				id="AGD-2",
				schedule_id="Carrinho Estação",
				date=MONDAY,
				# Segundos não contam na comparação
				time=time(9, 0, 30),
				participants=(Participant.walk_in("Bia"),),
			),
			Appointment(
				id="AGD-3",
				schedule_id="Carrinho Estação",
				date=MONDAY,
				time=time(10, 0),
				participants=(Participant.walk_in("Caio"),),
			),
		]

	def test_count_seats(self):
		"""Test that participants of every appointment in the slot are summed."""
		self.assertEqual(
			count_occupied_seats(self.appointments, "Carrinho Estação", MONDAY, time(9, 0)),
			3
		)
		self.assertEqual(
			count_occupied_seats(self.appointments, "Carrinho Estação", MONDAY, time(11, 0)),
			0
		)

	def test_count_excluding(self):
		"""Test that the excluded appointment is not counted."""
		self.assertEqual(
			count_occupied_seats(
				self.appointments, "Carrinho Estação", MONDAY, time(9, 0), exclude_appointment="AGD-1"
			),
			1
		)

	def test_count_other_schedule(self):
		"""Test that another schedule's appointments are ignored."""
		self.assertEqual(count_occupied_seats(self.appointments, "Outra", MONDAY, time(9, 0)), 0)

	def test_check_capacity_exceeded(self):
		"""Test that requesting seats beyond capacity is flagged."""
		result = check_capacity(self.schedule, self.appointments, MONDAY, time(10, 0), seats_requested=3)

		self.assertEqual(result["overlapping_appointments"], ["AGD-3"])
		self.assertEqual(result["capacity_used"], 1)
		self.assertEqual(result["capacity_available"], 2)
		self.assertTrue(result["capacity_exceeded"])

	def test_check_capacity_fits(self):
		"""Test that a request filling the slot exactly is accepted."""
		result = check_capacity(self.schedule, self.appointments, MONDAY, time(10, 0), seats_requested=2)

		self.assertFalse(result["capacity_exceeded"])

	def test_check_capacity_full(self):
		"""Test a full slot with no request."""
		result = check_capacity(self.schedule, self.appointments, MONDAY, time(9, 0))

		self.assertEqual(result["capacity_available"], 0)
		self.assertFalse(result["capacity_exceeded"])


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
