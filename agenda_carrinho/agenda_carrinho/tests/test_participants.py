"""
Tests for scheduling/participants.py

Tests parsing of frontend payloads and display names.
"""

import unittest

from agenda_carrinho.agenda_carrinho.scheduling.participants import (
	Participant,
	ParticipantKind,
	parse_participant,
	participant_display_name,
	participant_to_row,
	registered_user_ids,
)


class TestParseParticipant(unittest.TestCase):
	"""Tests for parse_participant."""

	def test_user_id_string(self):
		"""Test that a bare string is a registered user."""
		participant = parse_participant(" joao@example.com ")

		self.assertEqual(participant, Participant.registered("joao@example.com"))
		self.assertTrue(participant.is_registered)

	def test_manual_name(self):
		"""Test the legacy walk-in object."""
		participant = parse_participant({"manualName": "  Maria Silva "})

		self.assertEqual(participant.kind, ParticipantKind.WALK_IN)
		self.assertEqual(participant.name, "Maria Silva")

	def test_user_object(self):
		"""Test a {"user": ...} object."""
		self.assertEqual(parse_participant({"user": "ana@example.com"}), Participant.registered("ana@example.com"))

	def test_table_rows(self):
		"""Test child table rows of both kinds."""
		self.assertEqual(
			parse_participant({"participant_type": "Registered", "user": "ana@example.com"}),
			Participant.registered("ana@example.com")
		)
		self.assertEqual(
			parse_participant({"participant_type": "Walk-in", "participant_name": "Bia"}),
			Participant.walk_in("Bia")
		)

	def test_invalid_payloads(self):
		"""Test that unknown or blank payloads raise ValueError."""
		for raw in ("", "   ", {"manualName": ""}, {"participant_type": "Guest"}, {}, 42, None):
			with self.assertRaises(ValueError):
				parse_participant(raw)


class TestParticipantHelpers(unittest.TestCase):
	"""Tests for display names and user ids."""

	def test_display_name(self):
		"""Test registered, missing and walk-in names."""
		users = {"ana@example.com": "Ana Souza"}

		self.assertEqual(participant_display_name(Participant.registered("ana@example.com"), users), "Ana Souza")
		self.assertEqual(participant_display_name(Participant.registered("x@example.com"), users), "Desconhecido")
		self.assertEqual(participant_display_name(Participant.walk_in("Bia"), users), "Bia")
		self.assertEqual(
			participant_display_name(Participant.registered("x@example.com"), users, "Usuário Removido"),
			"Usuário Removido"
		)

	def test_registered_user_ids(self):
		"""Test that walk-ins are skipped and repeated users appear once."""
		participants = [
			Participant.registered("b@example.com"),
			Participant.walk_in("Ana"),
			Participant.registered("a@example.com"),
			Participant.registered("b@example.com"),
		]

		self.assertEqual(registered_user_ids(participants), ["b@example.com", "a@example.com"])

	def test_participant_to_row(self):
		"""Test the child table row representation."""
		self.assertEqual(
			participant_to_row(Participant.walk_in("Bia")),
			{"participant_type": "Walk-in", "user": None, "participant_name": "Bia"}
		)


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
