# Copyright (c) 2026, Agenda Carrinho contributors
# For license information, please see license.txt

"""
Booking Notification Service

In-app notifications (Notification Log, shown in the desk bell):
  - notify_participants: tells the other registered participants about a new
    booking
  - send_reminder: "appointment tomorrow" reminder for one participant
"""

import frappe
from frappe import _
from frappe.desk.doctype.notification_log.notification_log import enqueue_create_notification
from frappe.utils import format_date

from agenda_carrinho.agenda_carrinho.scheduling.model import Appointment
from agenda_carrinho.agenda_carrinho.scheduling.participants import registered_user_ids
from agenda_carrinho.agenda_carrinho.scheduling.store import (
	APPOINTMENT_DOCTYPE,
	SCHEDULE_DOCTYPE,
	appointment_from_doc,
)


logger = frappe.logger("agenda_carrinho")


def _schedule_label(appointment: Appointment) -> str:
	return frappe.db.get_value(SCHEDULE_DOCTYPE, appointment.schedule_id, "schedule_name") or appointment.schedule_id


def notify_participants(appointment_name: str) -> None:
	"""
	Avisa os participantes registrados (exceto quem agendou) do novo
	agendamento.

	Roda como job em background (enqueue_after_commit=True).

	Args:
		appointment_name: nome do Agenda Appointment
	"""
	try:
		doc = frappe.get_doc(APPOINTMENT_DOCTYPE, appointment_name)
		appointment = appointment_from_doc(doc)

		recipients = [
			user for user in registered_user_ids(appointment.participants)
			if user != appointment.booked_by
		]

		if not recipients:
			logger.info(f"No participants to notify for appointment {appointment_name}")
			return

		booked_by_name = frappe.utils.get_fullname(appointment.booked_by)
		subject = _("{0} agendou você em {1}: {2} às {3}").format(
			booked_by_name,
			_schedule_label(appointment),
			format_date(appointment.date, "dd/MM/yyyy"),
			appointment.time.strftime("%H:%M"),
		)

		enqueue_create_notification(recipients, frappe._dict({
			"type": "Alert",
			"document_type": APPOINTMENT_DOCTYPE,
			"document_name": appointment.id,
			"subject": subject,
			"from_user": appointment.booked_by,
		}))

		logger.info(f"Booking notification sent for {appointment_name} to {recipients}")

	except Exception as e:
		frappe.log_error(
			message=f"Failed to notify participants of {appointment_name}: {str(e)}",
			title="Agenda Booking Notification Failed"
		)


def send_reminder(appointment: Appointment, user: str) -> None:
	"""Lembrete "Não esqueça do seu agendamento amanhã!" para um usuário."""
	subject = _("Não esqueça do seu agendamento amanhã! {0} às {1}").format(
		_schedule_label(appointment),
		appointment.time.strftime("%H:%M"),
	)

	enqueue_create_notification(user, frappe._dict({
		"type": "Alert",
		"document_type": APPOINTMENT_DOCTYPE,
		"document_name": appointment.id,
		"subject": subject,
	}))
