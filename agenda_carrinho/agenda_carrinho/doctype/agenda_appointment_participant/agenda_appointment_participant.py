# Copyright (c) 2026, Agenda Carrinho contributors
# For license information, please see license.txt

from frappe.model.document import Document


class AgendaAppointmentParticipant(Document):
	pass
