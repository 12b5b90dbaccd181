# Copyright (c) 2026, Agenda Carrinho contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document


class AgendaSettings(Document):
	def validate(self) -> None:
		if self.booking_window_days is not None and self.booking_window_days < 1:
			frappe.throw(_("Dias abertos para agendamento deve ser pelo menos 1"))
