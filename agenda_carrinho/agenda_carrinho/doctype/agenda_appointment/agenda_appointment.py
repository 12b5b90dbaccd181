# Copyright (c) 2026, Agenda Carrinho contributors
# For license information, please see license.txt

"""
Agenda Appointment DocType

Reserva de um horário de uma agenda por um ou mais participantes.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import getdate

from agenda_carrinho.agenda_carrinho.scheduling.occupancy import check_capacity
from agenda_carrinho.agenda_carrinho.scheduling.slots import find_slot, generate_available_slots
from agenda_carrinho.agenda_carrinho.scheduling.store import (
	current_time,
	get_settings,
	load_appointments,
	load_schedule,
	lock_schedule,
)
from agenda_carrinho.agenda_carrinho.scheduling.windows import is_past_date, to_time


class AgendaAppointment(Document):
	"""
	Agenda Appointment with slot and capacity validation.

	Fluxo:
	1. O horário precisa ser um dos horários gerados para a data
	2. A agenda é bloqueada (FOR UPDATE) antes de contar as vagas, então
	   reservas simultâneas na mesma agenda são serializadas
	3. Após inserir, os demais participantes registrados são notificados
	"""

	def validate(self) -> None:
		"""
		Validação antes de salvar.

		Executa:
		1. Validar agenda obrigatória
		2. Preencher booked_by
		3. Validar participantes
		4. Validar horário e vagas (só quando agenda/data/hora/participantes mudam)
		"""
		self._validate_schedule()
		self._set_booked_by()
		self._validate_participants()

		if self._slot_changed():
			self._validate_slot_and_capacity()

	def after_insert(self) -> None:
		self._enqueue_participant_notification()

	# ===== VALIDATION METHODS =====

	def _validate_schedule(self) -> None:
		"""Valida que schedule esteja presente."""
		if not self.schedule:
			frappe.throw(_("Agenda é obrigatória"))

		if not self.date or not self.time:
			frappe.throw(_("Data e horário são obrigatórios"))

	def _set_booked_by(self) -> None:
		if not self.booked_by:
			self.booked_by = frappe.session.user

	def _validate_participants(self) -> None:
		"""
		Valida a tabela de participantes.

		- Pelo menos um participante
		- Registrado exige usuário, avulso exige nome
		- O mesmo usuário não pode aparecer duas vezes
		"""
		if not self.participants:
			frappe.throw(_("Informe pelo menos um participante"))

		seen_users = set()

		for idx, row in enumerate(self.participants, 1):
			if row.participant_type == "Registered":
				if not row.user:
					frappe.throw(_("Participante {0}: usuário é obrigatório").format(idx))
				if row.user in seen_users:
					frappe.throw(_("Participante {0}: {1} já está neste agendamento").format(idx, row.user))
				seen_users.add(row.user)
				row.participant_name = None

			elif row.participant_type == "Walk-in":
				row.participant_name = (row.participant_name or "").strip()
				if not row.participant_name:
					frappe.throw(_("Participante {0}: nome é obrigatório").format(idx))
				row.user = None

			else:
				frappe.throw(_("Participante {0}: tipo inválido").format(idx))

	def _slot_changed(self) -> bool:
		if self.is_new():
			return True

		before = self.get_doc_before_save()
		if not before:
			return True

		if (
			before.schedule != self.schedule
			or getdate(before.date) != getdate(self.date)
			or to_time(before.time) != to_time(self.time)
		):
			return True

		return len(self.participants) > len(before.participants or [])

	def _validate_slot_and_capacity(self) -> None:
		"""
		Valida que o horário existe na data e que há vagas para todos os
		participantes.

		A leitura dos agendamentos acontece depois do lock da agenda, dentro
		da mesma transação da gravação.
		"""
		lock_schedule(self.schedule)
		schedule = load_schedule(self.schedule)

		if not schedule.active:
			frappe.throw(_("A agenda {0} está pausada").format(schedule.name))

		target_date = getdate(self.date)
		now = current_time()

		if is_past_date(target_date, now, schedule.timezone):
			frappe.throw(_("Não é possível agendar em data passada"))

		exclude = None if self.is_new() else self.name
		appointments = load_appointments(self.schedule, target_date=target_date)

		slots = generate_available_slots(schedule, target_date, appointments, now, exclude_appointment=exclude)

		slot_time = to_time(self.time).strftime("%H:%M")
		slot = find_slot(slots, slot_time)

		if slot is None:
			frappe.throw(
				_("O horário {0} não está disponível em {1}").format(
					slot_time, target_date.strftime("%d/%m/%Y")
				)
			)

		seats = len(self.participants)
		capacity = check_capacity(
			schedule,
			appointments,
			target_date,
			slot.start.time(),
			seats_requested=seats,
			exclude_appointment=exclude
		)

		if capacity["capacity_exceeded"]:
			frappe.throw(
				_("Não há vagas suficientes às {0}: restam {1}, solicitadas {2}").format(
					slot_time, capacity["capacity_available"], seats
				)
			)

	# ===== NOTIFICATIONS =====

	def _enqueue_participant_notification(self) -> None:
		if not get_settings().notify_participants:
			return

		frappe.enqueue(
			"agenda_carrinho.agenda_carrinho.notifications.booking.notify_participants",
			appointment_name=self.name,
			queue="short",
			enqueue_after_commit=True,
		)
