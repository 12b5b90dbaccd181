"""
Scheduled Tasks

Background tasks that run periodically:
- send_booking_reminders: reminds participants of tomorrow's appointments
"""

import frappe
from datetime import timedelta

from .participants import registered_user_ids
from .store import (
	current_time,
	get_settings,
	load_appointments,
	load_schedule_info,
	schedule_timezones,
)
from .upcoming import find_tomorrow_reminder


def send_booking_reminders() -> int:
	"""
	Envia o lembrete do dia seguinte para cada participante registrado.
	Executa diariamente (configurado em hooks.py).

	Algoritmo:
		1. Sair se Agenda Settings.send_reminders estiver desligado
		2. Carregar os agendamentos de amanhã
		3. Para cada usuário, escolher o primeiro agendamento de amanhã
		4. Criar a notificação

	Returns:
		int: quantidade de lembretes enviados
	"""
	from agenda_carrinho.agenda_carrinho.notifications.booking import send_reminder

	if not get_settings().send_reminders:
		return 0

	now = current_time()
	tomorrow = now.date() + timedelta(days=1)
	appointments = load_appointments(target_date=tomorrow)
	timezones = schedule_timezones(load_schedule_info(a.schedule_id for a in appointments))

	users = set()
	for appointment in appointments:
		users.update(registered_user_ids(appointment.participants))

	sent_count = 0

	for user in sorted(users):
		appointment = find_tomorrow_reminder(appointments, user, now, timezones)
		if appointment is None:
			continue

		try:
			send_reminder(appointment, user)
			sent_count += 1
		except Exception as e:
			frappe.logger("agenda_carrinho").error(
				f"Erro ao enviar lembrete de {appointment.id} para {user}: {str(e)}"
			)
			# Continuar com os demais usuários
			continue

	if sent_count > 0:
		frappe.logger("agenda_carrinho").info(
			f"send_booking_reminders: {sent_count} lembretes enviados para {tomorrow}"
		)

	return sent_count
