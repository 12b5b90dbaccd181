"""
Appointment Lists

Selects a user's future appointments, the one that deserves an
"appointment tomorrow" reminder, and builds the staff listing (search by
participant name, upcoming/past split).

Appointment times are wall clock times of their schedule's timezone, so `now`
is converted per schedule before comparing.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Mapping, Optional, Tuple

from .model import Appointment
from .participants import participant_display_name
from .windows import localize_now


def _starts_at(appointment: Appointment) -> datetime:
	return datetime.combine(appointment.date, appointment.time)


def _local_now(
	appointment: Appointment,
	now: datetime,
	timezones: Optional[Mapping[str, Optional[str]]]
) -> datetime:
	tz_name = (timezones or {}).get(appointment.schedule_id)
	return localize_now(now, tz_name)


def _is_participant(appointment: Appointment, user_id: str) -> bool:
	return any(
		participant.is_registered and participant.user_id == user_id
		for participant in appointment.participants
	)


def get_upcoming_appointments(
	appointments: Iterable[Appointment],
	user_id: str,
	now: datetime,
	timezones: Optional[Mapping[str, Optional[str]]] = None
) -> List[Appointment]:
	"""
	Agendamentos futuros em que o usuário é participante registrado,
	do mais próximo ao mais distante.

	Args:
		appointments: agendamentos candidatos
		user_id: usuário
		now: data/hora atual; com tzinfo é convertida para o fuso de cada agenda
		timezones: mapa schedule_id -> fuso (ausente = hora local de `now`)
	"""
	upcoming = [
		appointment
		for appointment in appointments
		if _is_participant(appointment, user_id)
		and _starts_at(appointment) > _local_now(appointment, now, timezones)
	]
	upcoming.sort(key=_starts_at)
	return upcoming


def find_tomorrow_reminder(
	appointments: Iterable[Appointment],
	user_id: str,
	now: datetime,
	timezones: Optional[Mapping[str, Optional[str]]] = None
) -> Optional[Appointment]:
	"""Primeiro agendamento futuro do usuário marcado para amanhã."""
	for appointment in get_upcoming_appointments(appointments, user_id, now, timezones):
		tomorrow = _local_now(appointment, now, timezones).date() + timedelta(days=1)
		if appointment.date == tomorrow:
			return appointment
	return None


def search_by_participant_name(
	appointments: Iterable[Appointment],
	search: Optional[str],
	users: Mapping[str, str],
	missing: str = "Desconhecido"
) -> List[Appointment]:
	"""
	Agendamentos com algum participante cujo nome contém `search`
	(sem diferenciar maiúsculas). Sem `search`, devolve todos.
	"""
	appointments = list(appointments)
	term = (search or "").strip().lower()
	if not term:
		return appointments

	return [
		appointment
		for appointment in appointments
		if any(
			term in participant_display_name(participant, users, missing).lower()
			for participant in appointment.participants
		)
	]


def split_upcoming_and_past(
	appointments: Iterable[Appointment],
	now: datetime,
	timezones: Optional[Mapping[str, Optional[str]]] = None
) -> Tuple[List[Appointment], List[Appointment]]:
	"""
	Separa em (próximos, realizados).

	Próximos do mais cedo ao mais tarde; realizados do mais recente ao mais
	antigo. Um agendamento que começa exatamente agora já conta como realizado.
	"""
	upcoming = []
	past = []
	for appointment in appointments:
		if _starts_at(appointment) > _local_now(appointment, now, timezones):
			upcoming.append(appointment)
		else:
			past.append(appointment)

	upcoming.sort(key=_starts_at)
	past.sort(key=_starts_at, reverse=True)
	return upcoming, past
