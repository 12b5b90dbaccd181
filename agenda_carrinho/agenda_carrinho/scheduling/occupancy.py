"""
Occupancy Service

Counts the seats taken in a slot, considering:
- Schedule capacity (max participants per slot)
- Participants of every appointment in the same schedule/date/time
- An appointment to ignore (when an existing booking is edited)
"""

from datetime import date, time
from typing import Any, Dict, Iterable, List, Optional

from .model import Appointment, Schedule


def _same_slot(
	appointment: Appointment,
	schedule_id: Optional[str],
	target_date: date,
	slot_time: time,
	exclude_appointment: Optional[str]
) -> bool:
	if exclude_appointment and appointment.id == exclude_appointment:
		return False
	# Sem schedule_id, o chamador já filtrou pela agenda
	if schedule_id and appointment.schedule_id and appointment.schedule_id != schedule_id:
		return False
	return (
		appointment.date == target_date
		and appointment.time.hour == slot_time.hour
		and appointment.time.minute == slot_time.minute
	)


def count_occupied_seats(
	appointments: Iterable[Appointment],
	schedule_id: Optional[str],
	target_date: date,
	slot_time: time,
	exclude_appointment: Optional[str] = None
) -> int:
	"""
	Soma os participantes dos agendamentos do horário.

	Args:
		appointments: agendamentos existentes
		schedule_id: agenda do horário
		target_date: data do horário
		slot_time: início do horário
		exclude_appointment: id do agendamento a ignorar (para edições)
	"""
	return sum(
		appointment.seats
		for appointment in appointments
		if _same_slot(appointment, schedule_id, target_date, slot_time, exclude_appointment)
	)


def check_capacity(
	schedule: Schedule,
	appointments: Iterable[Appointment],
	target_date: date,
	slot_time: time,
	seats_requested: int = 0,
	exclude_appointment: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Verifica se `seats_requested` vagas cabem no horário.

	Returns:
		dict: {
			"overlapping_appointments": [ids dos agendamentos do horário],
			"capacity_used": int,
			"capacity_available": int,
			"capacity_exceeded": bool
		}
	"""
	overlapping: List[Appointment] = [
		appointment
		for appointment in appointments
		if _same_slot(appointment, schedule.id, target_date, slot_time, exclude_appointment)
	]

	capacity = schedule.max_participants_per_slot
	capacity_used = sum(appointment.seats for appointment in overlapping)
	capacity_available = max(0, capacity - capacity_used)

	return {
		"overlapping_appointments": [appointment.id for appointment in overlapping],
		"capacity_used": capacity_used,
		"capacity_available": capacity_available,
		"capacity_exceeded": capacity_used + seats_requested > capacity,
	}
