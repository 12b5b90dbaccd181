"""
Slot Generation Service

Generates the bookable time slots of a schedule for one date, considering:
- Active weekdays and per-weekday opening hours
- Slots already past on the current day
- Seats taken by existing appointments
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from .model import Appointment, Schedule, ScheduleConfigError, Slot
from .occupancy import count_occupied_seats
from .windows import get_day_window, minutes_of, split_now


def generate_available_slots(
	schedule: Schedule,
	target_date: date,
	appointments: Iterable[Appointment],
	now: datetime,
	exclude_appointment: Optional[str] = None
) -> List[Slot]:
	"""
	Gera os horários de uma data com as vagas restantes.

	Args:
		schedule: agenda
		target_date: data desejada
		appointments: agendamentos existentes da agenda (idealmente já
			filtrados pela data)
		now: data/hora atual; com tzinfo é convertida para o fuso da agenda
		exclude_appointment: id do agendamento a ignorar na contagem de vagas

	Returns:
		list[Slot]: em ordem cronológica; capacity_remaining == 0 significa
		horário lotado, não ausente

	Raises:
		ScheduleConfigError: slot_duration não positivo

	Algoritmo:
		1. Dia da semana inativo -> []
		2. Resolver a janela do dia (horário próprio ou padrão)
		3. Gerar inícios a cada slot_duration minutos, enquanto início < fim
		4. Na data de hoje, descartar horários com início <= agora
		5. Vagas restantes = max(0, capacidade - participantes no horário)
	"""
	if not schedule.slot_duration or schedule.slot_duration <= 0:
		raise ScheduleConfigError(
			f"Duração do horário deve ser positiva (agenda {schedule.id}: {schedule.slot_duration})"
		)

	# 1-2. Dia ativo e janela válida
	window = get_day_window(schedule, target_date)
	if window is None:
		return []

	# Percorrida uma vez por horário
	appointments = list(appointments)
	today, now_minutes = split_now(now, schedule.timezone)
	step = timedelta(minutes=schedule.slot_duration)

	current = datetime.combine(target_date, window.start)
	end = datetime.combine(target_date, window.end)

	slots = []

	# 3. Inícios estritamente antes do fechamento
	while current < end:
		slot_start = current
		current = current + step

		# 4. Horário já passou (só hoje)
		if target_date == today and minutes_of(slot_start.time()) <= now_minutes:
			continue

		# 5. Vagas restantes
		seats_taken = count_occupied_seats(
			appointments,
			schedule.id,
			target_date,
			slot_start.time(),
			exclude_appointment=exclude_appointment
		)

		slots.append(Slot(
			date=target_date,
			start=slot_start,
			end=current,
			capacity_remaining=max(0, schedule.max_participants_per_slot - seats_taken)
		))

	return slots


def find_slot(slots: Iterable[Slot], slot_time: str) -> Optional[Slot]:
	for slot in slots:
		if slot.time == slot_time:
			return slot
	return None
