"""
Booking API Endpoints

Whitelisted functions for the booking frontend.
All endpoints require a logged-in user (frappe.session.user):
- Rate limiting by IP address on write endpoints
- Input validation and sanitization
"""

import frappe
from frappe import _
from frappe.utils import getdate
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

# Import scheduling services
from agenda_carrinho.agenda_carrinho.scheduling.model import Appointment, ScheduleConfigError
from agenda_carrinho.agenda_carrinho.scheduling.participants import (
	ParticipantKind,
	participant_display_name,
	participant_to_row,
	registered_user_ids,
)
from agenda_carrinho.agenda_carrinho.scheduling.slots import find_slot
from agenda_carrinho.agenda_carrinho.scheduling.store import (
	APPOINTMENT_DOCTYPE,
	SCHEDULE_DOCTYPE,
	appointment_from_doc,
	current_time,
	get_settings,
	get_slots_for_date,
	load_appointments,
	load_schedule,
	load_schedule_info,
	load_user_appointments,
	load_user_names,
	schedule_timezones,
)
from agenda_carrinho.agenda_carrinho.scheduling.upcoming import (
	find_tomorrow_reminder,
	get_upcoming_appointments,
	search_by_participant_name,
	split_upcoming_and_past,
)
from agenda_carrinho.agenda_carrinho.scheduling.windows import (
	get_bookable_dates as _get_bookable_dates,
	get_schedule_time_range,
	is_past_date,
	localize_now,
)

# Import security utilities
from agenda_carrinho.api.shared import (
	check_rate_limit,
	sanitize_string,
	validate_date_string,
	validate_docname,
	validate_participants_payload,
	validate_time_string,
)


logger = frappe.logger("agenda_carrinho")


def _ensure_schedule_exists(schedule: str) -> None:
	if not frappe.db.exists(SCHEDULE_DOCTYPE, schedule):
		frappe.throw(_("Agenda '{0}' não existe").format(schedule), frappe.DoesNotExistError)


def _serialize_appointment(
	appointment: Appointment,
	users: Dict[str, str],
	schedules: Dict[str, Any],
	missing: str = "Desconhecido"
) -> Dict[str, Any]:
	schedule = schedules.get(appointment.schedule_id)
	return {
		"name": appointment.id,
		"schedule": appointment.schedule_id,
		"schedule_name": schedule.schedule_name if schedule else appointment.schedule_id,
		"date": appointment.date.isoformat(),
		"time": appointment.time.strftime("%H:%M"),
		"booked_by": appointment.booked_by,
		"participants": [
			{
				"participant_type": participant.kind.value,
				"user": participant.user_id,
				"name": participant_display_name(participant, users, missing),
			}
			for participant in appointment.participants
		],
	}


def _serialize_appointments(
	appointments: List[Appointment],
	missing: str = "Desconhecido"
) -> List[Dict[str, Any]]:
	"""Serializa vários agendamentos com uma consulta de usuários e uma de agendas."""
	user_ids = []
	for appointment in appointments:
		user_ids.extend(registered_user_ids(appointment.participants))

	users = load_user_names(user_ids)
	schedules = load_schedule_info(appointment.schedule_id for appointment in appointments)

	return [_serialize_appointment(appointment, users, schedules, missing) for appointment in appointments]


def _get_booking_doc(appointment: str):
	if not frappe.db.exists(APPOINTMENT_DOCTYPE, appointment):
		frappe.throw(_("Agendamento '{0}' não existe").format(appointment), frappe.DoesNotExistError)
	return frappe.get_doc(APPOINTMENT_DOCTYPE, appointment)


def _check_booking_access(booking: Appointment, user: str, message: str) -> None:
	"""Quem agendou, participantes registrados e System Manager."""
	allowed = (
		booking.booked_by == user
		or user in registered_user_ids(booking.participants)
		or "System Manager" in frappe.get_roles(user)
	)
	if not allowed:
		frappe.throw(message, frappe.PermissionError)


@frappe.whitelist(methods=['GET'])
def get_active_schedules() -> List[Dict[str, Any]]:
	"""
	Obtém as agendas ativas para agendamento.

	Returns:
		List[Dict]: agendas ativas ordenadas por nome

	Example Response:
		```json
		[
			{
				"name": "Carrinho Praça Central",
				"category": "Carrinho",
				"time_range": "08:00 - 18:00",
				"slot_duration_minutes": 60,
				"max_participants_per_slot": 2,
				"days_of_week": [1, 2, 3, 4, 5],
				"observation": ""
			}
		]
		```
	"""
	names = frappe.get_all(
		SCHEDULE_DOCTYPE,
		filters={"is_active": 1},
		pluck="name",
		order_by="schedule_name asc"
	)

	result = []
	for name in names:
		schedule = load_schedule(name)
		result.append({
			"name": schedule.id,
			"schedule_name": schedule.name,
			"category": schedule.category,
			"time_range": get_schedule_time_range(schedule),
			"slot_duration_minutes": schedule.slot_duration,
			"max_participants_per_slot": schedule.max_participants_per_slot,
			"days_of_week": sorted(schedule.days_of_week),
			"observation": schedule.observation,
		})

	return result


@frappe.whitelist(methods=['GET'])
def get_bookable_dates(schedule: str, from_date: Optional[str] = None) -> List[str]:
	"""
	Datas abertas para agendamento (dias ativos da agenda dentro da janela
	de Agenda Settings.booking_window_days, a partir de hoje).

	Args:
		schedule: nome da Agenda Schedule
		from_date: primeira data (YYYY-MM-DD); padrão hoje

	Returns:
		list[str]: datas YYYY-MM-DD
	"""
	schedule = validate_docname(schedule, "schedule")
	_ensure_schedule_exists(schedule)

	schedule_obj = load_schedule(schedule)
	if not schedule_obj.active:
		return []

	today = localize_now(current_time(), schedule_obj.timezone).date()
	start = today
	if from_date:
		start = max(getdate(validate_date_string(from_date, "from_date")), today)

	last_day = today + timedelta(days=get_settings().booking_window_days)
	days = max(0, (last_day - start).days)

	return [d.isoformat() for d in _get_bookable_dates(schedule_obj, start, days)]


@frappe.whitelist(methods=['GET'])
def get_available_slots(
	schedule: str,
	date: str,
	exclude_appointment: Optional[str] = None
) -> List[Dict[str, Any]]:
	"""
	Obtém os horários de uma data com as vagas restantes.

	Args:
		schedule: nome da Agenda Schedule
		date: data (YYYY-MM-DD)
		exclude_appointment: agendamento a ignorar na contagem (edição)

	Returns:
		list[dict]: [
			{
				"time": "09:00",
				"start": "2026-01-15 09:00:00",
				"end": "2026-01-15 10:00:00",
				"capacity_remaining": 1,
				"is_available": True
			},
			...
		]
	"""
	schedule = validate_docname(schedule, "schedule")
	date = validate_date_string(date, "date")
	if exclude_appointment:
		exclude_appointment = validate_docname(exclude_appointment, "exclude_appointment")

	_ensure_schedule_exists(schedule)

	try:
		slots = get_slots_for_date(schedule, date, exclude_appointment=exclude_appointment)
	except ScheduleConfigError as e:
		frappe.log_error(f"Invalid schedule configuration: {str(e)}", "Agenda API Error")
		frappe.throw(_("A agenda {0} está com a configuração inválida").format(schedule))

	return [slot.as_dict() for slot in slots]


@frappe.whitelist(methods=['GET', 'POST'])
def validate_booking(
	schedule: str,
	date: str,
	time: str,
	participants: Any,
	appointment: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Valida um agendamento ANTES de salvar.

	A resposta é só um retrato do momento: a gravação em create_booking
	verifica as vagas de novo.

	Returns:
		dict: {
			"valid": bool,
			"errors": list[str],
			"capacity_remaining": int | None
		}
	"""
	check_rate_limit("validate_booking", limit=30, seconds=60)

	errors = []

	schedule = validate_docname(schedule, "schedule")
	date = validate_date_string(date, "date")
	time = validate_time_string(time, "time")
	participant_list = validate_participants_payload(participants)
	if appointment:
		appointment = validate_docname(appointment, "appointment")

	if not frappe.db.exists(SCHEDULE_DOCTYPE, schedule):
		errors.append(_("Agenda '{0}' não existe").format(schedule))
		return {"valid": False, "errors": errors, "capacity_remaining": None}

	# Mesma regra do controller de Agenda Appointment
	if is_past_date(getdate(date), current_time(), load_schedule(schedule).timezone):
		errors.append(_("Não é possível agendar em data passada"))
		return {"valid": False, "errors": errors, "capacity_remaining": None}

	try:
		slots = get_slots_for_date(schedule, date, exclude_appointment=appointment)
	except ScheduleConfigError:
		errors.append(_("A agenda {0} está com a configuração inválida").format(schedule))
		return {"valid": False, "errors": errors, "capacity_remaining": None}

	slot = find_slot(slots, time)
	if slot is None:
		errors.append(_("O horário {0} não está disponível em {1}").format(time, date))
		return {"valid": False, "errors": errors, "capacity_remaining": None}

	if len(participant_list) > slot.capacity_remaining:
		errors.append(
			_("Não há vagas suficientes às {0}: restam {1}, solicitadas {2}").format(
				time, slot.capacity_remaining, len(participant_list)
			)
		)

	users = registered_user_ids(participant_list)
	if len(users) != len([p for p in participant_list if p.kind is ParticipantKind.REGISTERED]):
		errors.append(_("O mesmo usuário aparece mais de uma vez"))

	for user in users:
		if not frappe.db.exists("User", user):
			errors.append(_("Usuário {0} não existe").format(user))

	return {
		"valid": not errors,
		"errors": errors,
		"capacity_remaining": slot.capacity_remaining,
	}


@frappe.whitelist(methods=['POST'])
def create_booking(schedule: str, date: str, time: str, participants: Any) -> Dict[str, Any]:
	"""
	Cria um agendamento para o usuário logado.

	Rate limited: 10 requests per minute per IP.

	Args:
		schedule: nome da Agenda Schedule
		date: data (YYYY-MM-DD)
		time: horário (HH:MM)
		participants: JSON list; cada item é um user id ou {"manualName": "..."}

	Example:
		```javascript
		frappe.call({
			method: "agenda_carrinho.api.booking_api.create_booking",
			args: {
				schedule: "Carrinho Praça Central",
				date: "2026-01-20",
				time: "09:00",
				participants: JSON.stringify([frappe.session.user, {manualName: "Maria"}])
			}
		});
		```
	"""
	check_rate_limit("create_booking", limit=10, seconds=60)

	schedule = validate_docname(schedule, "schedule")
	date = validate_date_string(date, "date")
	time = validate_time_string(time, "time")
	participant_list = validate_participants_payload(participants)

	_ensure_schedule_exists(schedule)

	doc = frappe.get_doc({
		"doctype": APPOINTMENT_DOCTYPE,
		"schedule": schedule,
		"date": date,
		"time": f"{time}:00",
		"booked_by": frappe.session.user,
		"participants": [participant_to_row(participant) for participant in participant_list],
	})
	doc.insert()

	logger.info(
		f"Booking {doc.name} created by {frappe.session.user}: {schedule} {date} {time} "
		f"({len(participant_list)} participant(s))"
	)

	return _serialize_appointments([appointment_from_doc(doc)])[0]


@frappe.whitelist(methods=['POST'])
def reschedule_booking(appointment: str, date: str, time: str) -> Dict[str, Any]:
	"""
	Move um agendamento para outra data/horário da mesma agenda.

	Mesma permissão de cancel_booking. O controller valida o novo horário
	sem contar as vagas do próprio agendamento.

	Args:
		appointment: nome do Agenda Appointment
		date: nova data (YYYY-MM-DD)
		time: novo horário (HH:MM)
	"""
	check_rate_limit("reschedule_booking", limit=10, seconds=60)

	appointment = validate_docname(appointment, "appointment")
	date = validate_date_string(date, "date")
	time = validate_time_string(time, "time")

	doc = _get_booking_doc(appointment)
	booking = appointment_from_doc(doc)
	user = frappe.session.user

	_check_booking_access(booking, user, _("Você não pode alterar este agendamento"))

	doc.date = date
	doc.time = f"{time}:00"
	doc.save(ignore_permissions=True)

	logger.info(
		f"Booking {appointment} moved by {user}: "
		f"{booking.date.isoformat()} {booking.time.strftime('%H:%M')} -> {date} {time}"
	)

	return _serialize_appointments([appointment_from_doc(doc)])[0]


@frappe.whitelist(methods=['POST'])
def cancel_booking(appointment: str) -> Dict[str, Any]:
	"""
	Cancela (exclui) um agendamento.

	Permitido para quem agendou, para participantes registrados e para
	System Manager.
	"""
	check_rate_limit("cancel_booking", limit=10, seconds=60)

	appointment = validate_docname(appointment, "appointment")

	doc = _get_booking_doc(appointment)
	user = frappe.session.user

	_check_booking_access(appointment_from_doc(doc), user, _("Você não pode cancelar este agendamento"))

	frappe.delete_doc(APPOINTMENT_DOCTYPE, appointment, ignore_permissions=True)
	logger.info(f"Booking {appointment} cancelled by {user}")

	return {"success": True, "name": appointment}


@frappe.whitelist(methods=['GET'])
def get_all_appointments(date: Optional[str] = None, search: Optional[str] = None) -> Dict[str, Any]:
	"""
	Todos os agendamentos, para a equipe (System Manager).

	Args:
		date: filtra pela data (YYYY-MM-DD)
		search: parte do nome de um participante

	Returns:
		dict: {
			"upcoming": [...],  # do mais cedo ao mais tarde
			"past": [...]       # do mais recente ao mais antigo
		}
	"""
	frappe.only_for("System Manager")

	if date:
		date = validate_date_string(date, "date")
	search = sanitize_string(search)

	appointments = load_appointments(target_date=date)
	missing = _("Usuário Removido")

	user_ids = []
	for appointment in appointments:
		user_ids.extend(registered_user_ids(appointment.participants))
	users = load_user_names(user_ids)

	appointments = search_by_participant_name(appointments, search, users, missing)
	schedules = load_schedule_info(appointment.schedule_id for appointment in appointments)

	upcoming, past = split_upcoming_and_past(appointments, current_time(), schedule_timezones(schedules))

	return {
		"upcoming": [_serialize_appointment(a, users, schedules, missing) for a in upcoming],
		"past": [_serialize_appointment(a, users, schedules, missing) for a in past],
	}


def _load_my_appointments(user: str, now: datetime) -> List[Appointment]:
	# Um dia antes: agendas em fusos a oeste do sistema ainda podem estar "ontem"
	return load_user_appointments(user, from_date=now.date() - timedelta(days=1))


@frappe.whitelist(methods=['GET'])
def get_my_appointments() -> List[Dict[str, Any]]:
	"""Agendamentos futuros do usuário logado, do mais próximo ao mais distante."""
	user = frappe.session.user
	now = current_time()

	candidates = _load_my_appointments(user, now)
	timezones = schedule_timezones(load_schedule_info(a.schedule_id for a in candidates))

	return _serialize_appointments(get_upcoming_appointments(candidates, user, now, timezones))


@frappe.whitelist(methods=['GET'])
def get_tomorrow_reminder() -> Optional[Dict[str, Any]]:
	"""
	Agendamento de amanhã do usuário logado, para o lembrete do sino.

	Returns:
		dict com o agendamento e a mensagem, ou None
	"""
	user = frappe.session.user
	now = current_time()

	candidates = _load_my_appointments(user, now)
	timezones = schedule_timezones(load_schedule_info(a.schedule_id for a in candidates))

	appointment = find_tomorrow_reminder(candidates, user, now, timezones)
	if appointment is None:
		return None

	return {
		"message": _("Não esqueça do seu agendamento amanhã!"),
		"appointment": _serialize_appointments([appointment])[0],
	}
