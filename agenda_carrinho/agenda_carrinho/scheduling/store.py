"""
Schedule Store

Maps the Agenda DocTypes onto the scheduling domain model and runs the slot
calculation with the site clock. Every database read of the scheduling
services goes through this module.
"""

import frappe
from frappe.utils import cint, getdate, get_system_timezone, now_datetime
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union
import pytz

from .model import Appointment, DayWindow, Schedule, Slot, weekday_from_name
from .participants import parse_participant
from .slots import generate_available_slots
from .windows import to_time


SCHEDULE_DOCTYPE = "Agenda Schedule"
APPOINTMENT_DOCTYPE = "Agenda Appointment"
PARTICIPANT_DOCTYPE = "Agenda Appointment Participant"

DEFAULT_BOOKING_WINDOW_DAYS = 90


def schedule_from_doc(doc: Any) -> Schedule:
	"""
	Converte um doc Agenda Schedule em Schedule.

	Cada linha da tabela `days` ativa o dia; linhas com início e fim
	preenchidos definem o horário próprio do dia.
	"""
	days_of_week = set()
	days_config = {}

	for row in doc.get("days") or []:
		weekday = weekday_from_name(row.get("weekday"))
		days_of_week.add(weekday)

		if row.get("start_time") and row.get("end_time"):
			days_config[weekday] = DayWindow(
				start=to_time(row.get("start_time")),
				end=to_time(row.get("end_time"))
			)

	return Schedule(
		id=doc.get("name"),
		name=doc.get("schedule_name") or doc.get("name"),
		category=doc.get("category") or "",
		default_window=DayWindow(
			start=to_time(doc.get("start_time")),
			end=to_time(doc.get("end_time"))
		),
		slot_duration=cint(doc.get("slot_duration_minutes")),
		days_of_week=frozenset(days_of_week),
		max_participants_per_slot=cint(doc.get("max_participants_per_slot")),
		days_config=days_config,
		active=bool(cint(doc.get("is_active"))),
		observation=doc.get("observation") or "",
		timezone=doc.get("timezone") or None
	)


def appointment_from_doc(doc: Any, participant_rows: Optional[Iterable[Any]] = None) -> Appointment:
	"""
	Converte um doc (ou linha de frappe.get_all) Agenda Appointment.

	Args:
		doc: documento ou dict com name, schedule, date, time, booked_by
		participant_rows: linhas da tabela filha; por padrão doc.participants
	"""
	if participant_rows is None:
		participant_rows = doc.get("participants") or []

	return Appointment(
		id=doc.get("name"),
		schedule_id=doc.get("schedule"),
		date=getdate(doc.get("date")),
		time=to_time(doc.get("time")),
		participants=tuple(_row_to_participant(row) for row in participant_rows),
		booked_by=doc.get("booked_by")
	)


def _row_to_participant(row: Any):
	return parse_participant({
		"participant_type": row.get("participant_type"),
		"user": row.get("user"),
		"participant_name": row.get("participant_name"),
	})


def load_schedule(schedule_name: str) -> Schedule:
	"""Carrega a agenda; DoesNotExistError se não existir."""
	doc = frappe.get_doc(SCHEDULE_DOCTYPE, schedule_name)
	return schedule_from_doc(doc)


def lock_schedule(schedule_name: str) -> None:
	"""
	SELECT ... FOR UPDATE na agenda.

	Serializa as gravações de agendamentos da mesma agenda até o fim da
	transação atual.
	"""
	frappe.db.get_value(SCHEDULE_DOCTYPE, schedule_name, "name", for_update=True)


def load_appointments(
	schedule_name: Optional[str] = None,
	target_date: Optional[Union[date, str]] = None,
	from_date: Optional[Union[date, str]] = None,
	names: Optional[List[str]] = None
) -> List[Appointment]:
	"""
	Carrega agendamentos com seus participantes.

	Args:
		schedule_name: filtra pela agenda
		target_date: filtra pela data exata
		from_date: filtra datas >= from_date
		names: filtra pelos ids
	"""
	filters: Dict[str, Any] = {}
	if schedule_name:
		filters["schedule"] = schedule_name
	if target_date:
		filters["date"] = getdate(target_date)
	elif from_date:
		filters["date"] = [">=", getdate(from_date)]
	if names is not None:
		if not names:
			return []
		filters["name"] = ["in", names]

	rows = frappe.get_all(
		APPOINTMENT_DOCTYPE,
		filters=filters,
		fields=["name", "schedule", "date", "time", "booked_by"],
		order_by="date asc, time asc"
	)
	if not rows:
		return []

	participants_by_parent: Dict[str, List[Any]] = {}
	for row in frappe.get_all(
		PARTICIPANT_DOCTYPE,
		filters={
			"parent": ["in", [row.name for row in rows]],
			"parenttype": APPOINTMENT_DOCTYPE
		},
		fields=["parent", "participant_type", "user", "participant_name"],
		order_by="idx asc"
	):
		participants_by_parent.setdefault(row.parent, []).append(row)

	return [
		appointment_from_doc(row, participants_by_parent.get(row.name, []))
		for row in rows
	]


def load_user_appointments(user: str, from_date: Optional[Union[date, str]] = None) -> List[Appointment]:
	"""Agendamentos em que `user` é participante registrado."""
	parents = frappe.get_all(
		PARTICIPANT_DOCTYPE,
		filters={
			"user": user,
			"participant_type": "Registered",
			"parenttype": APPOINTMENT_DOCTYPE
		},
		pluck="parent"
	)
	return load_appointments(from_date=from_date, names=list(set(parents)))


def load_user_names(user_ids: Iterable[str]) -> Dict[str, str]:
	"""Mapa user -> full_name."""
	user_ids = [user_id for user_id in set(user_ids) if user_id]
	if not user_ids:
		return {}

	users = frappe.get_all(
		"User",
		filters={"name": ["in", user_ids]},
		fields=["name", "full_name"]
	)
	return {user.name: user.full_name or user.name for user in users}


def load_schedule_info(schedule_ids: Iterable[str]) -> Dict[str, Any]:
	"""Mapa schedule -> frappe._dict(schedule_name, timezone), numa consulta."""
	schedule_ids = [schedule_id for schedule_id in set(schedule_ids) if schedule_id]
	if not schedule_ids:
		return {}

	schedules = frappe.get_all(
		SCHEDULE_DOCTYPE,
		filters={"name": ["in", schedule_ids]},
		fields=["name", "schedule_name", "timezone"]
	)
	return {
		schedule.name: frappe._dict({
			"schedule_name": schedule.schedule_name or schedule.name,
			"timezone": schedule.timezone or None,
		})
		for schedule in schedules
	}


def schedule_timezones(schedules: Dict[str, Any]) -> Dict[str, Optional[str]]:
	"""Mapa schedule -> fuso, a partir de load_schedule_info."""
	return {name: info.timezone for name, info in schedules.items()}


def current_time() -> datetime:
	"""Agora, com tzinfo do fuso do sistema."""
	tz = pytz.timezone(get_system_timezone() or "UTC")
	return tz.localize(now_datetime())


def get_slots_for_date(
	schedule_name: str,
	target_date: Union[date, str],
	exclude_appointment: Optional[str] = None,
	now: Optional[datetime] = None
) -> List[Slot]:
	"""
	Horários de uma agenda para uma data, com os agendamentos do banco.

	Agendas pausadas não oferecem horários.
	"""
	schedule = load_schedule(schedule_name)
	if not schedule.active:
		return []

	target_date = getdate(target_date)
	appointments = load_appointments(schedule_name, target_date=target_date)

	return generate_available_slots(
		schedule,
		target_date,
		appointments,
		now or current_time(),
		exclude_appointment=exclude_appointment
	)


def get_settings() -> Any:
	"""Agenda Settings com valores padrão para campos vazios."""
	settings = frappe.get_cached_doc("Agenda Settings")
	return frappe._dict({
		"booking_window_days": cint(settings.booking_window_days) or DEFAULT_BOOKING_WINDOW_DAYS,
		"notify_participants": bool(cint(settings.notify_participants)),
		"send_reminders": bool(cint(settings.send_reminders)),
	})
