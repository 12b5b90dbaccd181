"""
Day Windows Service

Resolves the opening hours of a schedule for a given weekday, considering:
- Default opening/closing time
- Per-weekday overrides (days_config)
- Timezones of the schedule
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple, Union

import pytz

from .model import DayWindow, Schedule, weekday_index


def to_time(time_value: Union[time, timedelta, str]) -> time:
	"""
	Converte diferentes formatos de horário para datetime.time.

	Args:
		time_value: time, timedelta (desde a meia-noite, como o MariaDB
			devolve campos Time) ou string "HH:MM" / "HH:MM:SS"

	Returns:
		datetime.time
	"""
	if isinstance(time_value, datetime):
		return time_value.time()
	if isinstance(time_value, time):
		return time_value
	elif isinstance(time_value, timedelta):
		return (datetime.min + time_value).time()
	elif isinstance(time_value, str):
		value = time_value.strip()
		for fmt in ("%H:%M:%S", "%H:%M", "%H:%M:%S.%f"):
			try:
				return datetime.strptime(value, fmt).time()
			except ValueError:
				continue
		raise ValueError(f"Horário inválido: {time_value!r}")
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


def resolve_day_window(schedule: Schedule, weekday: int) -> DayWindow:
	"""
	Janela efetiva do dia: o horário próprio do dia quando tem início e fim,
	senão o horário padrão da agenda.
	"""
	override = schedule.days_config.get(weekday)
	if override is not None:
		return override
	return schedule.default_window


def get_day_window(schedule: Schedule, target_date: date) -> Optional[DayWindow]:
	"""
	Janela de funcionamento para uma data.

	Returns:
		DayWindow, ou None se o dia da semana não está ativo ou a janela é
		inválida (início >= fim)
	"""
	weekday = weekday_index(target_date)
	if weekday not in schedule.days_of_week:
		return None

	window = resolve_day_window(schedule, weekday)
	if not window.is_valid:
		return None
	return window


def get_schedule_time_range(schedule: Schedule) -> str:
	"""
	Rótulo "HH:MM - HH:MM" do menor início ao maior fim entre os dias ativos.

	Sem dias ativos, usa o horário padrão.
	"""
	windows = [resolve_day_window(schedule, day) for day in sorted(schedule.days_of_week)]
	if not windows:
		windows = [schedule.default_window]

	start = min(window.start for window in windows)
	end = max(window.end for window in windows)
	return f"{start.strftime('%H:%M')} - {end.strftime('%H:%M')}"


def get_bookable_dates(schedule: Schedule, start_date: date, days: int) -> List[date]:
	"""
	Datas em [start_date, start_date + days) cujo dia da semana está ativo.
	"""
	result = []
	for offset in range(max(days, 0)):
		current = start_date + timedelta(days=offset)
		if weekday_index(current) in schedule.days_of_week:
			result.append(current)
	return result


def localize_now(now: datetime, tz_name: Optional[str]) -> datetime:
	"""
	Leva `now` para o fuso da agenda e remove o tzinfo.

	Um `now` sem tzinfo já é considerado no fuso da agenda.
	"""
	if now.tzinfo is None or not tz_name:
		return now.replace(tzinfo=None)

	tz = pytz.timezone(tz_name)
	return now.astimezone(tz).replace(tzinfo=None)


def split_now(now: datetime, tz_name: Optional[str]) -> Tuple[date, int]:
	"""(data, minutos desde a meia-noite) de `now` no fuso da agenda."""
	local_now = localize_now(now, tz_name)
	return local_now.date(), minutes_of(local_now.time())


def minutes_of(value: time) -> int:
	return value.hour * 60 + value.minute


def is_past_date(target_date: date, now: datetime, tz_name: Optional[str]) -> bool:
	"""True se `target_date` é anterior a hoje no fuso da agenda."""
	return target_date < localize_now(now, tz_name).date()
