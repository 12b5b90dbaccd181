"""
Scheduling Domain Model

Immutable value types shared by the scheduling services. They hold no
reference to Frappe so the calculations can run (and be tested) without a
site; scheduling/store.py maps DocTypes onto them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, Optional, Tuple, FrozenSet

from .participants import Participant


# 0=Domingo .. 6=Sábado, igual a JavaScript Date.getDay()
WEEKDAY_NAMES: Tuple[str, ...] = (
	"Domingo",
	"Segunda-feira",
	"Terça-feira",
	"Quarta-feira",
	"Quinta-feira",
	"Sexta-feira",
	"Sábado",
)


class ScheduleConfigError(ValueError):
	"""Configuração de agenda que não permite gerar horários."""
	pass


def weekday_index(target_date: date) -> int:
	"""Dia da semana com domingo = 0 (date.weekday() usa segunda = 0)."""
	return (target_date.weekday() + 1) % 7


def weekday_from_name(name: str) -> int:
	"""Converte o nome do dia (Select do DocType) para o índice 0..6."""
	try:
		return WEEKDAY_NAMES.index(name)
	except ValueError:
		raise ValueError(f"Dia da semana desconhecido: {name!r}")


@dataclass(frozen=True)
class DayWindow:
	"""Janela de funcionamento de um dia (abertura, fechamento)."""

	start: time
	end: time

	@property
	def is_valid(self) -> bool:
		return self.start < self.end


@dataclass(frozen=True)
class Schedule:
	"""
	Agenda recorrente.

	days_config só contém os dias com horário próprio; os demais dias ativos
	usam default_window.
	"""

	id: str
	name: str
	default_window: DayWindow
	slot_duration: int
	days_of_week: FrozenSet[int]
	max_participants_per_slot: int
	category: str = ""
	days_config: Dict[int, DayWindow] = field(default_factory=dict)
	active: bool = True
	observation: str = ""
	timezone: Optional[str] = None


@dataclass(frozen=True)
class Appointment:
	"""Agendamento de um horário por um ou mais participantes."""

	id: str
	schedule_id: str
	date: date
	time: time
	participants: Tuple[Participant, ...] = ()
	booked_by: Optional[str] = None

	@property
	def seats(self) -> int:
		# Registrados e avulsos ocupam uma vaga cada
		return len(self.participants)


@dataclass(frozen=True)
class Slot:
	"""Horário gerado para uma data, com as vagas restantes."""

	date: date
	start: datetime
	# Pode cair no dia seguinte quando o último horário passa da meia-noite
	end: datetime
	capacity_remaining: int

	@property
	def time(self) -> str:
		return self.start.strftime("%H:%M")

	@property
	def is_available(self) -> bool:
		return self.capacity_remaining > 0

	def as_dict(self) -> Dict[str, object]:
		return {
			"time": self.time,
			"start": self.start.strftime("%Y-%m-%d %H:%M:%S"),
			"end": self.end.strftime("%Y-%m-%d %H:%M:%S"),
			"capacity_remaining": self.capacity_remaining,
			"is_available": self.is_available,
		}
