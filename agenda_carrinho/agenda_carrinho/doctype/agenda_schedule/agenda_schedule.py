# Copyright (c) 2026, Agenda Carrinho contributors
# For license information, please see license.txt

"""
Agenda Schedule DocType

Agenda recorrente: dias da semana, horário padrão, horários próprios por dia,
duração do horário e vagas por horário.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from datetime import date, datetime, time
import pytz

from agenda_carrinho.agenda_carrinho.scheduling.windows import to_time


class AgendaSchedule(Document):
	"""
	Agenda Schedule with validation for opening hours.

	Validations:
	- schedule_name required
	- slot_duration_minutes > 0
	- max_participants_per_slot > 0
	- start_time < end_time
	- At least one weekday, no duplicated weekday
	- Each weekday override: both times or none, start_time < end_time
	- timezone must be a valid IANA name (if present)
	"""

	def validate(self) -> None:
		"""
		Validação antes de salvar.
		"""
		self._validate_schedule_name()
		self._validate_positive_numbers()
		self._validate_default_window()
		self._validate_days()
		self._validate_timezone()
		self._validate_slot_granularity()

	def _validate_schedule_name(self) -> None:
		"""Valida que schedule_name esteja presente."""
		if not self.schedule_name:
			frappe.throw(_("Nome da agenda é obrigatório"))

	def _validate_positive_numbers(self) -> None:
		if not self.slot_duration_minutes or self.slot_duration_minutes <= 0:
			frappe.throw(_("Duração do horário deve ser maior que 0"))

		if not self.max_participants_per_slot or self.max_participants_per_slot <= 0:
			frappe.throw(_("Máximo de participantes por horário deve ser maior que 0"))

	def _validate_default_window(self) -> None:
		if not self.start_time or not self.end_time:
			frappe.throw(_("Horário de início e fim são obrigatórios"))

		start = to_time(self.start_time)
		end = to_time(self.end_time)

		if start >= end:
			frappe.throw(
				_("Horário de início ({0}) deve ser menor que o horário de fim ({1})").format(
					start.strftime("%H:%M"), end.strftime("%H:%M")
				)
			)

	def _validate_days(self) -> None:
		"""
		Valida as linhas da tabela `days`.

		Cada linha ativa um dia; início e fim juntos definem o horário
		próprio daquele dia.
		"""
		if not self.days:
			frappe.throw(_("Selecione pelo menos um dia da semana"))

		seen = set()

		for idx, row in enumerate(self.days, 1):
			if not row.weekday:
				frappe.throw(_("Linha {0}: dia da semana é obrigatório").format(idx))

			if row.weekday in seen:
				frappe.throw(_("Linha {0}: {1} repetido").format(idx, row.weekday))
			seen.add(row.weekday)

			if bool(row.start_time) != bool(row.end_time):
				frappe.throw(
					_("Linha {0} ({1}): informe início e fim, ou deixe os dois vazios").format(idx, row.weekday)
				)

			if row.start_time and row.end_time:
				start = to_time(row.start_time)
				end = to_time(row.end_time)

				if start >= end:
					frappe.throw(
						_("Linha {0} ({1}): início ({2}) deve ser menor que fim ({3})").format(
							idx, row.weekday, start.strftime("%H:%M"), end.strftime("%H:%M")
						)
					)

	def _validate_timezone(self) -> None:
		if not self.timezone:
			return

		try:
			pytz.timezone(self.timezone)
		except pytz.UnknownTimeZoneError:
			frappe.throw(_("Fuso horário inválido: {0}").format(self.timezone))

	def _validate_slot_granularity(self) -> None:
		"""
		Avisa quando a janela não é múltiplo da duração do horário.

		O último horário começa antes do fechamento e termina depois dele.
		"""
		windows = [(self.start_time, self.end_time)]
		windows.extend(
			(row.start_time, row.end_time)
			for row in self.days
			if row.start_time and row.end_time
		)

		for start, end in windows:
			minutes = _minutes_between(to_time(start), to_time(end))
			if minutes % self.slot_duration_minutes != 0:
				frappe.msgprint(
					_("A janela {0}-{1} ({2} min) não é múltiplo da duração do horário ({3} min)").format(
						to_time(start).strftime("%H:%M"),
						to_time(end).strftime("%H:%M"),
						minutes,
						self.slot_duration_minutes
					),
					indicator="yellow",
					alert=True
				)
				return


def _minutes_between(start: time, end: time) -> int:
	delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
	return int(delta.total_seconds() // 60)
