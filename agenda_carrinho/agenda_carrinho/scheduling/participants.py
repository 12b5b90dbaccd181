"""
Participants

A participant is either a registered user (account reference) or a walk-in
typed by name at booking time. Both occupy one seat.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional


class ParticipantKind(str, Enum):
	"""Valores iguais às opções do campo participant_type."""

	REGISTERED = "Registered"
	WALK_IN = "Walk-in"


@dataclass(frozen=True)
class Participant:
	kind: ParticipantKind
	user_id: Optional[str] = None
	name: Optional[str] = None

	@classmethod
	def registered(cls, user_id: str) -> "Participant":
		return cls(kind=ParticipantKind.REGISTERED, user_id=user_id)

	@classmethod
	def walk_in(cls, name: str) -> "Participant":
		return cls(kind=ParticipantKind.WALK_IN, name=name)

	@property
	def is_registered(self) -> bool:
		return self.kind is ParticipantKind.REGISTERED


def parse_participant(raw: Any) -> Participant:
	"""
	Converte a representação recebida do frontend em Participant.

	Formatos aceitos:
		"user@example.com"                         -> registrado
		{"manualName": "Maria"}                    -> avulso (formato legado)
		{"user": "user@example.com"}               -> registrado
		{"participant_type": "Walk-in",
		 "participant_name": "Maria"}              -> avulso (linha da tabela)

	Raises:
		ValueError: formato desconhecido ou valor vazio
	"""
	if isinstance(raw, Participant):
		return raw

	if isinstance(raw, str):
		return _registered(raw)

	if isinstance(raw, Mapping):
		kind = raw.get("participant_type")
		if kind == ParticipantKind.WALK_IN.value:
			return _walk_in(raw.get("participant_name"))
		if kind == ParticipantKind.REGISTERED.value:
			return _registered(raw.get("user"))
		if kind:
			raise ValueError(f"Tipo de participante desconhecido: {kind!r}")

		if "manualName" in raw:
			return _walk_in(raw.get("manualName"))
		if "user" in raw:
			return _registered(raw.get("user"))

	raise ValueError(f"Participante inválido: {raw!r}")


def _registered(user_id: Any) -> Participant:
	user_id = (user_id or "").strip() if isinstance(user_id, str) else user_id
	if not user_id:
		raise ValueError("Participante registrado sem usuário")
	return Participant.registered(user_id)


def _walk_in(name: Any) -> Participant:
	name = (name or "").strip() if isinstance(name, str) else name
	if not name:
		raise ValueError("Participante avulso sem nome")
	return Participant.walk_in(name)


def participant_display_name(
	participant: Participant,
	users: Mapping[str, str],
	missing: str = "Desconhecido"
) -> str:
	"""
	Nome para exibição.

	Args:
		participant: participante
		users: mapa user_id -> nome completo
		missing: texto quando o usuário registrado não existe mais
	"""
	if participant.kind is ParticipantKind.REGISTERED:
		return users.get(participant.user_id) or missing
	if participant.kind is ParticipantKind.WALK_IN:
		return participant.name
	raise ValueError(f"Tipo de participante desconhecido: {participant.kind!r}")


def registered_user_ids(participants: Iterable[Participant]) -> List[str]:
	"""User ids dos participantes registrados, na ordem e sem repetição."""
	seen = set()
	result = []
	for participant in participants:
		if participant.is_registered and participant.user_id not in seen:
			seen.add(participant.user_id)
			result.append(participant.user_id)
	return result


def participant_to_row(participant: Participant) -> dict:
	"""Linha para a tabela filha Agenda Appointment Participant."""
	return {
		"participant_type": participant.kind.value,
		"user": participant.user_id,
		"participant_name": participant.name,
	}
