from __future__ import annotations
from typing import Any, List, Literal, Optional, Sequence

from pydantic import field_validator

from .completion_client import ChatMessage, SamplingParams
from .models import CamelModel

HISTORY_WINDOW = 6

CONVERSATION_PARAMS = SamplingParams(temperature=0.7, max_tokens=300, top_p=0.9)
HINT_PARAMS = SamplingParams(temperature=0.6, max_tokens=150, top_p=0.9)

OPENING_CUE = "Empieza tú la conversación."
HINT_USER_TURN = "Dame una sugerencia para mi siguiente intervención."


_ROLE_ALIASES = {"ai": "assistant", "bot": "assistant", "tutor": "assistant", "model": "assistant", "student": "user", "learner": "user"}


class ConversationTurn(CamelModel):
	role: Literal["user", "assistant"]
	content: str = ""

	@field_validator("role", mode="before")
	@classmethod
	def _normalize_role(cls, value: Any) -> Any:
		if isinstance(value, str):
			role = value.strip().lower()
			return _ROLE_ALIASES.get(role, role)
		return value


def trailing_turns(history: Optional[Sequence[ConversationTurn]], window: int = HISTORY_WINDOW) -> List[ConversationTurn]:
	turns = [t for t in (history or []) if t.content and t.content.strip()]
	return turns[-window:]


def build_conversation_prompt(language: str, level: str, scenario: str, *, first_turn: bool) -> str:
	lines = [
		f"Eres un compañero de conversación nativo de {language} que ayuda a un estudiante a practicar el idioma.",
		"",
		"CONTEXTO:",
		f"- Idioma de la conversación: {language}",
		f"- Nivel del estudiante: {level}",
		f"- Escenario: {scenario}",
		"",
		"INSTRUCCIONES:",
		f"1. Responde siempre en {language}, con vocabulario y estructuras adecuados al nivel {level}",
		"2. Mantente dentro del escenario y representa tu papel de forma natural",
		"3. Responde con 1-3 frases cortas y termina con una pregunta o pie para que el estudiante siga hablando",
		"4. No corrijas explícitamente los errores; reformula de manera natural lo que el estudiante quiso decir",
		"5. No uses markdown, listas ni emojis: tu respuesta se leerá en voz alta",
	]
	if first_turn:
		lines.append(
			"6. El estudiante todavía no ha dicho nada: abre tú el escenario con un saludo y una primera pregunta, sin esperar su mensaje"
		)
	return "\n".join(lines)


def build_conversation_messages(
	language: str,
	level: str,
	scenario: str,
	*,
	user_message: Optional[str] = None,
	history: Optional[Sequence[ConversationTurn]] = None,
) -> List[ChatMessage]:
	message = (user_message or "").strip()
	first_turn = not message
	messages = [ChatMessage("system", build_conversation_prompt(language, level, scenario, first_turn=first_turn))]
	messages.extend(ChatMessage(t.role, t.content.strip()) for t in trailing_turns(history))
	messages.append(ChatMessage("user", message or OPENING_CUE))
	return messages


def learner_turns(history: Optional[Sequence[ConversationTurn]], user_message: Optional[str]) -> int:
	count = sum(1 for t in (history or []) if t.role == "user")
	if user_message and user_message.strip():
		count += 1
	return count


def _transcript(history: Sequence[ConversationTurn]) -> str:
	speakers = {"user": "Estudiante", "assistant": "Tutor"}
	return "\n".join(f"{speakers[t.role]}: {t.content.strip()}" for t in history)


def build_hint_prompt(
	language: str,
	level: str,
	scenario: str,
	history: Optional[Sequence[ConversationTurn]] = None,
) -> str:
	recent = trailing_turns(history)
	lines = [
		f"Eres un tutor de {language} que ayuda a un estudiante de nivel {level} durante una conversación práctica.",
		f"Escenario: {scenario}",
		"",
	]
	if recent:
		lines.extend(["Conversación reciente:", _transcript(recent), ""])
	else:
		lines.extend(["La conversación aún no ha empezado.", ""])
	lines.extend(
		[
			"Sugiere UNA frase breve que el estudiante podría decir a continuación.",
			f"Escríbela en {language}, adecuada al nivel {level}, seguida de su traducción al español entre paréntesis.",
			"Responde solo con la sugerencia, sin explicaciones adicionales.",
		]
	)
	return "\n".join(lines)
