from __future__ import annotations
import math

from .models import DifficultyLevel


QUESTION_USER_TURN = "Genera la pregunta adaptativa ahora."


def percent(accuracy: float) -> int:
	# Half-up rounding, so 0.125 -> 13 rather than banker's 12
	return int(math.floor(accuracy * 100 + 0.5))


def _streak_label(streak: int) -> str:
	if streak >= 0:
		return f"{streak} aciertos consecutivos"
	return f"{abs(streak)} fallos consecutivos"


def build_question_prompt(
	level: str,
	subject: str,
	difficulty: DifficultyLevel,
	competency: str,
	accuracy: float,
	streak: int,
	recent_topics: str = "",
) -> str:
	"""System instruction for one multiple-choice question.

	Pure and deterministic: identical inputs give a byte-identical prompt. The
	"avoid these topics" line is left out entirely when ``recent_topics`` is empty.
	"""
	context = [
		f"- Nivel educativo: {level}",
		f"- Asignatura: {subject}",
		f"- Rendimiento promedio: {percent(accuracy)}%",
		f"- Racha actual: {_streak_label(streak)}",
		f"- Dificultad objetivo: {difficulty.value}",
		f"- Competencia LOMLOE: {competency}",
	]
	if recent_topics:
		context.append(f"- Temas recientes (EVITA REPETIR): {recent_topics}")

	instructions = [
		"1. Genera UNA pregunta tipo test adaptada al nivel y rendimiento",
		f"2. La pregunta debe ser de dificultad {difficulty.value} y apropiada para {level}",
		"3. Incluye exactamente 4 opciones de respuesta (A, B, C, D) - solo una correcta",
		"4. Proporciona una explicación pedagógica clara (2-3 líneas)",
		"5. La pregunta debe conectar con situaciones reales y prácticas",
		"6. Usa lenguaje auténtico de España (no latinoamericanismos)",
		"7. La pregunta debe poder responderse solo con texto: NO hagas referencia a imágenes, diagramas, gráficos, mapas, audios ni vídeos",
	]
	if recent_topics:
		instructions.append("8. **IMPORTANTE**: Genera una pregunta sobre un tema DIFERENTE a los mencionados arriba")

	output_format = (
		"{\n"
		'  "question": "Tu pregunta aquí",\n'
		'  "options": ["Opción A completa", "Opción B completa", "Opción C completa", "Opción D completa"],\n'
		'  "correctIndex": 0,\n'
		'  "explanation": "Explicación pedagógica clara de 2-3 líneas",\n'
		f'  "difficulty": "{difficulty.value}",\n'
		f'  "lomloeCompetency": "{competency}",\n'
		'  "topic": "Tema específico de la pregunta"\n'
		"}"
	)

	return (
		"Eres un profesor español experto en pedagogía adaptativa y el currículo LOMLOE. "
		"Generas preguntas educativas de alta calidad adaptadas al nivel y rendimiento del estudiante.\n\n"
		"CONTEXTO DEL ESTUDIANTE:\n"
		+ "\n".join(context)
		+ "\n\nINSTRUCCIONES DE GENERACIÓN:\n"
		+ "\n".join(instructions)
		+ "\n\nFORMATO DE RESPUESTA EXACTO (JSON válido):\n"
		+ output_format
		+ "\n\nReglas del formato: \"options\" es una lista de exactamente 4 cadenas; "
		"\"correctIndex\" es un entero entre 0 y 3 que indica la opción correcta.\n"
		"IMPORTANTE: Responde SOLO con el JSON, sin texto adicional antes o después."
	)
