from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from .models import DifficultyLevel, PerformanceSignal, QuestionRecord, fold_text


# Accuracy/streak thresholds for moving the target difficulty
HIGH_ACCURACY = 0.8
LOW_ACCURACY = 0.5
HOT_STREAK = 3

# How many past questions are used to steer the generator away from repeats
RECENT_TOPICS_WINDOW = 5

GENERAL_COMPETENCY = "Competencia general"

LOMLOE_COMPETENCIES: Dict[str, Dict[DifficultyLevel, str]] = {
	"Matemáticas": {
		DifficultyLevel.EASY: "STEM - Resolución de problemas básicos",
		DifficultyLevel.MEDIUM: "STEM - Razonamiento matemático aplicado",
		DifficultyLevel.HARD: "STEM - Modelización y pensamiento abstracto",
	},
	"Lengua": {
		DifficultyLevel.EASY: "CCL - Comprensión lectora básica",
		DifficultyLevel.MEDIUM: "CCL - Análisis textual y expresión",
		DifficultyLevel.HARD: "CCL - Interpretación crítica y argumentación",
	},
	"Ciencias": {
		DifficultyLevel.EASY: "CCL - Conocimiento científico básico",
		DifficultyLevel.MEDIUM: "STEM - Método científico y experimentación",
		DifficultyLevel.HARD: "STEM - Análisis científico avanzado",
	},
	"Historia": {
		DifficultyLevel.EASY: "CC - Conocimiento histórico fundamental",
		DifficultyLevel.MEDIUM: "CC - Análisis de procesos históricos",
		DifficultyLevel.HARD: "CC - Pensamiento histórico crítico",
	},
	"Inglés": {
		DifficultyLevel.EASY: "CCL - Comprensión básica de inglés",
		DifficultyLevel.MEDIUM: "CCL - Comunicación en inglés aplicada",
		DifficultyLevel.HARD: "CCL - Dominio avanzado del inglés",
	},
}

# English names used by some clients for the same subjects
SUBJECT_ALIASES: Dict[str, str] = {
	"mathematics": "Matemáticas",
	"maths": "Matemáticas",
	"math": "Matemáticas",
	"language": "Lengua",
	"science": "Ciencias",
	"history": "Historia",
	"english": "Inglés",
}

_SUBJECT_INDEX: Dict[str, str] = {fold_text(name): name for name in LOMLOE_COMPETENCIES}
_SUBJECT_INDEX.update(SUBJECT_ALIASES)

ADAPTIVE_REASONS: Dict[DifficultyLevel, str] = {
	DifficultyLevel.HARD: "Alto rendimiento - aumentando dificultad",
	DifficultyLevel.EASY: "Bajo rendimiento - reduciendo dificultad",
	DifficultyLevel.MEDIUM: "Rendimiento estable - manteniendo nivel",
}


def estimate_difficulty(signal: Optional[PerformanceSignal]) -> DifficultyLevel:
	"""First matching rule wins: hot streak with high accuracy, then struggling, else medium."""
	signal = signal or PerformanceSignal()
	if signal.accuracy > HIGH_ACCURACY and signal.streak >= HOT_STREAK:
		return DifficultyLevel.HARD
	if signal.accuracy < LOW_ACCURACY or signal.streak < 0:
		return DifficultyLevel.EASY
	return DifficultyLevel.MEDIUM


def adaptive_reason(level: DifficultyLevel) -> str:
	return ADAPTIVE_REASONS[level]


def canonical_subject(subject: Optional[str]) -> Optional[str]:
	if not subject:
		return None
	return _SUBJECT_INDEX.get(fold_text(subject))


def resolve_competency(subject: Optional[str], level: DifficultyLevel) -> str:
	name = canonical_subject(subject)
	if name is None:
		return GENERAL_COMPETENCY
	return LOMLOE_COMPETENCIES[name][level]


def recent_topics(history: Optional[Iterable[QuestionRecord]], window: int = RECENT_TOPICS_WINDOW) -> str:
	"""Comma-joined topics of the trailing ``window`` records, oldest first.

	Records without a topic still occupy a slot in the window.
	"""
	if not history:
		return ""
	records: List[QuestionRecord] = list(history)[-window:]
	topics = [r.topic.strip() for r in records if r.topic and r.topic.strip()]
	return ", ".join(topics)
