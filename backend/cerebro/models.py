from __future__ import annotations
import unicodedata
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def fold_text(value: str) -> str:
	# Lowercase and drop accents so "Difícil", "dificil" and "DIFICIL" compare equal
	decomposed = unicodedata.normalize("NFKD", value.strip().lower())
	return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class DifficultyLevel(str, Enum):
	EASY = "fácil"
	MEDIUM = "medio"
	HARD = "difícil"

	@classmethod
	def _missing_(cls, value: object) -> Optional["DifficultyLevel"]:
		if isinstance(value, str):
			return _DIFFICULTY_ALIASES.get(fold_text(value))
		return None

	@classmethod
	def coerce(cls, value: Any, default: Optional["DifficultyLevel"] = None) -> "DifficultyLevel":
		"""Best-effort conversion; unknown or missing values become ``default`` (Medium)."""
		if isinstance(value, cls):
			return value
		try:
			return cls(value)
		except ValueError:
			return default or cls.MEDIUM

	@property
	def weight(self) -> int:
		return _DIFFICULTY_WEIGHTS[self]

	@property
	def rank(self) -> int:
		return _DIFFICULTY_WEIGHTS[self] - 1

	def __lt__(self, other: object) -> bool:
		if not isinstance(other, DifficultyLevel):
			return NotImplemented
		return self.rank < other.rank

	def __le__(self, other: object) -> bool:
		if not isinstance(other, DifficultyLevel):
			return NotImplemented
		return self.rank <= other.rank

	def __gt__(self, other: object) -> bool:
		if not isinstance(other, DifficultyLevel):
			return NotImplemented
		return self.rank > other.rank

	def __ge__(self, other: object) -> bool:
		if not isinstance(other, DifficultyLevel):
			return NotImplemented
		return self.rank >= other.rank


_DIFFICULTY_WEIGHTS: Dict[DifficultyLevel, int] = {
	DifficultyLevel.EASY: 1,
	DifficultyLevel.MEDIUM: 2,
	DifficultyLevel.HARD: 3,
}

_DIFFICULTY_ALIASES: Dict[str, DifficultyLevel] = {
	"facil": DifficultyLevel.EASY,
	"easy": DifficultyLevel.EASY,
	"medio": DifficultyLevel.MEDIUM,
	"medium": DifficultyLevel.MEDIUM,
	"dificil": DifficultyLevel.HARD,
	"hard": DifficultyLevel.HARD,
}


class CamelModel(BaseModel):
	"""Snake_case attributes, camelCase on the wire."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PerformanceSignal(CamelModel):
	accuracy: float = 0.5
	streak: int = 0

	@field_validator("accuracy", mode="before")
	@classmethod
	def _default_accuracy(cls, value: Any) -> Any:
		if value is None:
			return 0.5
		return value

	@field_validator("accuracy")
	@classmethod
	def _clamp_accuracy(cls, value: float) -> float:
		return min(1.0, max(0.0, value))

	@field_validator("streak", mode="before")
	@classmethod
	def _default_streak(cls, value: Any) -> Any:
		if value is None:
			return 0
		return value


class QuestionRecord(CamelModel):
	topic: Optional[str] = None
	difficulty: DifficultyLevel = DifficultyLevel.MEDIUM
	correct: bool = False

	@field_validator("difficulty", mode="before")
	@classmethod
	def _lenient_difficulty(cls, value: Any) -> DifficultyLevel:
		return DifficultyLevel.coerce(value)

	@field_validator("correct", mode="before")
	@classmethod
	def _default_correct(cls, value: Any) -> Any:
		if value is None:
			return False
		return value


class GeneratedQuestion(CamelModel):
	question: str = Field(min_length=1)
	options: List[str] = Field(min_length=4, max_length=4)
	correct_index: int = Field(ge=0, le=3)
	explanation: str = ""
	difficulty: DifficultyLevel
	lomloe_competency: str
	topic: str = ""


class GenerationMetadata(CamelModel):
	ai_model: str
	target_difficulty: DifficultyLevel
	adaptive_reason: str
	timestamp: str
	usage_tokens: Dict[str, Any] = Field(default_factory=dict)


class DifficultyTally(CamelModel):
	correct: int = 0
	total: int = 0


class AreaScore(CamelModel):
	level: DifficultyLevel
	accuracy: int


class LearningCurvePoint(CamelModel):
	position: int
	correct: int
	difficulty: DifficultyLevel


class AnalyticsSummary(CamelModel):
	total_questions: int = 0
	accuracy: int = 0
	correct_count: int = 0
	incorrect_count: int = 0
	average_difficulty_score: float = 0.0
	by_difficulty: Dict[DifficultyLevel, DifficultyTally] = Field(default_factory=dict)
	strength_areas: List[AreaScore] = Field(default_factory=list)
	improvement_areas: List[AreaScore] = Field(default_factory=list)
	learning_curve: List[LearningCurvePoint] = Field(default_factory=list)
	current_streak: int = 0
