from __future__ import annotations
import math
from typing import Dict, List, Optional, Sequence

from .models import (
	AnalyticsSummary,
	AreaScore,
	DifficultyLevel,
	DifficultyTally,
	LearningCurvePoint,
	QuestionRecord,
)

STRENGTH_THRESHOLD = 75
IMPROVEMENT_THRESHOLD = 50
LEARNING_CURVE_WINDOW = 10


def _round_half_up(value: float) -> int:
	return int(math.floor(value + 0.5))


def _round_tenth_half_up(value: float) -> float:
	return math.floor(value * 10 + 0.5) / 10


def _empty_tallies() -> Dict[DifficultyLevel, DifficultyTally]:
	return {level: DifficultyTally() for level in DifficultyLevel}


def current_streak(history: Sequence[QuestionRecord]) -> int:
	streak = 0
	for record in reversed(history):
		if not record.correct:
			break
		streak += 1
	return streak


def learning_curve(history: Sequence[QuestionRecord], window: int = LEARNING_CURVE_WINDOW) -> List[LearningCurvePoint]:
	recent = list(history)[-window:]
	return [
		LearningCurvePoint(position=i, correct=1 if r.correct else 0, difficulty=r.difficulty)
		for i, r in enumerate(recent, start=1)
	]


def summarize(history: Optional[Sequence[QuestionRecord]]) -> AnalyticsSummary:
	"""Aggregate an answer history (oldest first) into an AnalyticsSummary.

	Strength and improvement areas only consider difficulty tiers that were
	attempted at least once; a tier at exactly 75% is a strength, one at
	exactly 50% is neither.
	"""
	records = list(history or [])
	by_difficulty = _empty_tallies()
	if not records:
		return AnalyticsSummary(by_difficulty=by_difficulty)

	correct = 0
	weight_sum = 0
	for record in records:
		tally = by_difficulty[record.difficulty]
		tally.total += 1
		weight_sum += record.difficulty.weight
		if record.correct:
			tally.correct += 1
			correct += 1

	strengths: List[AreaScore] = []
	improvements: List[AreaScore] = []
	for level, tally in by_difficulty.items():
		if tally.total == 0:
			continue
		acc = tally.correct / tally.total * 100
		if acc >= STRENGTH_THRESHOLD:
			strengths.append(AreaScore(level=level, accuracy=_round_half_up(acc)))
		if acc < IMPROVEMENT_THRESHOLD:
			improvements.append(AreaScore(level=level, accuracy=_round_half_up(acc)))

	total = len(records)
	return AnalyticsSummary(
		total_questions=total,
		accuracy=_round_half_up(correct / total * 100),
		correct_count=correct,
		incorrect_count=total - correct,
		average_difficulty_score=_round_tenth_half_up(weight_sum / total),
		by_difficulty=by_difficulty,
		strength_areas=strengths,
		improvement_areas=improvements,
		learning_curve=learning_curve(records),
		current_streak=current_streak(records),
	)
