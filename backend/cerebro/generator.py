from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from .completion_client import CompletionProvider, SamplingParams, short_model_name, system_and_user
from .difficulty import adaptive_reason, estimate_difficulty, recent_topics, resolve_competency
from .models import GeneratedQuestion, GenerationMetadata, PerformanceSignal, QuestionRecord
from .parsing import parse_question
from .prompts import QUESTION_USER_TURN, build_question_prompt

logger = logging.getLogger(__name__)

QUESTION_PARAMS = SamplingParams(temperature=0.8, max_tokens=800, top_p=0.9)


@dataclass
class GenerationResult:
	question: GeneratedQuestion
	metadata: GenerationMetadata


def utc_timestamp() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


async def generate_adaptive_question(
	provider: CompletionProvider,
	*,
	level: str,
	subject: str,
	performance: Optional[PerformanceSignal] = None,
	history: Optional[Sequence[QuestionRecord]] = None,
) -> GenerationResult:
	"""Run one adaptive generation: exactly one provider call, no retries.

	Raises UpstreamError when the call fails and SchemaError when the text it
	returns is not a valid question.
	"""
	signal = performance or PerformanceSignal()
	target = estimate_difficulty(signal)
	competency = resolve_competency(subject, target)
	prompt = build_question_prompt(
		level,
		subject,
		target,
		competency,
		signal.accuracy,
		signal.streak,
		recent_topics(history),
	)

	logger.info("Generating question for %s - %s (difficulty: %s)", level, subject, target.value)
	completion = await provider.complete(system_and_user(prompt, QUESTION_USER_TURN), QUESTION_PARAMS)
	question = parse_question(completion.text, target=target, competency=competency)

	metadata = GenerationMetadata(
		ai_model=short_model_name(completion.model),
		target_difficulty=target,
		adaptive_reason=adaptive_reason(target),
		timestamp=utc_timestamp(),
		usage_tokens=completion.usage,
	)
	return GenerationResult(question=question, metadata=metadata)
