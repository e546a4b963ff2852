"""
Provider response parsing
=========================

Turns the free-form text returned by the completion provider into a validated
``GeneratedQuestion``. The text moves through explicit stages:

	RAW -> STRIPPED -> PARSED -> VALIDATED -> ACCEPTED

and any stage may end in REJECTED. Every rejection raises ``SchemaError`` with
the same public message; the ``RejectionReason`` it carries tells the logs
which check failed.
"""

from __future__ import annotations
import json
import logging
from enum import Enum
from typing import Any, List, Optional

from .errors import RejectionReason, SchemaError
from .models import DifficultyLevel, GeneratedQuestion

logger = logging.getLogger(__name__)

FENCE = "```"
OPTION_COUNT = 4


class Stage(str, Enum):
	RAW = "raw"
	STRIPPED = "stripped"
	PARSED = "parsed"
	VALIDATED = "validated"
	ACCEPTED = "accepted"
	REJECTED = "rejected"


def _after_opening_fence(line: str) -> str:
	# Drop the fence and an optional language tag ("```json"), keep anything after it
	rest = line.lstrip()[len(FENCE):]
	i = 0
	while i < len(rest) and (rest[i].isalnum() or rest[i] in "_-+"):
		i += 1
	return rest[i:]


def strip_fences(text: str) -> str:
	"""Remove surrounding whitespace and a markdown code fence, if any.

	Tolerates a missing fence, a language tag, prose before the fence and a
	missing closing fence. Applying it twice gives the same result as once.
	"""
	stripped = (text or "").strip()
	if FENCE not in stripped:
		return stripped

	body: List[str] = []
	inside = False
	closed = False
	for line in stripped.splitlines():
		if not inside:
			if line.lstrip().startswith(FENCE):
				inside = True
				line = _after_opening_fence(line)
				if FENCE in line:
					body.append(line[: line.index(FENCE)])
					closed = True
					break
				if line.strip():
					body.append(line)
			continue
		if FENCE in line:
			body.append(line[: line.index(FENCE)])
			closed = True
			break
		body.append(line)

	if not inside:
		# Fence only appears mid-line, e.g. inside prose; leave the text alone
		return stripped
	if not closed:
		logger.debug("Provider output had an opening fence without a closing one")
	return "\n".join(body).strip()


def decode_payload(stripped: str) -> Any:
	if not stripped:
		raise SchemaError(RejectionReason.EMPTY, raw=stripped, detail="empty provider output")
	try:
		return json.loads(stripped)
	except json.JSONDecodeError as first_err:
		# Models sometimes add a sentence around the object; try the outermost braces
		first = stripped.find("{")
		last = stripped.rfind("}")
		if first != -1 and last > first:
			try:
				return json.loads(stripped[first : last + 1])
			except json.JSONDecodeError:
				pass
		raise SchemaError(RejectionReason.UNPARSEABLE, raw=stripped, detail=str(first_err)) from first_err


def _optional_text(value: Any) -> Optional[str]:
	if isinstance(value, str) and value.strip():
		return value.strip()
	return None


def validate_payload(data: Any, *, target: DifficultyLevel, competency: str) -> GeneratedQuestion:
	if not isinstance(data, dict):
		raise SchemaError(RejectionReason.NOT_AN_OBJECT, detail=f"decoded a {type(data).__name__}")

	question = _optional_text(data.get("question"))
	if question is None:
		raise SchemaError(RejectionReason.MISSING_QUESTION, detail="question missing or blank")

	options = data.get("options")
	if not isinstance(options, list) or len(options) != OPTION_COUNT:
		count = len(options) if isinstance(options, list) else None
		raise SchemaError(RejectionReason.INVALID_OPTIONS, detail=f"expected {OPTION_COUNT} options, got {count}")
	if not all(isinstance(o, str) for o in options):
		raise SchemaError(RejectionReason.INVALID_OPTIONS, detail="options must all be strings")

	correct_index = data.get("correctIndex")
	# bool is an int subclass; JSON true/false is not an index
	if isinstance(correct_index, bool) or not isinstance(correct_index, int):
		raise SchemaError(RejectionReason.INVALID_CORRECT_INDEX, detail=f"correctIndex={correct_index!r}")
	if not 0 <= correct_index < OPTION_COUNT:
		raise SchemaError(RejectionReason.INVALID_CORRECT_INDEX, detail=f"correctIndex={correct_index} out of range")

	return GeneratedQuestion(
		question=question,
		options=[o.strip() for o in options],
		correct_index=correct_index,
		explanation=_optional_text(data.get("explanation")) or "",
		difficulty=DifficultyLevel.coerce(data.get("difficulty"), default=target),
		lomloe_competency=_optional_text(data.get("lomloeCompetency")) or competency,
		topic=_optional_text(data.get("topic")) or "",
	)


class QuestionParser:
	"""Single-use parser that records how far the text got before rejection."""

	def __init__(self, *, target: DifficultyLevel, competency: str) -> None:
		self.target = target
		self.competency = competency
		self.stage = Stage.RAW
		self.reason: Optional[RejectionReason] = None

	def parse(self, raw: str) -> GeneratedQuestion:
		try:
			stripped = strip_fences(raw)
			self.stage = Stage.STRIPPED
			data = decode_payload(stripped)
			self.stage = Stage.PARSED
			question = validate_payload(data, target=self.target, competency=self.competency)
			self.stage = Stage.VALIDATED
		except SchemaError as err:
			failed_at = self.stage
			self.stage = Stage.REJECTED
			self.reason = err.reason
			err.raw = raw
			logger.warning(
				"Rejected provider output after stage %s (%s: %s). Raw content: %r",
				failed_at.value,
				err.reason.value,
				err.detail,
				raw,
			)
			raise
		self.stage = Stage.ACCEPTED
		return question


def parse_question(raw: str, *, target: DifficultyLevel, competency: str) -> GeneratedQuestion:
	return QuestionParser(target=target, competency=competency).parse(raw)