from __future__ import annotations
from enum import Enum
from typing import Optional


class CerebroError(Exception):
	"""Base class for failures that map onto a structured JSON error response."""

	status_code: int = 500

	def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
		super().__init__(message)
		self.message = message
		if status_code is not None:
			self.status_code = status_code


class InvalidRequestError(CerebroError):
	status_code = 400


class ConfigurationError(CerebroError):
	status_code = 500


class UpstreamError(CerebroError):
	status_code = 500

	def __init__(self, message: str, *, status: Optional[int] = None) -> None:
		super().__init__(message)
		# HTTP status reported by the provider, None for network failures
		self.status = status


class RejectionReason(str, Enum):
	EMPTY = "empty"
	UNPARSEABLE = "unparseable"
	NOT_AN_OBJECT = "not_an_object"
	MISSING_QUESTION = "missing_question"
	INVALID_OPTIONS = "invalid_options"
	INVALID_CORRECT_INDEX = "invalid_correct_index"


INVALID_RESPONSE_FORMAT = "AI generated invalid response format"


class SchemaError(CerebroError):
	"""Provider text could not be turned into a question.

	The public message never changes with the reason; ``reason`` and ``raw``
	are for logs only.
	"""

	status_code = 500

	def __init__(self, reason: RejectionReason, *, raw: str = "", detail: str = "") -> None:
		super().__init__(INVALID_RESPONSE_FORMAT)
		self.reason = reason
		self.raw = raw
		self.detail = detail
