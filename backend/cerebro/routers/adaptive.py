from __future__ import annotations
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from ..analytics import summarize
from ..completion_client import CompletionProvider
from ..deps import get_completion_provider
from ..errors import ConfigurationError, InvalidRequestError
from ..generator import generate_adaptive_question
from ..models import AnalyticsSummary, CamelModel, GeneratedQuestion, GenerationMetadata, PerformanceSignal, QuestionRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/adaptive", tags=["adaptive"])

MISSING_KEY_MESSAGE = "API key not configured. Please set OPENROUTER_API_KEY environment variable."


class GenerateRequest(CamelModel):
	# Optional here so a missing field produces our 400 message instead of a schema error
	level: Optional[str] = None
	subject: Optional[str] = None
	performance: Optional[PerformanceSignal] = None
	question_history: Optional[List[QuestionRecord]] = None


class GenerateResponse(CamelModel):
	success: bool = True
	question: GeneratedQuestion
	metadata: GenerationMetadata


class AnalyticsRequest(CamelModel):
	history: Optional[List[QuestionRecord]] = None


class AnalyticsResponse(CamelModel):
	success: bool = True
	analytics: AnalyticsSummary


@router.post("/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest, provider: Optional[CompletionProvider] = Depends(get_completion_provider)):
	level = (req.level or "").strip()
	subject = (req.subject or "").strip()
	if not level or not subject:
		raise InvalidRequestError("Missing required fields: level and subject")
	if provider is None:
		logger.error("OPENROUTER_API_KEY not configured; refusing to generate")
		raise ConfigurationError(MISSING_KEY_MESSAGE)

	result = await generate_adaptive_question(
		provider,
		level=level,
		subject=subject,
		performance=req.performance,
		history=req.question_history,
	)
	return GenerateResponse(question=result.question, metadata=result.metadata)


@router.post("/analytics", response_model=AnalyticsResponse)
def analytics(req: Optional[AnalyticsRequest] = None):
	history = req.history if req is not None else None
	return AnalyticsResponse(analytics=summarize(history))
