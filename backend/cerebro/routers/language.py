from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from ..completion_client import CompletionProvider, short_model_name, system_and_user
from ..conversation import (
	CONVERSATION_PARAMS,
	HINT_PARAMS,
	HINT_USER_TURN,
	ConversationTurn,
	build_conversation_messages,
	build_hint_prompt,
	learner_turns,
)
from ..deps import get_completion_provider, get_speech_client
from ..errors import ConfigurationError, InvalidRequestError, UpstreamError
from ..generator import utc_timestamp
from ..models import CamelModel
from ..speech_client import SpeechClient, normalize_voice, to_data_uri
from .adaptive import MISSING_KEY_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/language", tags=["language"])


class ConversationRequest(CamelModel):
	language: Optional[str] = None
	level: Optional[str] = None
	scenario: Optional[str] = None
	user_message: Optional[str] = None
	conversation_history: Optional[List[ConversationTurn]] = None


class HintRequest(CamelModel):
	language: Optional[str] = None
	level: Optional[str] = None
	scenario: Optional[str] = None
	conversation_history: Optional[List[ConversationTurn]] = None


class SpeakRequest(CamelModel):
	text: Optional[str] = None
	language: Optional[str] = None
	voice: Optional[str] = None


def _require(fields: Dict[str, Optional[str]]) -> Dict[str, str]:
	missing = [name for name, value in fields.items() if not (value or "").strip()]
	if missing:
		raise InvalidRequestError(f"Missing required fields: {', '.join(missing)}")
	return {name: value.strip() for name, value in fields.items()}


def _require_provider(provider: Optional[CompletionProvider]) -> CompletionProvider:
	if provider is None:
		logger.error("OPENROUTER_API_KEY not configured; language endpoints unavailable")
		raise ConfigurationError(MISSING_KEY_MESSAGE)
	return provider


@router.post("/conversation")
async def conversation(req: ConversationRequest, provider: Optional[CompletionProvider] = Depends(get_completion_provider)):
	fields = _require({"language": req.language, "level": req.level, "scenario": req.scenario})
	provider = _require_provider(provider)
	messages = build_conversation_messages(
		fields["language"],
		fields["level"],
		fields["scenario"],
		user_message=req.user_message,
		history=req.conversation_history,
	)
	completion = await provider.complete(messages, CONVERSATION_PARAMS)
	return {
		"success": True,
		"aiMessage": completion.text,
		# Corrections are not produced yet; the field is kept for client compatibility
		"corrections": [],
		"metadata": {
			"aiModel": short_model_name(completion.model),
			"language": fields["language"],
			"level": fields["level"],
			"scenario": fields["scenario"],
			"turn": learner_turns(req.conversation_history, req.user_message),
			"timestamp": utc_timestamp(),
			"usageTokens": completion.usage,
		},
	}


@router.post("/hint")
async def hint(req: HintRequest, provider: Optional[CompletionProvider] = Depends(get_completion_provider)):
	"""Suggest the learner's next line. Missing language, level or scenario is a 400, as on /conversation."""
	fields = _require({"language": req.language, "level": req.level, "scenario": req.scenario})
	provider = _require_provider(provider)
	prompt = build_hint_prompt(fields["language"], fields["level"], fields["scenario"], req.conversation_history)
	completion = await provider.complete(system_and_user(prompt, HINT_USER_TURN), HINT_PARAMS)
	return {"success": True, "hint": completion.text}


def _native_speech(reason: str, language: Optional[str], voice: str) -> Dict[str, Any]:
	return {
		"success": True,
		"audioUrl": None,
		"useNativeSpeech": True,
		"reason": reason,
		"language": language,
		"voice": voice,
	}


async def _read_speak_request(request: Request) -> Optional[SpeakRequest]:
	raw = await request.body()
	if not raw.strip():
		return SpeakRequest()
	try:
		data = json.loads(raw)
		return SpeakRequest.model_validate({} if data is None else data)
	except (ValueError, ValidationError) as err:
		logger.info("Unreadable speak body, client will use native speech: %s", err)
		return None


@router.post("/speak")
async def speak(request: Request, client: Optional[SpeechClient] = Depends(get_speech_client)):
	# Every failure, malformed bodies included, degrades to browser speech with a 200
	req = await _read_speak_request(request)
	if req is None:
		return _native_speech("Invalid request body", None, normalize_voice(None))
	voice = normalize_voice(req.voice)
	text = (req.text or "").strip()
	if not text:
		return _native_speech("Missing required field: text", req.language, voice)
	if client is None:
		logger.info("OPENAI_API_KEY not configured; client will use native speech")
		return _native_speech("Speech synthesis not configured", req.language, voice)
	try:
		audio = await client.synthesize(text, voice)
	except UpstreamError as err:
		logger.warning("Speech synthesis failed, falling back to native speech: %s", err.message)
		return _native_speech("Speech synthesis unavailable", req.language, voice)
	return {
		"success": True,
		"audioUrl": to_data_uri(audio),
		"useNativeSpeech": False,
		"language": req.language,
		"voice": voice,
		"format": "mp3",
	}
