from __future__ import annotations
import base64
import logging
from typing import Any, Dict, Optional

import httpx

from .errors import UpstreamError
from .settings import Settings

logger = logging.getLogger(__name__)

VOICES = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")
DEFAULT_VOICE = "nova"
# Provider rejects longer inputs
MAX_INPUT_CHARS = 4096


def normalize_voice(voice: Optional[str]) -> str:
	candidate = (voice or "").strip().lower()
	return candidate if candidate in VOICES else DEFAULT_VOICE


def to_data_uri(audio: bytes, mime: str = "audio/mpeg") -> str:
	return f"data:{mime};base64,{base64.b64encode(audio).decode('ascii')}"


class SpeechClient:
	def __init__(self, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
		if not settings.openai_api_key:
			raise ValueError("OPENAI_API_KEY is not configured")
		self.model = settings.speech_model
		self.url = settings.openai_speech_url
		self._headers = {
			"Authorization": f"Bearer {settings.openai_api_key}",
			"Content-Type": "application/json",
		}
		self._client = httpx.AsyncClient(timeout=settings.request_timeout_seconds, transport=transport)

	async def synthesize(self, text: str, voice: str = DEFAULT_VOICE) -> bytes:
		payload: Dict[str, Any] = {
			"model": self.model,
			"input": text[:MAX_INPUT_CHARS],
			"voice": normalize_voice(voice),
			"response_format": "mp3",
		}
		try:
			r = await self._client.post(self.url, headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			response = http_err.response
			logger.warning("Speech API error %s: %s", response.status_code, response.text)
			raise UpstreamError(f"Speech API failed: {response.status_code}", status=response.status_code) from http_err
		except httpx.TimeoutException as timeout_err:
			raise UpstreamError("Speech API timed out") from timeout_err
		except httpx.RequestError as net_err:
			raise UpstreamError(f"Speech API unreachable: {net_err.__class__.__name__}") from net_err
		if not r.content:
			raise UpstreamError("Speech API returned no audio", status=r.status_code)
		return r.content

	async def aclose(self) -> None:
		await self._client.aclose()
