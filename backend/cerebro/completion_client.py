from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Protocol, Sequence

import httpx

from .errors import UpstreamError
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplingParams:
	temperature: float = 0.8
	max_tokens: int = 800
	top_p: float = 0.9


@dataclass(frozen=True)
class ChatMessage:
	role: Literal["system", "user", "assistant"]
	content: str

	def as_dict(self) -> Dict[str, str]:
		return {"role": self.role, "content": self.content}


@dataclass
class Completion:
	text: str
	model: str
	usage: Dict[str, Any] = field(default_factory=dict)


class CompletionProvider(Protocol):
	model: str

	async def complete(self, messages: Sequence[ChatMessage], params: SamplingParams) -> Completion:
		...


class OpenRouterClient:
	"""One request/response call to an OpenAI-compatible chat-completions endpoint.

	No retries and no fallback: any failure raises ``UpstreamError``.
	"""

	def __init__(self, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
		if not settings.openrouter_api_key:
			raise ValueError("OPENROUTER_API_KEY is not configured")
		self.model = settings.openrouter_model
		self.base_url = settings.openrouter_base_url
		self._headers = {
			"Authorization": f"Bearer {settings.openrouter_api_key}",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.app_url,
			"X-Title": settings.app_title,
		}
		self._client = httpx.AsyncClient(timeout=settings.request_timeout_seconds, transport=transport)

	async def complete(self, messages: Sequence[ChatMessage], params: SamplingParams) -> Completion:
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": [m.as_dict() for m in messages],
			"temperature": params.temperature,
			"max_tokens": params.max_tokens,
			"top_p": params.top_p,
		}
		try:
			r = await self._client.post(self.base_url, headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			response = http_err.response
			logger.error("OpenRouter API error %s: %s", response.status_code, response.text)
			raise UpstreamError(
				f"OpenRouter API failed: {response.reason_phrase or response.status_code}",
				status=response.status_code,
			) from http_err
		except httpx.TimeoutException as timeout_err:
			logger.error("OpenRouter API timed out after %ss", self._client.timeout.read)
			raise UpstreamError("OpenRouter API timed out") from timeout_err
		except httpx.RequestError as net_err:
			logger.error("OpenRouter API unreachable: %s", net_err)
			raise UpstreamError(f"OpenRouter API unreachable: {net_err.__class__.__name__}") from net_err

		try:
			data = r.json()
			text = data["choices"][0]["message"]["content"]
		except (ValueError, KeyError, IndexError, TypeError) as body_err:
			logger.error("Unexpected OpenRouter response: %s", r.text)
			raise UpstreamError("OpenRouter returned an empty completion", status=r.status_code) from body_err
		if not isinstance(text, str) or not text.strip():
			logger.error("Unexpected OpenRouter response: %s", r.text)
			raise UpstreamError("OpenRouter returned an empty completion", status=r.status_code)

		usage = data.get("usage") if isinstance(data.get("usage"), dict) else {}
		return Completion(text=text.strip(), model=data.get("model") or self.model, usage=usage)

	async def aclose(self) -> None:
		await self._client.aclose()


def short_model_name(model: str) -> str:
	# "anthropic/claude-3.5-sonnet" -> "claude-3.5-sonnet"
	return model.rsplit("/", 1)[-1]


def system_and_user(system_prompt: str, user_turn: str) -> List[ChatMessage]:
	return [ChatMessage("system", system_prompt), ChatMessage("user", user_turn)]
