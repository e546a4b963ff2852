from __future__ import annotations
from typing import AsyncIterator, Optional

from fastapi import Depends

from .completion_client import CompletionProvider, OpenRouterClient
from .settings import Settings, get_settings
from .speech_client import SpeechClient


# Clients are request-scoped: opened per request and closed when the response is done.
# A missing key yields None so routes can validate input before reporting configuration errors.

async def get_completion_provider(settings: Settings = Depends(get_settings)) -> AsyncIterator[Optional[CompletionProvider]]:
	if not settings.openrouter_api_key:
		yield None
		return
	client = OpenRouterClient(settings)
	try:
		yield client
	finally:
		await client.aclose()


async def get_speech_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[Optional[SpeechClient]]:
	if not settings.openai_api_key:
		yield None
		return
	client = SpeechClient(settings)
	try:
		yield client
	finally:
		await client.aclose()
