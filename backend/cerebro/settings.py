from __future__ import annotations
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Chat-completion provider (OpenRouter, OpenAI-compatible API)
	openrouter_api_key: Optional[str] = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_model: str = Field(default="anthropic/claude-3.5-sonnet", validation_alias="OPENROUTER_MODEL")

	# Optional: speech synthesis provider. Without a key the client falls back to browser speech
	openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")
	openai_speech_url: str = Field(default="https://api.openai.com/v1/audio/speech", validation_alias="OPENAI_SPEECH_URL")
	speech_model: str = Field(default="tts-1", validation_alias="OPENAI_SPEECH_MODEL")

	# Sent to OpenRouter as attribution headers
	app_url: str = Field(default="https://cerebro-v10.netlify.app", validation_alias="APP_URL")
	app_title: str = Field(default="Cerebro - Adaptive Learning Platform", validation_alias="APP_TITLE")

	# Comma-separated list; "*" allows any origin
	allowed_origins: str = Field(default="*", validation_alias="ALLOWED_ORIGINS")
	port: int = Field(default=3000, validation_alias="PORT")
	environment: str = Field(default="development", validation_alias="NODE_ENV")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Upper bound for any single provider call
	request_timeout_seconds: float = Field(default=30.0, validation_alias="PROVIDER_TIMEOUT_SECONDS")

	# Static frontend, mounted at /app when the directory exists
	public_dir: str = Field(default="public", validation_alias="PUBLIC_DIR")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

	@property
	def is_production(self) -> bool:
		return self.environment.strip().lower() == "production"

	def origins(self) -> List[str]:
		values = [o.strip() for o in (self.allowed_origins or "").split(",") if o.strip()]
		return values or ["*"]


@lru_cache
def get_settings() -> Settings:
	return Settings()
