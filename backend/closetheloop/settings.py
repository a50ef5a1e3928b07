from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	gemini_timeout_seconds: float = Field(default=60.0, validation_alias="GEMINI_TIMEOUT_SECONDS")
	gemini_temperature: float = Field(default=0.3, validation_alias="GEMINI_TEMPERATURE")
	kau_max_output_tokens: int = Field(default=1024, validation_alias="KAU_MAX_OUTPUT_TOKENS")
	feedback_max_output_tokens: int = Field(default=2048, validation_alias="FEEDBACK_MAX_OUTPUT_TOKENS")
	# Clamp on document/submission text embedded into prompts
	max_prompt_text_chars: int = Field(default=60000, validation_alias="MAX_PROMPT_TEXT_CHARS")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Object storage: "local" (files under storage_dir) or "s3"
	storage_backend: str = Field(default="local", validation_alias="STORAGE_BACKEND")
	storage_dir: str = Field(default="./storage", validation_alias="STORAGE_DIR")
	storage_bucket: str = Field(default="closetheloop-files", validation_alias="STORAGE_BUCKET")
	aws_region: str = Field(default="us-east-1", validation_alias="AWS_REGION")

	# HTTP surface
	api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")
	cors_origins: List[str] = Field(default_factory=lambda: ["*"], validation_alias="CORS_ORIGINS")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
