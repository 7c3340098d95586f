from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Low temperature keeps the model on the required passage layout
	gemini_temperature: float = Field(default=0.3, validation_alias="GEMINI_TEMPERATURE")
	gemini_max_output_tokens: int = Field(default=6000, validation_alias="GEMINI_MAX_OUTPUT_TOKENS")
	gemini_timeout_seconds: float = Field(default=120.0, validation_alias="GEMINI_TIMEOUT_SECONDS")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="openai/gpt-4o", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="C1 Reading Builder", validation_alias="OPENROUTER_TITLE")

	# Retry budgets for the generate -> validate loop
	batch_max_retries: int = Field(default=5, validation_alias="BATCH_MAX_RETRIES")
	batch_retry_delay: float = Field(default=1.5, validation_alias="BATCH_RETRY_DELAY")
	regenerate_max_retries: int = Field(default=3, validation_alias="REGENERATE_MAX_RETRIES")
	regenerate_retry_delay: float = Field(default=1.0, validation_alias="REGENERATE_RETRY_DELAY")

	# Stored batches older than this are purged
	passage_retention_days: int = Field(default=7, validation_alias="PASSAGE_RETENTION_DAYS")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
