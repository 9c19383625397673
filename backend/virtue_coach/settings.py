from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


DEFAULT_MODELS = [
	"gemini-2.5-flash-lite",
	"gemini-2.0-flash-lite",
	"gemini-1.5-flash-lite",
	"gemini-1.5-flash",
	"gemini-pro",
]


class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# Ordered model candidates, tried first to last (JSON list in env)
	dashboard_models: list[str] = Field(default_factory=lambda: list(DEFAULT_MODELS), validation_alias="GEMINI_DASHBOARD_MODELS")
	synthesis_models: list[str] = Field(default_factory=lambda: list(DEFAULT_MODELS), validation_alias="GEMINI_SYNTHESIS_MODELS")
	# Upper bound for a single model attempt
	attempt_timeout_seconds: float = Field(default=30.0, validation_alias="GEMINI_ATTEMPT_TIMEOUT_SECONDS")

	# "development" exposes error details in 500 responses
	environment: str = Field(default="production", validation_alias="APP_ENV")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
	cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"], validation_alias="CORS_ALLOW_ORIGINS")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def is_development(self) -> bool:
		return self.environment.strip().lower() == "development"

settings = Settings()
