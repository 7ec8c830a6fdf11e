from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"

    # LLM call budget
    llm_timeout_seconds: float = 20.0

    # Chat rate limiting (per session)
    chat_rate_limit_requests: int = 4
    chat_rate_limit_window_seconds: float = 60.0

    # Shopping sessions not touched for this long are dropped
    session_idle_ttl_seconds: float = 30 * 60

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
