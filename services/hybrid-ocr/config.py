"""Environment-based configuration for the hybrid OCR service."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Hybrid OCR settings, loaded from environment variables."""

    # Server
    PORT: int = 8092
    LOG_LEVEL: str = "INFO"

    # Internal OCR / extractor services (empty = collaborator disabled)
    PDF_OCR_URL: str = ""
    VISION_OCR_URL: str = ""
    KK_EXTRACTOR_URL: str = ""
    SERVICE_AUTH_TOKEN: str = ""

    # Google Vision direct fallback
    GOOGLE_VISION_API_KEY: str = ""
    GOOGLE_VISION_URL: str = "https://vision.googleapis.com/v1/images:annotate"

    # LLM completion provider (OpenAI-compatible)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    KK_OPENAI_MODEL: str = "gpt-4o"
    KK_MAX_TOKENS: int = 4000
    OPENAI_RETRY_ATTEMPTS: int = 2
    OPENAI_RETRY_DELAY: float = 1.0
    OPENAI_RETRY_BACKOFF: float = 2.0

    # Outbound HTTP timeouts
    HTTP_TIMEOUT_SECONDS: int = 120
    HTTP_CONNECT_TIMEOUT: int = 10

    # OCR.space backend for the text-layer PDF endpoint
    OCR_SPACE_API_KEY: str = ""
    OCR_SPACE_URL: str = "https://api.ocr.space/parse/image"

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
