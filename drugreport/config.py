"""Configuration settings for the DrugReport service."""
import os


class Settings:
    """Application settings loaded from environment variables."""

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_VISION_MODEL: str = os.getenv("OPENAI_VISION_MODEL", "gpt-4o-mini")
    OPENAI_MAX_TOKENS: int = int(os.getenv("OPENAI_MAX_TOKENS", "1000"))
    OPENAI_TEMPERATURE: float = float(os.getenv("OPENAI_TEMPERATURE", "0.2"))

    # NAFDAC Greenbook registry
    NAFDAC_API_URL: str = os.getenv("NAFDAC_API_URL", "https://greenbook.nafdac.gov.ng/api/datatable/drugs")
    NAFDAC_PAGE_SIZE: int = int(os.getenv("NAFDAC_PAGE_SIZE", "50"))

    # openFDA drug labels
    OPENFDA_LABEL_URL: str = os.getenv("OPENFDA_LABEL_URL", "https://api.fda.gov/drug/label.json")
    OPENFDA_API_KEY: str = os.getenv("OPENFDA_API_KEY", "")
    OPENFDA_RESULTS_PER_INGREDIENT: int = int(os.getenv("OPENFDA_RESULTS_PER_INGREDIENT", "3"))

    # HTTP client
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
    HTTP_USER_AGENT: str = os.getenv("HTTP_USER_AGENT", "DrugReport/1.0 (httpx)")

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "false").lower() == "true"

    # Security Configuration
    CORS_ORIGINS: list = os.getenv("CORS_ORIGINS", "*").split(",")

    @classmethod
    def validate(cls) -> bool:
        """Validate required settings."""
        if not cls.OPENAI_API_KEY:
            print("⚠️  Warning: OPENAI_API_KEY not set. Summaries will use fallback mode.")
        return True

# Global settings instance
settings = Settings()
