from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./whatsappbot.db"
    DB_CREATE_TABLES: bool = True

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    # WhatsApp Business (Graph API)
    WHATSAPP_API_BASE_URL: str = "https://graph.facebook.com/v18.0"
    WHATSAPP_PHONE_NUMBER_ID: str = ""
    WHATSAPP_BUSINESS_ACCOUNT_ID: str = ""
    WHATSAPP_ACCESS_TOKEN: str = ""
    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_TIMEOUT_SECONDS: int = 20

    # Claude
    CLAUDE_API_URL: str = "https://api.anthropic.com/v1/messages"
    CLAUDE_API_KEY: str = ""
    CLAUDE_API_VERSION: str = "2023-06-01"
    CLAUDE_MODEL: str = "claude-3-5-sonnet-20241022"
    CLAUDE_MAX_TOKENS: int = 1024
    CLAUDE_TIMEOUT_SECONDS: int = 30

    # Assistant persona
    BUSINESS_NAME: str = "Leo Imports"
    ASSISTANT_CREATOR: str = "LeoDev"
    RESPONSE_LANGUAGE: str = "español"

    # CORS (comma separated)
    CORS_ALLOWED_ORIGINS: str = "*"
    CORS_ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,OPTIONS"
    CORS_ALLOWED_HEADERS: str = "*"
    CORS_ALLOW_CREDENTIALS: bool = False

    class Config:
        env_file = ".env"

    @staticmethod
    def split_csv(value: str) -> list[str]:
        return [item.strip() for item in value.split(",") if item.strip()]


settings = Settings()
