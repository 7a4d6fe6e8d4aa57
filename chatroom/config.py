from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8098
    CORS_ORIGINS: str = "*"

    # Database
    DATABASE_PATH: str = "chatroom.db"
    SQL_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    # Auth
    AUTH_JWT_SECRET: str = "chatroom-dev-secret"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_TOKEN_TTL_MINUTES: int = 60 * 24
    SESSION_COOKIE_NAME: str = "chatroom_session"

    # Chat
    CHAT_CHANNEL: str = "chat"
    CHAT_HISTORY_LIMIT: int = 50
    MESSAGE_MAX_LENGTH: int = 1000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
