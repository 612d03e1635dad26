from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    # Pagination defaults
    DEFAULT_PAGE_SIZE: int = 20
    DEFAULT_SORT: str = "id asc"

    # Redis settings (cursor overflow cache)
    REDIS_IP: str = "localhost"
    REDIS_PORT: int = 6379
    CURSOR_REDIS_DB: int = 2
    REDIS_MAX_CONNECTIONS: int = 50
    REDIS_SOCKET_TIMEOUT: float = 5
    REDIS_CONNECT_TIMEOUT: float = 5

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str | None = None
    ENVIRONMENT: str = "development"


app_settings = Settings()
