from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./planner.sqlite3"
    SQL_ECHO: bool = False

    JWT_SECRET: str
    JWT_ALGO: str = "HS256"

    SESSION_COOKIE_NAME: str = "session"
    SESSION_TTL_DAYS: int = 7
    COOKIE_SECURE: bool = False

    BCRYPT_ROUNDS: int = 10
    TEMP_PASSWORD_LENGTH: int = 10

    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_SECURE: bool = False
    SMTP_FROM: str = '"Planner App" <no-reply@planner.local>'

    LOG_LEVEL: str = "INFO"
    DB_CONNECT_RETRIES: int = 5

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
