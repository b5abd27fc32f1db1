from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "TixIt API"
    PORT: int = 5000
    # Comma-separated origins for CORS (e.g. https://tixit.app,https://www.tixit.app). If empty, uses CLIENT_BASE_URL + localhost defaults.
    CORS_ORIGINS: str = ""

    SECRET_KEY: str
    SESSION_SECRET: str = ""
    TOKEN_EXPIRE_DAYS: int = 7
    PASSWORD_HASH_ROUNDS: int = 29000

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    CLIENT_BASE_URL: str = "http://localhost:3000"
    API_PUBLIC_URL: str = "http://localhost:5000"  # base for the Google OAuth callback URL

    # Google OAuth (authorization code flow)
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_HTTP_TIMEOUT: float = 10.0

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text|json

    # Rate limits: requests per window, per client address
    RATE_LIMIT_AUTH: int = 20
    RATE_LIMIT_AUTH_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_TICKET_CREATE: int = 5
    RATE_LIMIT_TICKET_CREATE_WINDOW_SECONDS: int = 10 * 60
    RATE_LIMIT_TICKET_LIST: int = 60
    RATE_LIMIT_TICKET_LIST_WINDOW_SECONDS: int = 60

    @property
    def state_secret(self) -> str:
        return self.SESSION_SECRET or self.SECRET_KEY

    @property
    def google_callback_url(self) -> str:
        return self.API_PUBLIC_URL.rstrip("/") + "/api/auth/google/callback"


settings = Settings()
