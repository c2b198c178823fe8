"""
Configuration module for the application.
All configuration values are read from environment variables.
Quiz rules fall back to the defaults the quiz builder ships with.
"""
import os
import secrets
import warnings


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name, "")
    return int(value) if value else default


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Flask Configuration
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "")
        self.FLASK_ENV: str = os.getenv("FLASK_ENV", "")
        self.FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "").lower() == "true"

        # Generate a development SECRET_KEY if not set and in development mode
        if not self.SECRET_KEY and self.FLASK_ENV != "production":
            self.SECRET_KEY = secrets.token_urlsafe(32)
            warnings.warn(
                "SECRET_KEY not set. Generated a temporary key for development. "
                "Set SECRET_KEY in your .env file for production!",
                UserWarning
            )

        # Database Configuration
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "")
        self.DB_USER: str = os.getenv("DB_USER", "")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_HOST: str = os.getenv("DB_HOST", "")
        self.DB_PORT: str = os.getenv("DB_PORT", "")
        self.DB_NAME: str = os.getenv("DB_NAME", "")

        # API Configuration
        self.API_PREFIX: str = os.getenv("API_PREFIX", "/api")

        # Application URLs (share links are built from this)
        self.APP_BASE_URL: str = os.getenv("APP_BASE_URL", "http://localhost:5000").rstrip("/")
        self.SHARE_ID_BYTES: int = _int_env("SHARE_ID_BYTES", 9)

        # Quiz builder rules
        self.MIN_OPTIONS_PER_QUESTION: int = _int_env("MIN_OPTIONS_PER_QUESTION", 2)
        self.MAX_OPTIONS_PER_QUESTION: int = _int_env("MAX_OPTIONS_PER_QUESTION", 4)
        self.MIN_QUESTIONS_PER_QUIZ: int = _int_env("MIN_QUESTIONS_PER_QUIZ", 1)
        self.MAX_TITLE_LENGTH: int = _int_env("MAX_TITLE_LENGTH", 200)
        self.MAX_DESCRIPTION_LENGTH: int = _int_env("MAX_DESCRIPTION_LENGTH", 500)
        self.MAX_PARTICIPANT_VALUE_LENGTH: int = _int_env("MAX_PARTICIPANT_VALUE_LENGTH", 100)

        # Session Configuration
        session_secure = os.getenv("SESSION_COOKIE_SECURE", "")
        self.SESSION_COOKIE_SECURE: bool = session_secure.lower() == "true" if session_secure else False
        session_httponly = os.getenv("SESSION_COOKIE_HTTPONLY", "")
        self.SESSION_COOKIE_HTTPONLY: bool = session_httponly.lower() == "true" if session_httponly else True
        self.SESSION_COOKIE_SAMESITE: str = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")

        # SQLAlchemy Configuration
        self.SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
        sqlalchemy_echo = os.getenv("SQLALCHEMY_ECHO", "")
        self.SQLALCHEMY_ECHO: bool = sqlalchemy_echo.lower() == "true" if sqlalchemy_echo else False

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Database URI: DATABASE_URL if given, otherwise MySQL built from the DB_* variables."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def uses_mysql(self) -> bool:
        return self.SQLALCHEMY_DATABASE_URI.startswith("mysql")

    def share_url(self, share_id: str) -> str:
        """Public link participants use to take a published quiz."""
        return f"{self.APP_BASE_URL}/take/{share_id}"

    def validate(self) -> None:
        """
        Validate required configuration values.
        Only enforces SECRET_KEY in production environment.
        """
        if not self.SECRET_KEY:
            if self.FLASK_ENV == "production":
                raise ValueError(
                    "SECRET_KEY environment variable is required in production. "
                    "Set it in your .env file or environment variables."
                )
        if self.MIN_OPTIONS_PER_QUESTION > self.MAX_OPTIONS_PER_QUESTION:
            raise ValueError("MIN_OPTIONS_PER_QUESTION cannot exceed MAX_OPTIONS_PER_QUESTION")


# Global config instance - will be re-initialized after load_dotenv()
config = Config()


def reload_config() -> Config:
    """Re-read the environment, e.g. after load_dotenv() or in tests."""
    global config
    config = Config()
    return config


def get_config() -> Config:
    return config
