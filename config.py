import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("PORT", "8080"))

    # Storage settings
    data_file: str = os.getenv("BOOKS_DATA_FILE", "db.json")
    book_id_length: int = int(os.getenv("BOOK_ID_LENGTH", "8"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Swagger Simple API")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    docs_url: str = os.getenv("DOCS_URL", "/api-docs")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    # Answer 404 instead of an empty 200 when a book id is unknown
    strict_not_found: bool = _env_flag("STRICT_NOT_FOUND")

    @property
    def cors_origin_list(self) -> list:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
