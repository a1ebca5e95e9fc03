"""Environment-driven deployment settings, read once by config.settings."""

from pathlib import Path

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    django_secret_key: SecretStr = SecretStr("django-insecure-ticketing-dev-key")
    django_debug: bool = False
    # Comma separated, e.g. "api.example.com,localhost"
    django_allowed_hosts: str = "localhost,127.0.0.1,testserver"

    ticketing_db_path: Path = BASE_DIR / "db.sqlite3"
    ticketing_time_zone: str = "Asia/Tokyo"
    ticketing_log_level: str = "INFO"

    @field_validator("ticketing_log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def allowed_hosts(self) -> list[str]:
        return [host.strip() for host in self.django_allowed_hosts.split(",") if host.strip()]
