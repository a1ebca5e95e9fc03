"""Unit tests for environment-driven deployment settings.

Run with: pytest tests/test_env.py -v
"""

from pathlib import Path

from config.env import EnvSettings


class TestEnvSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DJANGO_DEBUG", "DJANGO_ALLOWED_HOSTS", "TICKETING_TIME_ZONE", "TICKETING_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        env = EnvSettings(_env_file=None)

        assert env.django_debug is False
        assert env.ticketing_time_zone == "Asia/Tokyo"
        assert env.ticketing_log_level == "INFO"
        assert "testserver" in env.allowed_hosts

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DJANGO_DEBUG", "true")
        monkeypatch.setenv("DJANGO_ALLOWED_HOSTS", "tickets.example.com, localhost,")
        monkeypatch.setenv("TICKETING_DB_PATH", "/tmp/ticketing.sqlite3")
        monkeypatch.setenv("TICKETING_LOG_LEVEL", "debug")

        env = EnvSettings(_env_file=None)

        assert env.django_debug is True
        assert env.allowed_hosts == ["tickets.example.com", "localhost"]
        assert env.ticketing_db_path == Path("/tmp/ticketing.sqlite3")
        assert env.ticketing_log_level == "DEBUG"

    def test_empty_value_keeps_default(self, monkeypatch):
        monkeypatch.setenv("TICKETING_TIME_ZONE", "")

        assert EnvSettings(_env_file=None).ticketing_time_zone == "Asia/Tokyo"
