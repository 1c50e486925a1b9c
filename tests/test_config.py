"""Tests for application settings."""
import pytest
from pressure.config import Settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        """Test default settings without an env file."""
        settings = Settings(_env_file=None)
        assert settings.solver_time_limit == 5.0
        assert settings.solver_check_interval == 1000
        assert settings.solver_max_states == 2_000_000
        assert settings.generator_max_attempts == 40
        assert settings.levels_file is None

    def test_environment_override(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("SOLVER_TIME_LIMIT", "1.5")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)
        assert settings.solver_time_limit == 1.5
        assert settings.log_level == "DEBUG"

    def test_rejects_unknown_log_level(self):
        """Test unknown log levels are rejected."""
        with pytest.raises(ValueError):
            Settings(_env_file=None, log_level="loud")

    def test_rejects_zero_check_interval(self):
        """Test the clock check interval must be positive."""
        with pytest.raises(ValueError):
            Settings(_env_file=None, solver_check_interval=0)

    @pytest.mark.parametrize("raw,expected", [
        ("http://a,http://b", ["http://a", "http://b"]),
        ('["http://c"]', ["http://c"]),
        ("", ["http://localhost:5173"]),
    ])
    def test_cors_origins(self, raw, expected):
        """Test CORS origins parse from CSV or JSON."""
        assert Settings(_env_file=None, cors_origins=raw).get_cors_origins() == expected
