# backend/book_exchange/tests/unit/test_config.py

from datetime import time

from book_exchange.config import TestingSettings, validate_settings
from book_exchange.core.exceptions import CommitError, MatchingRunInProgressError


class TestSettings:
    def test_defaults(self):
        settings = TestingSettings(CORS_ORIGINS=["*"], API_PREFIX="")

        assert settings.EXCHANGE_DAY_START == time(9, 30)
        assert settings.EXCHANGE_DAY_END == time(18, 30)
        assert settings.database_config["schema"] == settings.DATABASE_SCHEMA
        assert str(TestingSettings(EXCHANGE_TIMEZONE="UTC").exchange_tz) == "UTC"

    def test_comma_separated_origins_and_prefix(self):
        settings = TestingSettings(
            CORS_ORIGINS="https://a.example, https://b.example", API_PREFIX="/functions/v1/"
        )

        assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
        assert settings.API_PREFIX == "/functions/v1"

    def test_validate_settings_flags_bad_values(self):
        settings = TestingSettings(
            EXCHANGE_DAY_START="19:00",
            EXCHANGE_DAY_END="09:00",
            SLOT_MAX_EXCHANGES=0,
            EXCHANGE_TIMEZONE="Mars/Olympus_Mons",
            CORS_ORIGINS=["*"],
            ENVIRONMENT="production",
        )

        issues = validate_settings(settings)

        assert "EXCHANGE_DAY_START must be earlier than EXCHANGE_DAY_END" in issues
        assert "SLOT_MAX_EXCHANGES must be at least 1" in issues
        assert any("EXCHANGE_TIMEZONE" in issue for issue in issues)
        assert "CORS_ORIGINS should not be '*' in production" in issues


class TestExceptions:
    def test_to_dict(self):
        error = CommitError("slot full", partial=True)

        payload = error.to_dict()["error"]

        assert payload["code"] == "commit_error"
        assert payload["status_code"] == 500
        assert payload["context"] == {"phase": "commit", "partial": True}

    def test_run_in_progress_is_conflict(self):
        error = MatchingRunInProgressError()

        assert error.status_code == 409
        assert error.context["phase"] == "lock"
