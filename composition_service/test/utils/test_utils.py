# composition_service/test/utils/test_utils.py

# pytest composition_service/test/utils/test_utils.py -v

import logging
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from composition_service.adapters.configuration.config import DEFAULT_JWT_SECRET, Settings
from composition_service.shared.utils.datetime_utils import DateTimeUtil
from composition_service.shared.utils.logging_config import SensitiveDataFilter


def test_utcnow_naive_has_no_timezone():
    now = DateTimeUtil.utcnow_naive()
    assert now.tzinfo is None
    assert abs(DateTimeUtil.utcnow().replace(tzinfo=None) - now) < timedelta(seconds=5)


def test_to_naive_utc():
    aware = datetime(2024, 5, 1, 9, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert DateTimeUtil.to_naive_utc(aware) == datetime(2024, 5, 1, 12, 0)
    assert DateTimeUtil.to_naive_utc(datetime(2024, 5, 1, 12, 0)) == datetime(2024, 5, 1, 12, 0)
    assert DateTimeUtil.to_naive_utc(None) is None


def test_format_and_rfc3339():
    dt = datetime(2024, 5, 1, 12, 0, 7)
    assert DateTimeUtil.format(dt) == "2024-05-01 12:00:07"
    assert DateTimeUtil.format(None) is None
    assert DateTimeUtil.to_rfc3339(dt) == "2024-05-01T12:00:07Z"


def test_settings_assembles_database_url_from_parts():
    settings = Settings(DATABASE_URL=None, POSTGRES_USER="u", POSTGRES_PASSWORD="p",
                        POSTGRES_HOST="db", POSTGRES_PORT=5433, POSTGRES_DB="comp")
    assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db:5433/comp"


def test_settings_parses_strings():
    settings = Settings(DEBUG="yes", REDIS_ENABLED="0", LOG_LEVEL="debug",
                        CORS_ORIGINS="http://a.test, http://b.test")
    assert settings.DEBUG is True
    assert settings.REDIS_ENABLED is False
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_settings_rejects_invalid_values():
    with pytest.raises(ValidationError):
        Settings(LOG_LEVEL="LOUD")
    with pytest.raises(ValidationError):
        Settings(JWT_ACCESS_EXPIRE_HOURS=0)


def test_default_secret_is_flagged(settings):
    assert Settings(JWT_SECRET=DEFAULT_JWT_SECRET).uses_default_jwt_secret is True
    assert settings.uses_default_jwt_secret is False


def test_sensitive_data_filter_masks_tokens_and_passwords():
    record = logging.LogRecord(
        "test", logging.INFO, __file__, 1,
        "login with password=hunter22 and Bearer abc.def.ghi", None, None,
    )

    assert SensitiveDataFilter().filter(record) is True
    message = record.getMessage()
    assert "hunter22" not in message
    assert "abc.def.ghi" not in message
