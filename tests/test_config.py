"""
Test configuration settings.
"""
import os

import pytest
from pydantic import ValidationError


def test_default_settings():
    """MONGO_URI comes from the environment; PORT defaults to 4000."""
    from src.infrastructure.config import settings

    assert settings.MONGO_URI == os.environ['MONGO_URI']
    assert settings.PORT == 4000
    assert settings.MONGO_DB_NAME == "persona_quiz"
    assert settings.LOG_LEVEL == "INFO"


def test_port_can_be_set_via_environment(monkeypatch):
    monkeypatch.setenv('PORT', '8080')

    from src.infrastructure.config import Settings
    assert Settings().PORT == 8080


def test_mongo_uri_is_required(monkeypatch):
    from src.infrastructure.config import Settings

    monkeypatch.delenv('MONGO_URI', raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_logger_uses_settings():
    """The package logger takes its level and service name from the settings."""
    import logging
    from src.infrastructure.config import settings
    from pq_utils.logger_utils import get_logger, logger

    assert logger.level == logging.getLevelName(settings.LOG_LEVEL.upper())
    assert logger.handlers[0].formatter.static_fields == {"service": settings.APP_NAME}
    assert get_logger("persona_quiz.test", "debug").level == logging.DEBUG
