import pytest
from io import StringIO
from pydantic import ValidationError
from rich.console import Console
from mailquery.utils.config import SearchSettings
from mailquery.utils.logging import Logger

def test_settings_defaults():
    settings = SearchSettings()

    assert settings.default_folder == "INBOX"
    assert settings.default_limit == 20
    assert settings.recent_days == 7

def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("MAILQUERY_DEFAULT_FOLDER", "[Gmail]/All Mail")
    monkeypatch.setenv("MAILQUERY_FEW_WEEKS_DAYS", "14")

    settings = SearchSettings()

    assert settings.default_folder == "[Gmail]/All Mail"
    assert settings.few_weeks_days == 14

def test_settings_reject_out_of_range_limit(monkeypatch):
    monkeypatch.setenv("MAILQUERY_DEFAULT_LIMIT", "500")

    with pytest.raises(ValidationError):
        SearchSettings()

def test_debug_only_when_verbose():
    buffer = StringIO()
    logger = Logger(console=Console(file=buffer, width=120))

    logger.debug("hidden")
    logger.warning("shown")
    assert "hidden" not in buffer.getvalue()
    assert "shown" in buffer.getvalue()

    logger.verbose = True
    logger.debug("now visible")
    assert "DEBUG [mailquery]: now visible" in buffer.getvalue()
