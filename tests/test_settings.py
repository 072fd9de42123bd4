import logging

from chargestop_engine.logging_setup import setup_logging
from chargestop_engine.settings import Settings


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("CHARGESTOP_LOG_LEVEL", raising=False)
    s = Settings(_env_file=None)

    assert s.log_level == "INFO"
    assert s.cors_origins == ["*"]
    assert s.advice_max_tokens == 600


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("CHARGESTOP_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CHARGESTOP_ADVICE_ENABLED", "false")
    s = Settings(_env_file=None)

    assert s.log_level == "DEBUG"
    assert s.advice_enabled is False


def test_setup_logging_is_idempotent(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    log_file = tmp_path / "planner.log"

    try:
        setup_logging("WARNING", log_file)
        count = len(root.handlers)
        setup_logging("WARNING", log_file)

        assert len(root.handlers) == count
        assert root.level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)
