import logging

import pydantic
import pytest

from prettyplease.config import SETTINGS, Settings
from prettyplease.logger import WorkflowCommandFormatter, get_log_handlers
from prettyplease.model import Config


def make_record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord("prettyplease", level, __file__, 1, msg, (), None)


def test_config_from_settings():
    settings = SETTINGS.model_copy(
        update={
            "TRIGGER_PHRASE": "/format",
            "BOT_NAME": "format-bot",
            "BOT_EMAIL": "bot@example.com",
            "FORMAT_EXTENSIONS": ".md, .markdown",
            "MARKDOWN_EXTENSIONS": "",
            "PAGE_SIZE": 50,
            "DRY_RUN": True,
        }
    )

    config = Config.from_settings(settings)

    assert config.trigger_phrase == "/format"
    assert config.bot_name == "format-bot"
    assert config.bot_email == "bot@example.com"
    assert config.extensions == (".md", ".markdown")
    assert config.markdown_extensions == ()
    assert config.page_size == 50
    assert config.dry_run


def test_config_defaults():
    config = Config()
    assert config.trigger_phrase == "prettier, please!"
    assert config.extensions == (".md",)
    assert config.page_size == 100


def test_config_extensions_are_lowercased():
    assert Config(extensions=(".MD", ".Markdown")).extensions == (".md", ".markdown")


def test_config_from_settings_rejects_extensions_without_formatter():
    settings = SETTINGS.model_copy(update={"FORMAT_EXTENSIONS": ".txt"})
    with pytest.raises(pydantic.ValidationError):
        Config.from_settings(settings)


def test_config_is_immutable():
    config = Config()
    with pytest.raises(pydantic.ValidationError):
        config.trigger_phrase = "something else"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"extensions": ()},
        {"extensions": ("md",)},
        {"extensions": (".txt",)},
        {"trigger_phrase": ""},
        {"trigger_phrase": " padded "},
        {"page_size": 0},
        {"page_size": 500},
        {"unknown": True},
    ],
)
def test_config_validation(kwargs):
    with pytest.raises(pydantic.ValidationError):
        Config(**kwargs)


def test_settings_read_token_from_action_input(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("INPUT_GITHUB-TOKEN", "secret")
    assert Settings().GITHUB_TOKEN == "secret"


def test_settings_log_level():
    settings = SETTINGS.model_copy(update={"RUNNER_DEBUG": False})
    assert settings.model_copy(update={"OVERRIDE_LOGGING": "info"}).log_level == (
        logging.INFO
    )
    assert settings.model_copy(update={"OVERRIDE_LOGGING": "debug"}).log_level == (
        logging.DEBUG
    )
    with pytest.raises(ValueError):
        settings.model_copy(update={"OVERRIDE_LOGGING": "chatty"}).log_level


def test_workflow_command_formatter():
    formatter = WorkflowCommandFormatter()

    assert formatter.format(make_record(logging.INFO, "hello")) == "hello"
    assert formatter.format(make_record(logging.DEBUG, "hi")) == "::debug::hi"
    assert formatter.format(make_record(logging.WARNING, "hm")) == "::warning::hm"
    assert (
        formatter.format(make_record(logging.ERROR, "100% broken\nreally"))
        == "::error::100%25 broken%0Areally"
    )


def test_log_handlers_on_actions():
    logger = logging.getLogger("prettyplease.test")
    settings = SETTINGS.model_copy(
        update={"GITHUB_ACTIONS": True, "TELEGRAM_TOKEN": None}
    )
    try:
        handlers = get_log_handlers(logger, settings)
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, WorkflowCommandFormatter)
        assert handlers[0] in logger.handlers
    finally:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.propagate = True


def test_no_log_handlers_outside_actions():
    logger = logging.getLogger("prettyplease.test.local")
    settings = SETTINGS.model_copy(
        update={"GITHUB_ACTIONS": False, "TELEGRAM_TOKEN": None}
    )
    assert get_log_handlers(logger, settings) == []


def test_runner_debug_enables_debug_logging(monkeypatch):
    monkeypatch.setenv("RUNNER_DEBUG", "1")
    monkeypatch.delenv("OVERRIDE_LOGGING", raising=False)
    settings = Settings()
    assert settings.RUNNER_DEBUG
    assert settings.log_level == logging.DEBUG
