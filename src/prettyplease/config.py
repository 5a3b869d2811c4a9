import logging
from pathlib import Path
from typing import Optional

import dotenv
import pydantic
from pydantic_settings import BaseSettings, SettingsConfigDict

dotenv.load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Provided by the GitHub Actions runtime
    GITHUB_TOKEN: Optional[str] = pydantic.Field(
        None, validation_alias=pydantic.AliasChoices("INPUT_GITHUB-TOKEN", "GITHUB_TOKEN")
    )
    GITHUB_EVENT_NAME: Optional[str] = None
    GITHUB_EVENT_PATH: Optional[Path] = None
    GITHUB_WORKSPACE: Path = Path(".")
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_RUN_ID: str = "local"
    GITHUB_ACTIONS: bool = False
    # set to 1 when step debug logging is enabled for the run
    RUNNER_DEBUG: bool = False

    # Optional GitHub App authentication, used when no token is given
    GITHUB_APP_ID: Optional[int] = None
    GITHUB_PRIVATE_KEY: Optional[str] = None

    OVERRIDE_LOGGING: str = "INFO"

    TELEGRAM_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None

    PUSH_GATEWAY: Optional[str] = None

    DRY_RUN: bool = False

    TRIGGER_PHRASE: str = "prettier, please!"
    BOT_NAME: str = "github-actions[bot]"
    BOT_EMAIL: str = "41898282+github-actions[bot]@users.noreply.github.com"
    FORMAT_EXTENSIONS: str = ".md"
    MARKDOWN_EXTENSIONS: str = "gfm"
    COMMIT_MESSAGE: str = "Apply formatting fixes"
    NO_CHANGES_COMMENT: str = (
        "Formatting ran on the changed files of this pull request, "
        "but produced no corrections."
    )
    PAGE_SIZE: int = 100
    GIT_REMOTE: str = "origin"

    @property
    def log_level(self) -> int:
        if self.RUNNER_DEBUG:
            return logging.DEBUG
        level = logging.getLevelName(self.OVERRIDE_LOGGING.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level {self.OVERRIDE_LOGGING}")
        return level


SETTINGS = Settings()
