from typing import Tuple

import pydantic

from prettyplease.config import Settings
from prettyplease.formatting import DEFAULT_MODES


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="forbid", frozen=True)


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(v.strip() for v in value.split(",") if v.strip())


class Config(Model):
    trigger_phrase: str = "prettier, please!"

    bot_name: str = "github-actions[bot]"
    bot_email: str = "41898282+github-actions[bot]@users.noreply.github.com"

    extensions: Tuple[str, ...] = (".md",)
    markdown_extensions: Tuple[str, ...] = ("gfm",)

    commit_message: str = "Apply formatting fixes"
    no_changes_comment: str = (
        "Formatting ran on the changed files of this pull request, "
        "but produced no corrections."
    )

    page_size: int = pydantic.Field(100, gt=0, le=100)
    remote: str = "origin"
    dry_run: bool = False

    @pydantic.field_validator("trigger_phrase")
    @classmethod
    def validate_trigger_phrase(cls, value: str) -> str:
        if value.strip() != value or value == "":
            raise ValueError("Trigger phrase must be non-empty and not padded")
        return value

    @pydantic.field_validator("extensions")
    @classmethod
    def validate_extensions(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(value) == 0:
            raise ValueError("Provide at least one formattable extension")
        value = tuple(ext.lower() for ext in value)
        for ext in value:
            if not ext.startswith("."):
                raise ValueError(f"Extension {ext!r} must start with a dot")
            if ext not in DEFAULT_MODES:
                raise ValueError(f"No formatting mode for extension {ext!r}")
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> "Config":
        return cls(
            trigger_phrase=settings.TRIGGER_PHRASE,
            bot_name=settings.BOT_NAME,
            bot_email=settings.BOT_EMAIL,
            extensions=_split_list(settings.FORMAT_EXTENSIONS),
            markdown_extensions=_split_list(settings.MARKDOWN_EXTENSIONS),
            commit_message=settings.COMMIT_MESSAGE,
            no_changes_comment=settings.NO_CHANGES_COMMENT,
            page_size=settings.PAGE_SIZE,
            remote=settings.GIT_REMOTE,
            dry_run=settings.DRY_RUN,
        )
