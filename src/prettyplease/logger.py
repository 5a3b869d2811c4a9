import logging
from typing import List

import notifiers.logging

from prettyplease.config import Settings


def escape_workflow_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandFormatter(logging.Formatter):
    """Renders records as GitHub Actions workflow commands.

    DEBUG records only show up in the job log when step debugging is
    enabled, WARNING and ERROR are turned into annotations. INFO is printed
    as plain output.
    """

    commands = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def __init__(self):
        super().__init__("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = self.commands.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_workflow_data(message)}"


def get_log_handlers(logger: logging.Logger, settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if settings.GITHUB_ACTIONS:
        handler = logging.StreamHandler()
        handler.setFormatter(WorkflowCommandFormatter())
        logger.addHandler(handler)
        logger.propagate = False
        handlers.append(handler)

    if settings.TELEGRAM_TOKEN is not None:
        handler = notifiers.logging.NotificationHandler(
            "telegram",
            defaults={
                "token": settings.TELEGRAM_TOKEN,
                "chat_id": settings.TELEGRAM_CHAT_ID,
            },
        )
        handler.setLevel(logging.WARNING)
        logger.addHandler(handler)
        handlers.append(handler)

    return handlers
