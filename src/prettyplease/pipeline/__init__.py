from prettyplease.pipeline.runner import Pipeline
from prettyplease.pipeline.types import (
    Command,
    NoOpReported,
    PullRequestContext,
    Pushed,
    RunOutcome,
    SkipReason,
    Skipped,
    TriggerEvent,
)

__all__ = [
    "Command",
    "NoOpReported",
    "Pipeline",
    "PullRequestContext",
    "Pushed",
    "RunOutcome",
    "SkipReason",
    "Skipped",
    "TriggerEvent",
]
