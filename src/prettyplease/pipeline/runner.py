from __future__ import annotations

import logging
import time

from prettyplease.errors import PrettyPleaseError
from prettyplease.formatting import Formatter, apply_formatting
from prettyplease.github.api import API
from prettyplease.metric import error_counter, run_outcome_counter
from prettyplease.model import Config
from prettyplease.pipeline.stages import (
    check_event,
    check_head_repository,
    fetch_pull_request_context,
    is_edit_echo,
    list_changed_files,
    parse_command,
    publish_outcome,
    resolve_issue,
    select_formattable_files,
)
from prettyplease.pipeline.types import (
    Closed,
    Command,
    NotAPullRequest,
    RunOutcome,
    SkipReason,
    Skipped,
    TriggerEvent,
)
from prettyplease.workspace import Workspace

logger = logging.getLogger("prettyplease")


class Pipeline:
    def __init__(
        self,
        *,
        config: Config,
        api: API,
        workspace: Workspace,
        formatter: Formatter,
    ):
        self.config = config
        self.api = api
        self.workspace = workspace
        self.formatter = formatter

    async def run(self, trigger: TriggerEvent) -> RunOutcome:
        started = time.monotonic()
        logger.info("Begin handling %s", trigger)
        try:
            outcome = await self._run(trigger)
        except PrettyPleaseError as e:
            error_counter.labels(context=type(e).__name__).inc()
            raise

        reason = outcome.reason.value if isinstance(outcome, Skipped) else ""
        run_outcome_counter.labels(
            outcome=type(outcome).__name__, reason=reason
        ).inc()
        logger.info(
            "Finished handling %s: %s, API calls: %d, duration_ms=%.1f",
            trigger,
            outcome,
            self.api.call_count,
            (time.monotonic() - started) * 1000.0,
        )
        return outcome

    async def _run(self, trigger: TriggerEvent) -> RunOutcome:
        if (reason := check_event(trigger)) is not None:
            return Skipped(reason)

        if parse_command(trigger.body, self.config.trigger_phrase) != Command.recognized:
            logger.debug("Comment did not contain a command, exiting")
            return Skipped(SkipReason.no_command)

        if is_edit_echo(trigger, self.config):
            logger.debug("Comment already contained the command before the edit")
            return Skipped(SkipReason.edit_echo)

        resolution = await resolve_issue(self.api, trigger)
        if isinstance(resolution, NotAPullRequest):
            logger.debug("Ran, but this was an Issue, and not a Pull Request")
            return Skipped(SkipReason.not_a_pull_request)
        if isinstance(resolution, Closed):
            logger.debug("Pull request #%d is closed", resolution.issue.number)
            return Skipped(SkipReason.closed)

        context = await fetch_pull_request_context(self.api, resolution.issue)

        changed_files = await list_changed_files(self.api, trigger)
        files = select_formattable_files(changed_files, self.config)
        logger.info(
            "%d of %d changed files are formattable", len(files), len(changed_files)
        )
        if len(files) == 0:
            return Skipped(SkipReason.no_formattable_files)

        check_head_repository(trigger, context)
        await self.workspace.sync(context.head_ref, context.head_sha)

        rewritten = apply_formatting(self.workspace.root, files, self.formatter)
        logger.info("Formatter rewrote %d of %d files", len(rewritten), len(files))

        await self.workspace.stage(files)
        has_changes = await self.workspace.has_staged_changes(files)
        logger.debug("Staged changes: %s", has_changes)

        return await publish_outcome(
            api=self.api,
            workspace=self.workspace,
            config=self.config,
            trigger=trigger,
            context=context,
            files=rewritten or files,
            has_changes=has_changes,
        )

