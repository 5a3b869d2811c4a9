from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from prettyplease.errors import (
    GitCommandError,
    PrettyPleaseError,
    PublishError,
    WorkspaceError,
)
from prettyplease.github.api import API
from prettyplease.github.model import PrFile
from prettyplease.model import Config
from prettyplease.pipeline.types import (
    Closed,
    Command,
    Eligible,
    IssueHandle,
    IssueResolution,
    NoOpReported,
    NotAPullRequest,
    PullRequestContext,
    Pushed,
    RunOutcome,
    SkipReason,
    TriggerEvent,
)
from prettyplease.workspace import Workspace

logger = logging.getLogger("prettyplease")

SUPPORTED_EVENT = "issue_comment"
SUPPORTED_ACTIONS = frozenset({"created", "edited"})

FORMATTABLE_STATUSES = frozenset({"added", "modified"})


def parse_command(body: str, trigger_phrase: str) -> Command:
    if body.strip().startswith(trigger_phrase):
        return Command.recognized
    return Command.none


def check_event(trigger: TriggerEvent) -> Optional[SkipReason]:
    if trigger.event_name != SUPPORTED_EVENT:
        logger.error("Event type was of unsupported type: %s", trigger.event_name)
        return SkipReason.unsupported_event
    if trigger.action not in SUPPORTED_ACTIONS:
        logger.debug("Ignoring %s action %s", trigger.event_name, trigger.action)
        return SkipReason.unsupported_action
    return None


def is_edit_echo(trigger: TriggerEvent, config: Config) -> bool:
    """
    An edited comment only fires when the edit introduced the trigger phrase.
    If the body already carried it, the original comment was processed.
    """
    if not trigger.edited:
        return False
    return (
        parse_command(trigger.previous_body, config.trigger_phrase)
        == Command.recognized
    )


async def resolve_issue(api: API, trigger: TriggerEvent) -> IssueResolution:
    # the comment payload does not tell issues and pull requests apart, and the
    # state may have changed since the comment was made
    issue = await api.get_issue(trigger.owner, trigger.repo, trigger.number)
    handle = IssueHandle(
        number=issue.number,
        is_pull_request=issue.is_pull_request,
        state=issue.state,
        pull_request_url=issue.pull_request.url if issue.pull_request else None,
    )
    if not handle.is_pull_request:
        return NotAPullRequest(handle)
    if handle.state != "open":
        return Closed(handle)
    return Eligible(handle)


async def fetch_pull_request_context(
    api: API, issue: IssueHandle
) -> PullRequestContext:
    if issue.pull_request_url is None:
        raise PrettyPleaseError(f"Issue #{issue.number} is not a pull request")
    pr = await api.get_pull(issue.pull_request_url)
    logger.debug("Loaded %s: %s <- %s", pr, pr.base.ref, pr.head.ref)
    return PullRequestContext(
        number=pr.number,
        base_ref=pr.base.ref,
        head_ref=pr.head.ref,
        head_sha=pr.head.sha,
        head_repo_full_name=pr.head.repo.full_name if pr.head.repo else None,
    )


def check_head_repository(trigger: TriggerEvent, context: PullRequestContext) -> None:
    """
    The head branch is fetched from and pushed to the workspace remote, which
    only holds it when the pull request was opened from the same repository.
    """
    expected = f"{trigger.owner}/{trigger.repo}"
    head = context.head_repo_full_name
    if head is None:
        raise WorkspaceError(
            f"Head repository of #{context.number} no longer exists, "
            f"unable to check out {context.head_ref}"
        )
    if head.lower() != expected.lower():
        raise WorkspaceError(
            f"#{context.number} comes from the fork {head}, "
            f"unable to push {context.head_ref} from {expected}"
        )


async def list_changed_files(api: API, trigger: TriggerEvent) -> List[PrFile]:
    return [
        f
        async for f in api.get_pull_request_files(
            trigger.owner, trigger.repo, trigger.number
        )
    ]


def select_formattable_files(files: Sequence[PrFile], config: Config) -> List[str]:
    selected = []
    for f in files:
        if f.status not in FORMATTABLE_STATUSES:
            logger.debug("- skipping %s (%s)", f.filename, f.status)
            continue
        if not f.filename.lower().endswith(config.extensions):
            logger.debug("- skipping %s (extension)", f.filename)
            continue
        selected.append(f.filename)
    return selected


async def publish_outcome(
    *,
    api: API,
    workspace: Workspace,
    config: Config,
    trigger: TriggerEvent,
    context: PullRequestContext,
    files: Sequence[str],
    has_changes: bool,
) -> RunOutcome:
    if has_changes:
        if config.dry_run:
            logger.warning(
                "Dry run, not pushing formatting fixes to %s", context.head_ref
            )
            return Pushed(files=tuple(files), commit_sha=None)
        try:
            await workspace.configure_identity(config.bot_name, config.bot_email)
            sha = await workspace.commit(config.commit_message, files)
            await workspace.push(context.head_ref)
        except GitCommandError as e:
            raise PublishError(
                f"Unable to push formatting fixes to {context.head_ref}: {e}"
            ) from e
        return Pushed(files=tuple(files), commit_sha=sha)

    if config.dry_run:
        logger.warning("Dry run, not commenting on #%d", trigger.number)
        return NoOpReported(comment_url=None)
    comment = await api.create_comment(
        trigger.owner, trigger.repo, trigger.number, config.no_changes_comment
    )
    return NoOpReported(comment_url=comment.html_url)
