from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Tuple, Union

from gidgethub.sansio import Event


class Command(Enum):
    recognized = 1
    none = 2


class SkipReason(Enum):
    unsupported_event = "unsupported_event"
    unsupported_action = "unsupported_action"
    no_command = "no_command"
    edit_echo = "edit_echo"
    not_a_pull_request = "not_a_pull_request"
    closed = "closed"
    no_formattable_files = "no_formattable_files"


@dataclass(frozen=True)
class TriggerEvent:
    event_name: str
    action: str | None
    body: str
    edited: bool
    previous_body: str
    number: int | None
    owner: str | None
    repo: str | None
    installation_id: int | None = None
    comment_id: int | None = None

    @classmethod
    def from_event(cls, event: Event) -> TriggerEvent:
        data: Mapping[str, Any] = event.data
        action = data.get("action")
        comment = data.get("comment") or {}
        body = comment.get("body") or ""

        # without a body entry in `changes` the edit did not touch the body
        changes = data.get("changes") or {}
        previous_body = (changes.get("body") or {}).get("from", body) or ""

        issue = data.get("issue") or {}
        repository = data.get("repository") or {}
        owner = (repository.get("owner") or {}).get("login")
        installation = data.get("installation") or {}

        return cls(
            event_name=event.event,
            action=action,
            body=body,
            edited=action == "edited",
            previous_body=previous_body,
            number=issue.get("number"),
            owner=owner,
            repo=repository.get("name"),
            installation_id=installation.get("id"),
            comment_id=comment.get("id"),
        )

    def __str__(self) -> str:
        return f"{self.event_name}.{self.action} on {self.owner}/{self.repo}#{self.number}"


@dataclass(frozen=True)
class IssueHandle:
    number: int
    is_pull_request: bool
    state: str
    pull_request_url: str | None = None


@dataclass(frozen=True)
class NotAPullRequest:
    issue: IssueHandle


@dataclass(frozen=True)
class Closed:
    issue: IssueHandle


@dataclass(frozen=True)
class Eligible:
    issue: IssueHandle


IssueResolution = Union[NotAPullRequest, Closed, Eligible]


@dataclass(frozen=True)
class PullRequestContext:
    number: int
    base_ref: str
    head_ref: str
    head_sha: str
    head_repo_full_name: str | None = None


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason


@dataclass(frozen=True)
class Pushed:
    files: Tuple[str, ...]
    commit_sha: str | None


@dataclass(frozen=True)
class NoOpReported:
    comment_url: str | None


RunOutcome = Union[Skipped, Pushed, NoOpReported]
