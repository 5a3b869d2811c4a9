from datetime import datetime
from typing import Annotated, Literal, Optional

import pydantic
from pydantic import AfterValidator


class Model(pydantic.BaseModel):
    pass


def _validate_commit_sha(sha: str) -> str:
    if len(sha) != 40:
        raise ValueError("Commit hash must have length 40")
    return sha


CommitSha = Annotated[str, AfterValidator(_validate_commit_sha)]


class User(Model):
    login: str
    id: Optional[int] = None


class Repository(Model):
    id: int
    name: str
    full_name: Optional[str] = None
    url: str
    html_url: Optional[str] = None
    private: Optional[bool] = None


class PrConnection(Model):
    ref: str
    sha: CommitSha
    label: Optional[str] = None
    # null when the head fork has been deleted
    repo: Optional[Repository] = None


class PullRequest(Model):
    url: str
    id: int
    number: int
    state: Literal["open", "closed"]
    merged_at: Optional[datetime] = None
    base: PrConnection
    head: PrConnection
    html_url: Optional[str] = None

    def __str__(self) -> str:
        name = None
        if self.base.repo is not None:
            name = self.base.repo.full_name or self.base.repo.name
        return f"PR({name}#{self.number}, {self.id})"


class IssuePullRequestLink(Model):
    url: str
    html_url: Optional[str] = None


class Issue(Model):
    id: int
    number: int
    state: Literal["open", "closed"]
    title: str = ""
    html_url: Optional[str] = None
    pull_request: Optional[IssuePullRequestLink] = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class IssueComment(Model):
    id: int
    body: str = ""
    html_url: Optional[str] = None
    user: Optional[User] = None


class PrFile(Model):
    sha: Optional[str] = None
    filename: str
    status: Literal[
        "added", "removed", "modified", "renamed", "copied", "changed", "unchanged"
    ]
    previous_filename: Optional[str] = None
    changes: int = 0
