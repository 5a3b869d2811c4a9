from contextlib import contextmanager
import logging
from typing import AsyncIterator, Iterator

import aiohttp
from gidgethub import GitHubException
from gidgethub.abc import GitHubAPI

from prettyplease.errors import RemoteFetchError
from prettyplease.github.model import Issue, IssueComment, PrFile, PullRequest
from prettyplease.metric import record_api_call

logger = logging.getLogger("prettyplease")


@contextmanager
def remote_call(description: str) -> Iterator[None]:
    try:
        yield
    except (GitHubException, aiohttp.ClientError) as e:
        raise RemoteFetchError(f"{description} failed: {e}") from e


class API:
    gh: GitHubAPI
    page_size: int

    call_count: int

    def __init__(self, gh: GitHubAPI, page_size: int = 100):
        self.gh = gh
        self.page_size = page_size
        self.call_count = 0

    def _count(self, url: str) -> None:
        self.call_count += 1
        record_api_call(url)

    async def get_issue(self, owner: str, repo: str, number: int) -> Issue:
        url = f"/repos/{owner}/{repo}/issues/{number}"
        self._count(url)
        logger.debug("Get issue %s", url)
        with remote_call(f"Fetching issue {owner}/{repo}#{number}"):
            item = await self.gh.getitem(url)
        return Issue.model_validate(item)

    async def get_pull(self, url: str) -> PullRequest:
        self._count(url)
        logger.debug("Get pull %s", url)
        with remote_call(f"Fetching pull request {url}"):
            item = await self.gh.getitem(url)
        return PullRequest.model_validate(item)

    async def get_pull_request_files(
        self, owner: str, repo: str, number: int
    ) -> AsyncIterator[PrFile]:
        url = f"/repos/{owner}/{repo}/pulls/{number}/files?per_page={self.page_size}"
        self._count(url)
        logger.debug("Getting files for PR #%d %s", number, url)
        with remote_call(f"Listing files of {owner}/{repo}#{number}"):
            i = 0
            async for item in self.gh.getiter(url):
                # every full page is followed by a request for the next one
                if i > 0 and i % self.page_size == 0:
                    self._count(url)
                i += 1
                yield PrFile.model_validate(item)

    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> IssueComment:
        url = f"/repos/{owner}/{repo}/issues/{number}/comments"
        self._count(url)
        logger.debug("Creating comment on %s", url)
        with remote_call(f"Commenting on {owner}/{repo}#{number}"):
            item = await self.gh.post(url, data={"body": body})
        return IssueComment.model_validate(item)
