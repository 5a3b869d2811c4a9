import asyncio
from contextlib import asynccontextmanager
import json
import logging
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiohttp
import cachetools
import typer
from gidgethub import aiohttp as gh_aiohttp
from gidgethub.apps import get_installation_access_token
from gidgethub.sansio import Event

from prettyplease.config import SETTINGS, Settings
from prettyplease.errors import PrettyPleaseError
from prettyplease.formatting import Formatter, apply_formatting, format_files
from prettyplease.github.api import API, remote_call
from prettyplease.logger import get_log_handlers
from prettyplease.metric import push_metrics, record_api_call
from prettyplease.model import Config
from prettyplease.pipeline import Pipeline, RunOutcome, TriggerEvent
from prettyplease.workspace import Workspace

logging.basicConfig(
    format="%(asctime)s %(name)s %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger("prettyplease")

app = typer.Typer()
httpcache = cachetools.LRUCache(maxsize=500)


@app.callback()
def init():
    logging.getLogger().setLevel(SETTINGS.log_level)
    logger.setLevel(SETTINGS.log_level)
    get_log_handlers(logger, SETTINGS)


async def get_access_token(
    gh: gh_aiohttp.GitHubAPI, settings: Settings, installation_id: Optional[int]
) -> str:
    if settings.GITHUB_APP_ID is None or settings.GITHUB_PRIVATE_KEY is None:
        raise PrettyPleaseError(
            "No GitHub token given, and no GitHub App credentials configured"
        )
    if installation_id is None:
        raise PrettyPleaseError("Event payload carries no app installation")

    logger.debug("Getting installation access token for %d", installation_id)
    record_api_call("installation_token")
    with remote_call(f"Getting access token for installation {installation_id}"):
        access_token_response = await get_installation_access_token(
            gh,
            installation_id=installation_id,
            app_id=settings.GITHUB_APP_ID,
            private_key=settings.GITHUB_PRIVATE_KEY,
        )
    return access_token_response["token"]


@asynccontextmanager
async def github_client(
    settings: Settings, installation_id: Optional[int]
) -> AsyncIterator[gh_aiohttp.GitHubAPI]:
    async with aiohttp.ClientSession() as session:
        token = settings.GITHUB_TOKEN
        if token is None:
            gh = gh_aiohttp.GitHubAPI(
                session, "prettyplease", base_url=settings.GITHUB_API_URL
            )
            token = await get_access_token(gh, settings, installation_id)

        yield gh_aiohttp.GitHubAPI(
            session,
            "prettyplease",
            oauth_token=token,
            cache=httpcache,
            base_url=settings.GITHUB_API_URL,
        )


def load_event(event_name: str, event_path: Path, delivery_id: str) -> Event:
    with event_path.open() as fh:
        data = json.load(fh)
    return Event(data, event=event_name, delivery_id=delivery_id)


async def handle(
    trigger: TriggerEvent, config: Config, settings: Settings, root: Path
) -> RunOutcome:
    async with github_client(settings, trigger.installation_id) as gh:
        pipeline = Pipeline(
            config=config,
            api=API(gh, page_size=config.page_size),
            workspace=Workspace(root, remote=config.remote),
            formatter=Formatter(config.markdown_extensions),
        )
        return await pipeline.run(trigger)


@app.command()
def run(
    event_name: Optional[str] = typer.Option(
        None, help="Event name, defaults to GITHUB_EVENT_NAME"
    ),
    event_path: Optional[Path] = typer.Option(
        None, help="Path to the event payload, defaults to GITHUB_EVENT_PATH"
    ),
    workspace: Optional[Path] = typer.Option(
        None, help="Repository working copy, defaults to GITHUB_WORKSPACE"
    ),
):
    """Handle one triggering event."""
    event_name = event_name or SETTINGS.GITHUB_EVENT_NAME
    event_path = event_path or SETTINGS.GITHUB_EVENT_PATH
    if event_name is None or event_path is None:
        logger.error("GITHUB_EVENT_NAME and GITHUB_EVENT_PATH must be set")
        raise typer.Exit(code=1)

    try:
        event = load_event(event_name, event_path, SETTINGS.GITHUB_RUN_ID)
        trigger = TriggerEvent.from_event(event)
        config = Config.from_settings(SETTINGS)
        outcome = asyncio.run(
            handle(trigger, config, SETTINGS, workspace or SETTINGS.GITHUB_WORKSPACE)
        )
    except Exception as e:
        logger.error("%s", e)
        logger.debug("Run failed", exc_info=True)
        raise typer.Exit(code=1)
    finally:
        if SETTINGS.PUSH_GATEWAY is not None:
            try:
                push_metrics(SETTINGS.PUSH_GATEWAY)
            except Exception:
                logger.warning("Unable to push metrics", exc_info=True)

    typer.echo(f"Outcome: {outcome}")


@app.command("format")
def format_command(
    paths: List[Path] = typer.Argument(..., help="Files to format"),
    check: bool = typer.Option(
        False, "--check", help="Only report files that would be changed"
    ),
):
    """Run the configured formatter over local files."""
    config = Config.from_settings(SETTINGS)
    formatter = Formatter(config.markdown_extensions)
    root = Path.cwd()

    try:
        filenames = [str(p.resolve().relative_to(root.resolve())) for p in paths]
        if check:
            changed = list(format_files(root, filenames, formatter))
        else:
            changed = apply_formatting(root, filenames, formatter)
    except (PrettyPleaseError, ValueError) as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)

    for filename in changed:
        typer.echo(f"{'would reformat' if check else 'reformatted'} {filename}")

    if check and len(changed) > 0:
        raise typer.Exit(code=1)
