"""
Command line interface for the release notifier.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import httpx
import typer
from typing_extensions import Annotated

from release_notifier.client import GitLabClient, verify_access
from release_notifier.config import resolve_config
from release_notifier.issue_parser import IssueParser
from release_notifier.log_setup import setup_logging
from release_notifier.models import ReleaseContext
from release_notifier.notifier import NotificationError, collect_notify_targets, notify_success
from release_notifier.repo_id import get_repo_id

app = typer.Typer(help="Comment on the issues and merge requests resolved by a release")

ContextFile = Annotated[Path, typer.Option("--context", help="Release context JSON file", exists=True, dir_okay=False)]
Token = Annotated[Optional[str], typer.Option(envvar="GL_TOKEN", help="GitLab API token", show_default=False)]
GitlabUrl = Annotated[Optional[str], typer.Option(envvar="GL_URL", help="GitLab instance URL")]
ApiPrefix = Annotated[Optional[str], typer.Option(envvar="GL_PREFIX", help="API path prefix (default: /api/v4)")]
LogLevel = Annotated[str, typer.Option(help="Logging level")]


def load_release_context(path: Path) -> ReleaseContext:
    """Read a release context JSON document."""
    with open(path) as f:
        return ReleaseContext.from_dict(json.load(f))


def _configure_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        typer.echo(f"Error: unknown log level {log_level}", err=True)
        raise typer.Exit(1)
    setup_logging(level=level)


def _load_context_or_exit(path: Path) -> ReleaseContext:
    try:
        return load_release_context(path)
    except (ValueError, KeyError) as e:
        typer.echo(f"Error: invalid release context {path}: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def notify(
    context_file: ContextFile,
    success_comment: Annotated[Optional[str], typer.Option(help="Comment template (default: built-in comment)")] = None,
    skip_comments: Annotated[bool, typer.Option("--skip-comments", help="Do not comment on anything")] = False,
    released_label: Annotated[Optional[List[str]], typer.Option(help="Label template to add; repeatable")] = None,
    token: Token = None,
    gitlab_url: GitlabUrl = None,
    api_prefix: ApiPrefix = None,
    log_level: LogLevel = "INFO",
):
    """Comment on every issue and merge request resolved by the release."""
    _configure_logging(log_level)
    context = _load_context_or_exit(context_file)
    config = resolve_config(
        token=token,
        gitlab_url=gitlab_url,
        api_prefix=api_prefix,
        success_comment=success_comment,
        comments_enabled=not skip_comments,
        released_labels=released_label,
    )

    try:
        notified = asyncio.run(notify_success(config, context))
    except NotificationError as e:
        typer.echo(f"❌ {e.message}", err=True)
        for error in e.exceptions:
            typer.echo(f"   - {error}", err=True)
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        typer.echo(f"❌ Failed to find the issues and merge requests to notify: {e}", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if config.comments_enabled:
        typer.echo(f"✅ Notified {len(notified)} issues and merge requests")


@app.command()
def targets(
    context_file: ContextFile,
    token: Token = None,
    gitlab_url: GitlabUrl = None,
    api_prefix: ApiPrefix = None,
    log_level: LogLevel = "WARNING",
):
    """Print the issues and merge requests that would be notified, without commenting."""
    _configure_logging(log_level)
    context = _load_context_or_exit(context_file)
    config = resolve_config(token=token, gitlab_url=gitlab_url, api_prefix=api_prefix)

    async def collect():
        repo_id = get_repo_id(context.repository_url, config.gitlab_url)
        async with GitLabClient(config.api_url, repo_id, config.token) as client:
            return await collect_notify_targets(client, IssueParser(hosts=[config.gitlab_url]), repo_id, context)

    try:
        found = asyncio.run(collect())
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        typer.echo(f"❌ Failed to find the issues and merge requests to notify: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(json.dumps([{"iid": t.iid, "kind": str(t.kind), "title": t.title} for t in found], indent=2))


@app.command()
def verify(
    repository_url: Annotated[str, typer.Option(help="Repository URL")],
    token: Token = None,
    gitlab_url: GitlabUrl = None,
    api_prefix: ApiPrefix = None,
    log_level: LogLevel = "INFO",
):
    """Check that the token can access the project."""
    _configure_logging(log_level)
    config = resolve_config(token=token, gitlab_url=gitlab_url, api_prefix=api_prefix)

    async def check():
        repo_id = get_repo_id(repository_url, config.gitlab_url)
        async with GitLabClient(config.api_url, repo_id, config.token) as client:
            return await verify_access(client)

    try:
        ok = asyncio.run(check())
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        typer.echo(f"❌ Failed to verify access to the project: {e}", err=True)
        raise typer.Exit(1)

    if not ok:
        raise typer.Exit(1)
    typer.echo("✅ Token can access the project")


def main():
    app()


if __name__ == "__main__":
    main()
