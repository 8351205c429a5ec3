"""Command-line interface for prfiles."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from prfiles import __version__
from prfiles.config import (
    ProjectConfig,
    config_path,
    find_project_root,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from prfiles.exceptions import ConfigError, PrFilesError
from prfiles.ui.console import Console

console = Console()


def _get_project_root(path: str | None = None) -> Path:
    """Resolve the directory whose .prfiles/config.json applies."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root
    return find_project_root() or Path.cwd()


def _load_project_config(path: str | None) -> tuple[Path, ProjectConfig]:
    root = _get_project_root(path)
    try:
        return root, load_config(root)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="prfiles")
def main():
    """prfiles - which files do the open pull requests touch?"""
    pass


@main.command("show-files")
@click.argument("repo")
@click.argument("files", nargs=-1)
@click.option("--path", "-p", default=None, help="Directory holding .prfiles/config.json.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Report format (default from config: text).",
)
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None,
              help="Fetch diffs on this many threads.")
@click.option("--netrc", "netrc_path", default=None, help="Credentials file (default ~/.netrc).")
@click.option("--max-redirects", type=click.IntRange(min=0), default=None,
              help="Redirect ceiling per diff download.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Per-request timeout in seconds.")
@click.option("--summary", is_flag=True, help="Also show the most contended files.")
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP activity.")
def show_files(
    repo: str,
    files: tuple[str, ...],
    path: str | None,
    output_format: str | None,
    workers: int | None,
    netrc_path: str | None,
    max_redirects: int | None,
    timeout: float | None,
    summary: bool,
    verbose: bool,
):
    """List the files touched by the open pull requests of REPO (OWNER/REPO).

    When FILES are given, only those paths are reported.

    Usage:

        prfiles show-files octocat/hello-world

        prfiles show-files octocat/hello-world src/app.py --format json
    """
    from prfiles.github.client import GitHubClient, split_repo
    from prfiles.github.credentials import load_netrc_credentials
    from prfiles.github.diff_fetcher import DiffFetcher
    from prfiles.github.pull_request import PullRequest
    from prfiles.github.renderer import render_json, render_report
    from prfiles.index import build_file_index

    console.configure_logging(verbose)
    _, config = _load_project_config(path)

    if netrc_path:
        config.github.netrc_path = netrc_path
    if max_redirects is not None:
        config.fetch.max_redirects = max_redirects
    if timeout is not None:
        config.fetch.timeout = timeout
    output_format = output_format or config.report.format
    workers = workers or config.report.workers

    try:
        split_repo(repo)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="REPO")

    try:
        credentials = load_netrc_credentials(
            config.github.resolved_netrc_path, config.github.netrc_machine
        )

        with GitHubClient(
            token=credentials.token,
            api_base_url=config.github.api_base_url,
            timeout=config.fetch.timeout,
            user_agent=config.fetch.user_agent,
        ) as client:
            descriptors = client.list_open_pull_requests(repo)

        with DiffFetcher.from_config(config.fetch) as fetcher:
            pulls = [PullRequest(d, fetcher) for d in descriptors]
            index = build_file_index(pulls, workers=workers)
    except PrFilesError as e:
        console.error(str(e))
        sys.exit(1)

    if files:
        index = index.filter(files)

    if output_format == "json":
        click.echo(render_json(index))
        return

    if not len(index):
        console.info(f"No files touched by open pull requests in {repo}")
        return

    click.echo(render_report(index))
    if summary:
        console.show_summary(index, len(pulls))


# =========================================================================
# Config Management
# =========================================================================

@main.command("config")
@click.argument("action", type=click.Choice(["show", "get", "set", "path"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Directory holding .prfiles/config.json.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Show or change prfiles settings.

    KEY is `section.field`, e.g. `fetch.max_redirects` or `github.netrc_path`.
    VALUE is read as JSON when it parses, otherwise as a plain string.
    """
    root, config = _load_project_config(path)

    if action == "show":
        click.echo(config.model_dump_json(indent=2))
        return
    if action == "path":
        click.echo(str(config_path(root)))
        return

    if not key:
        raise click.UsageError(f"prfiles config {action} needs a KEY")
    if action == "set" and value is None:
        raise click.UsageError("prfiles config set needs a KEY and a VALUE")

    try:
        if action == "get":
            click.echo(f"{key} = {get_config_value(config, key)}")
            return
        try:
            parsed_value = json.loads(value)
        except json.JSONDecodeError:
            parsed_value = value
        config = set_config_value(config, key, parsed_value)
    except KeyError as e:
        console.error(e.args[0])
        sys.exit(1)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)

    saved = save_config(root, config)
    console.success(f"Set {key} = {get_config_value(config, key)} in {saved}")


if __name__ == "__main__":
    main()
