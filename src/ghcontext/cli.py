from __future__ import annotations

import json
import subprocess
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .context import GitHubContext
from .desktop import DesktopError
from .logging import get_logger, setup_logging
from .service import GitHubContextService
from .settings import ConfigError, load_settings, write_default_config
from .treeish import to_treeish
from .utils.git import GitError, get_toplevel

logger = get_logger(__name__)
console = Console()


def _print_version_and_exit() -> None:
    typer.echo(__version__)
    raise typer.Exit()


def _version_callback(value: bool) -> None:
    if value:
        _print_version_and_exit()


def _fail(message: str) -> typer.Exit:
    typer.echo(f"error: {message}", err=True)
    return typer.Exit(code=1)


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Find GitHub repository context in URLs and browser windows.",
)


@app.callback()
def app_main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Log parsing and git lookups to stderr.",
    ),
) -> None:
    """ghcontext - jump from a GitHub page to the local file."""
    setup_logging(debug=debug)
    if ctx.invoked_subcommand == "init":
        return
    try:
        settings = load_settings()
    except ConfigError as e:
        raise _fail(str(e))
    ctx.obj = GitHubContextService(settings)


def _service(ctx: typer.Context) -> GitHubContextService:
    service = ctx.obj
    if not isinstance(service, GitHubContextService):
        service = GitHubContextService()
        ctx.obj = service
    return service


def _render_context(context: GitHubContext, *, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(context.to_dict()))
        return

    table = Table(show_header=False, box=None)
    table.add_column("field", style="bold")
    table.add_column("value")
    for field, value in context.to_dict().items():
        table.add_row(field, str(value))
    console.print(table)


def _require_context(context: GitHubContext | None) -> GitHubContext:
    if context is None:
        raise _fail("no GitHub context found")
    return context


def _context_from_source(
    service: GitHubContextService, text: str | None, browser: bool
) -> GitHubContext:
    """Read a context from TEXT (URL or window title), the browser or the clipboard."""
    try:
        if text is not None:
            context = service.find_context_from_url(text)
            if context is None:
                context = service.find_context_from_window_title(text)
        elif browser:
            context = service.find_context_from_browser()
        else:
            context = service.find_context_from_clipboard()
    except DesktopError as e:
        raise _fail(str(e))
    return _require_context(context)


def _repository_dir(repo: Path | None, service: GitHubContextService) -> Path:
    if repo is not None:
        return repo
    try:
        return get_toplevel(Path.cwd(), timeout=service.settings.git_timeout)
    except (GitError, OSError, subprocess.TimeoutExpired):
        return Path.cwd()


JSON_OPTION = typer.Option(False, "--json", help="Print the context as JSON.")
BROWSER_OPTION = typer.Option(
    False, "--browser", help="Read the context from open browser windows."
)
REPO_OPTION = typer.Option(
    None,
    "--repo",
    "-C",
    help="Working copy to search (default: the enclosing git repository).",
    file_okay=False,
    exists=True,
)
SOURCE_ARGUMENT = typer.Argument(
    None, help="GitHub URL or browser window title (default: the clipboard)."
)


@app.command()
def url(
    ctx: typer.Context,
    address: str = typer.Argument(..., help="A GitHub web address."),
    as_json: bool = JSON_OPTION,
) -> None:
    """Extract the context from a URL."""
    context = _service(ctx).find_context_from_url(address)
    _render_context(_require_context(context), as_json=as_json)


@app.command()
def title(
    ctx: typer.Context,
    window_title: str = typer.Argument(..., help="A browser window title."),
    as_json: bool = JSON_OPTION,
) -> None:
    """Extract the context from a browser window title."""
    context = _service(ctx).find_context_from_window_title(window_title)
    _render_context(_require_context(context), as_json=as_json)


@app.command()
def clipboard(ctx: typer.Context, as_json: bool = JSON_OPTION) -> None:
    """Extract the context from the URL on the clipboard."""
    context = _context_from_source(_service(ctx), None, browser=False)
    _render_context(context, as_json=as_json)


@app.command()
def browser(ctx: typer.Context, as_json: bool = JSON_OPTION) -> None:
    """Extract the context from the first browser window showing GitHub."""
    context = _context_from_source(_service(ctx), None, browser=True)
    _render_context(context, as_json=as_json)


@app.command()
def treeish(
    treeish_path: str = typer.Argument(..., help="A revision/path string."),
) -> None:
    """List the revision:path candidates tried for a treeish path."""
    for candidate in to_treeish(treeish_path):
        typer.echo(candidate)


@app.command()
def locate(
    ctx: typer.Context,
    text: str | None = SOURCE_ARGUMENT,
    use_browser: bool = BROWSER_OPTION,
    repo: Path | None = REPO_OPTION,
) -> None:
    """Print the local file (and line range) a GitHub page points at."""
    service = _service(ctx)
    context = _context_from_source(service, text, use_browser)
    try:
        location = service.find_file(_repository_dir(repo, service), context)
    except OSError as e:
        raise _fail(str(e))
    if location is None:
        raise _fail(f"file not found: {context.blob_name or '(no file in context)'}")
    typer.echo(location.format())


@app.command()
def resolve(
    ctx: typer.Context,
    text: str | None = SOURCE_ARGUMENT,
    use_browser: bool = BROWSER_OPTION,
    repo: Path | None = REPO_OPTION,
) -> None:
    """Print the git object a GitHub page points at."""
    service = _service(ctx)
    context = _context_from_source(service, text, use_browser)
    try:
        git_object = service.resolve_git_object(_repository_dir(repo, service), context)
    except (GitError, OSError) as e:
        raise _fail(str(e))
    if git_object is None:
        raise _fail("no matching git object")
    typer.echo(f"{git_object.sha} {git_object.type} {git_object.expression}")


@app.command(name="open")
def open_(
    ctx: typer.Context,
    text: str | None = SOURCE_ARGUMENT,
    use_browser: bool = BROWSER_OPTION,
    repo: Path | None = REPO_OPTION,
) -> None:
    """Open the file a GitHub page points at in the configured editor."""
    service = _service(ctx)
    context = _context_from_source(service, text, use_browser)
    try:
        opened = service.try_open_file(_repository_dir(repo, service), context)
    except (DesktopError, OSError) as e:
        raise _fail(str(e))
    if not opened:
        raise _fail(f"file not found: {context.blob_name or '(no file in context)'}")


@app.command()
def init(
    path: Path = typer.Argument(
        Path("."), help="Directory to create .ghcontext/config.toml in."
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config."),
) -> None:
    """Write a config file with the default settings."""
    try:
        config_path = write_default_config(path, force=force)
    except ConfigError as e:
        raise _fail(str(e))
    typer.echo(f"Wrote {config_path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
