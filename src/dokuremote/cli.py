"""CLI interface for dokuremote.

Command-line front-end for editing DokuWiki pages over XML-RPC.
"""

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from dokuremote.config import Config
from dokuremote.errors import DokuRemoteError
from dokuremote.paths import resolve
from dokuremote.session import WikiSession


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover dokuremote.toml)",
)
@click.option(
    "--url",
    default=None,
    help="XML-RPC endpoint URL (overrides config)",
)
@click.option(
    "--user",
    "-u",
    default=None,
    help="Login name offered when prompting (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log remote calls)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    url: str | None,
    user: str | None,
    verbose: bool,
) -> None:
    """dokuremote - edit DokuWiki pages from the command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = Config.load(config_path)
    except DokuRemoteError as e:
        _fail(e)
    ctx.obj = config.with_overrides(xml_rpc_url=url, login_user=user)


def _fail(error: object) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)


def _open_session(config: Config) -> WikiSession:
    """Create a session, exiting with a message if the endpoint is missing."""
    try:
        return WikiSession.from_config(config)
    except DokuRemoteError as e:
        _fail(e)


@cli.command()
@click.pass_obj
def login(config: Config) -> None:
    """Log in to the wiki and report the result."""
    with _open_session(config) as session:
        try:
            session.login()
            title = session.title()
        except DokuRemoteError as e:
            _fail(e)
    click.echo(click.style("Login successful!", fg="green"))
    click.echo(f"Wiki: {title}")


@cli.command()
@click.pass_obj
def title(config: Config) -> None:
    """Show the wiki title."""
    with _open_session(config) as session:
        try:
            click.echo(session.title())
        except DokuRemoteError as e:
            _fail(e)


@cli.command("open")
@click.argument("page")
@click.option(
    "--from",
    "-f",
    "current_page",
    default=None,
    help="Page the name is relative to",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write page text to this file instead of stdout",
)
@click.pass_obj
def open_page(
    config: Config, page: str, current_page: str | None, output: Path | None
) -> None:
    """Fetch a page's wiki text."""
    with _open_session(config) as session:
        try:
            buffer = session.open_page(page, current_page)
        except DokuRemoteError as e:
            _fail(e)

    if buffer.is_new:
        click.echo(f"Page {buffer.page_id} does not exist yet", err=True)
    if output is not None:
        output.write_text(buffer.text, encoding="utf-8")
        click.echo(f"Wrote {buffer.page_id} to {output}", err=True)
    else:
        click.echo(buffer.text, nl=False)


@cli.command()
@click.argument("page")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--message",
    "-m",
    default=None,
    help="Edit summary (default: from config, marked minor)",
)
@click.option(
    "--minor/--no-minor",
    default=None,
    help="Mark the edit as minor",
)
@click.pass_obj
def save(
    config: Config,
    page: str,
    source: Path,
    message: str | None,
    minor: bool | None,
) -> None:
    """Save a file's contents as a wiki page.

    An empty file removes an existing page.
    """
    text = source.read_text(encoding="utf-8")
    with _open_session(config) as session:
        try:
            buffer = session.open_page(page)
            buffer.text = text
            if buffer.is_new and not text.strip():
                _fail(f"Can't save new empty page {buffer.page_id}")
            written = session.save_page(buffer, message, minor)
        except DokuRemoteError as e:
            _fail(e)

    if not written:
        click.echo("No unsaved changes.")
    elif buffer.is_new:
        click.echo(click.style(f"Page {buffer.page_id} removed!", fg="green"))
    else:
        click.echo(click.style(f"Page {buffer.page_id} written!", fg="green"))


@cli.command()
@click.option("--refresh", "-r", is_flag=True, help="Refresh the page list first")
@click.option(
    "--namespace",
    "-n",
    default=None,
    help="Show only direct children of this namespace",
)
@click.pass_obj
def pages(config: Config, refresh: bool, namespace: str | None) -> None:
    """List pages on the wiki."""
    with _open_session(config) as session:
        try:
            page_ids = session.list_pages(refresh)
        except DokuRemoteError as e:
            _fail(e)

        if namespace is None:
            for page_id in page_ids:
                click.echo(page_id)
            return

        namespaces, names = session.cache.children(namespace)
        click.echo(click.style(f"ns: {namespace}", bold=True))
        for name in namespaces:
            click.echo(click.style(f"{name}/", fg="blue"))
        for name in names:
            click.echo(name)


@cli.command("resolve")
@click.argument("raw_path")
@click.option(
    "--namespace",
    "-n",
    default="",
    help="Current namespace (default: top level)",
)
def resolve_path(raw_path: str, namespace: str) -> None:
    """Resolve link text to a page identifier."""
    try:
        click.echo(resolve(raw_path, namespace))
    except DokuRemoteError as e:
        _fail(e)


@cli.command()
@click.option("--refresh", "-r", is_flag=True, help="Refresh the page list first")
@click.pass_obj
def link(config: Config, refresh: bool) -> None:
    """Choose a page and print link text for it."""
    with _open_session(config) as session:
        try:
            candidates = session.completion.selection_candidates(refresh)
        except DokuRemoteError as e:
            _fail(e)

        if not candidates:
            _fail("The wiki has no pages")

        for number, page_id in enumerate(candidates, start=1):
            click.echo(f"{number:>4}  {page_id}", err=True)
        choice = click.prompt(
            "Select a page to link",
            type=click.IntRange(1, len(candidates)),
            err=True,
        )
        click.echo(session.insert_link(candidates[choice - 1]))
