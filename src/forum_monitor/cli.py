"""CLI interface for the forum monitor."""

import asyncio
import logging
import sys

import click
import orjson

from .config import load_settings
from .errors import ConfigError
from .monitor import ForumMonitor
from .server import run_server

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _settings(env_file):
    try:
        return load_settings(dotenv_path=env_file)
    except ConfigError as e:
        raise click.UsageError(str(e)) from e


@click.group()
@click.option(
    '--log-level',
    default='INFO',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    help='Logging verbosity'
)
@click.option(
    '--env-file',
    default=None,
    type=click.Path(dir_okay=False),
    help='Load environment variables from this file instead of ./.env'
)
@click.pass_context
def main(ctx, log_level, env_file):
    """Forum Monitor - scrape a moderated forum board with a pool of headless browsers."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)
    ctx.obj = {'env_file': env_file}


@main.command()
@click.option('--host', default=None, help='Interface to bind (overrides HOST)')
@click.option('--port', default=None, type=int, help='Port to listen on (overrides PORT)')
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP server with /check-posts and /ping."""
    settings = _settings(ctx.obj['env_file'])
    if host:
        settings.host = host
    if port:
        settings.port = port
    run_server(settings)


@main.command()
@click.option('--board', default=None, help='Board path to scrape (overrides BOARD_PATH)')
@click.pass_context
def check(ctx, board):
    """Run one scrape cycle and print the posts as JSON."""
    settings = _settings(ctx.obj['env_file'])
    if board:
        settings.board_path = board if board.startswith('/') else '/' + board

    try:
        results = asyncio.run(ForumMonitor(settings).run_check())
    except Exception as e:
        click.echo(orjson.dumps({'success': False, 'error': str(e)}).decode())
        sys.exit(1)

    payload = {'success': True, 'posts': [r.to_dict() for r in results]}
    click.echo(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


@main.command('refresh-session')
@click.pass_context
def refresh_session(ctx):
    """Log in once (or confirm the stored session) and exit."""
    settings = _settings(ctx.obj['env_file'])
    try:
        asyncio.run(ForumMonitor(settings).refresh_session())
    except Exception as e:
        raise click.ClickException(f"Session refresh failed: {e}") from e
    click.echo("Session is valid.")


if __name__ == '__main__':
    main()
