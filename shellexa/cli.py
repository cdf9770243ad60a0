"""Command line interface for shellexa.

This module defines the ``shellexa`` command using the ``click`` library.
It exposes the following subcommands:

``shellexa configure``
    Store the model backend (provider, API URL, model name and optional
    API key).  Writes ``~/.shellexa/config.yaml`` unless ``--config`` or
    ``SHELLEXA_CONFIG`` points elsewhere.

``shellexa run <request>``
    Ask the model for a command, then choose ``e`` to execute, ``a`` to
    abort or ``r`` to ask for an alternative.  Failed commands are sent
    back to the model automatically.

``shellexa serve``
    Launch a FastAPI server exposing a JSON API that returns suggested
    commands without executing them.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click

from .config import PROVIDERS, Config, ConfigError, ConfigStore
from .executor import ShellExecutor
from .loop import AcquisitionError, InteractionLoop
from .prompts import PromptBuilder, SystemContext
from .providers import get_provider

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="SHELLEXA_CONFIG",
    default=None,
    help="Path of the configuration file (default: ~/.shellexa/config.yaml).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], verbose: bool) -> None:
    """shellexa – turn natural language into a shell command you confirm."""
    _configure_logging(verbose)
    ctx.obj = ConfigStore(config_path)


@cli.command()
@click.option(
    "--provider",
    type=click.Choice(PROVIDERS),
    default="http",
    show_default=True,
    help="Backend type: 'http' for one JSON request per prompt, 'chat' for an Ollama chat session.",
)
@click.option(
    "--api-url",
    prompt="Enter API URL",
    default="",
    show_default=False,
    help="Backend URL, e.g. http://localhost:11434/api/chat. May be left empty for the chat provider.",
)
@click.option("--model", "model_name", prompt="Enter Model Name", help="Model name, e.g. llama3")
@click.option("--api-key", default=None, help="Optional bearer token for the HTTP backend.")
@click.pass_obj
def configure(
    store: ConfigStore,
    provider: str,
    api_url: Optional[str],
    model_name: str,
    api_key: Optional[str],
) -> None:
    """Configure the model provider, API URL and model name."""
    try:
        config = Config.from_dict(
            {"provider": provider, "api_url": api_url, "model": model_name, "api_key": api_key}
        )
        store.save(config)
    except (ConfigError, OSError) as exc:
        click.echo(f"Error saving configuration: {exc}", err=True)
        sys.exit(1)
    click.echo("Configuration saved successfully.")


@cli.command(name="run")
@click.argument("request", nargs=-1, type=str)
@click.option(
    "--shell",
    "shell_path",
    default=None,
    help="Shell executable used to run confirmed commands (default: platform shell).",
)
@click.pass_obj
def run_request(store: ConfigStore, request: tuple, shell_path: Optional[str]) -> None:
    """Suggest a command for REQUEST and walk through confirm/execute/retry."""
    # Join request parts into a single string (to allow unquoted words)
    request_text = " ".join(request).strip()
    if not request_text:
        click.echo('Usage: shellexa run "list all files larger than 100MB"')
        sys.exit(1)
    try:
        config = store.load()
    except ConfigError as exc:
        click.echo(
            "Error getting config, ensure you have run `shellexa configure` before first use.\n"
            f"Error: {exc}",
            err=True,
        )
        sys.exit(1)

    provider = get_provider(config.provider, config.model, config.api_url, config.api_key)
    loop = InteractionLoop(
        provider=provider,
        builder=PromptBuilder(SystemContext.detect()),
        executor=ShellExecutor(shell_path),
    )
    try:
        result = loop.run(request_text)
    except AcquisitionError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    finally:
        provider.close()
    LOGGER.debug(
        "session_finished",
        extra={"state": result.state.value, "turns": result.session.turns},
    )


@cli.command(name="serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address for the API server")
@click.option("--port", default=5005, show_default=True, help="Port for the API server")
@click.pass_obj
def serve(store: ConfigStore, host: str, port: int) -> None:
    """Run the API server exposing command suggestions as JSON."""
    import uvicorn

    from .server import create_app

    click.echo(f"shellexa API running on http://{host}:{port}")
    uvicorn.run(create_app(store), host=host, port=port)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
