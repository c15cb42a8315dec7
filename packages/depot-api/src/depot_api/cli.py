# SPDX-License-Identifier: MIT
"""Administrative command line for the Depot registry."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .auth.hashing import DEFAULT_ITERATIONS, MAX_ITERATIONS, MIN_ITERATIONS, hash_secret
from .config import APIConfig, ConfigError


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[APIConfig] = None
        self.config_file: Optional[Path] = None
        self.verbose: bool = False

    def load_config(self) -> APIConfig:
        """Load configuration, caching the result."""
        if self.config is None:
            if self.config_file is not None:
                self.config = APIConfig.from_toml(self.config_file)
            else:
                self.config = APIConfig.from_env()
            self.config.validate()
        return self.config


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


@click.group()
@click.version_option(package_name="depot")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML configuration file (defaults to DEPOT_* environment variables).",
)
@pass_context
def cli(ctx: Context, verbose: bool, config_file: Optional[Path]) -> None:
    """Depot package registry administration.

    \b
    Examples:
        depot-admin hash-secret
        depot-admin -c depot.toml reindex
        depot-admin serve --port 5000
    """
    ctx.verbose = verbose
    ctx.config_file = config_file
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("hash-secret")
@click.option(
    "--iterations",
    type=click.IntRange(min=MIN_ITERATIONS, max=MAX_ITERATIONS),
    default=DEFAULT_ITERATIONS,
    show_default=True,
    help="PBKDF2 iteration count.",
)
@click.option(
    "--secret",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Secret to hash; prompted for when omitted.",
)
def hash_secret_command(iterations: int, secret: str) -> None:
    """Hash an API key or password for the configuration file."""
    if not secret.strip():
        echo_error("The secret must not be empty")
        sys.exit(1)
    click.echo(hash_secret(secret, iterations))


async def _reindex(config: APIConfig) -> int:
    from .db import CatalogStore, close_db, get_session_factory, init_db
    from .providers import create_search_indexer
    from .search.reindex import SearchReindexService

    await init_db(config.database)
    try:
        async with get_session_factory()() as session:
            service = SearchReindexService(
                CatalogStore(session), create_search_indexer(config), config.reindex.batch_size
            )
            return await service.reindex()
    finally:
        await close_db()


@cli.command()
@pass_context
def reindex(ctx: Context) -> None:
    """Rebuild the search index from the catalog."""
    count = asyncio.run(_reindex(ctx.load_config()))
    echo_success(f"Reindexed {count} packages")


@cli.command("export-openapi")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path), default="openapi.json")
@pass_context
def export_openapi(ctx: Context, output: Path) -> None:
    """Export the OpenAPI specification to a JSON file."""
    from .app import create_app

    app = create_app(ctx.load_config())
    openapi_schema = app.openapi()

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(openapi_schema, indent=2))

    echo_success(f"OpenAPI specification exported to: {output}")
    click.echo(f"  Title: {openapi_schema.get('info', {}).get('title')}")
    click.echo(f"  Paths: {len(openapi_schema.get('paths', {}))}")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", default=5000, show_default=True, type=int, help="Bind port.")
@pass_context
def serve(ctx: Context, host: str, port: int) -> None:
    """Run the registry server."""
    import uvicorn

    from .app import create_app

    app = create_app(ctx.load_config())
    uvicorn.run(app, host=host, port=port, log_level="debug" if ctx.verbose else "info")


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
