"""Main CLI entry point."""

import click

from clientledger.config import load_settings
from clientledger.database.factories import create_database
from clientledger.logging_config import setup_logging

# Import and register all commands at module level
from clientledger.cli.commands import (
    category,
    client,
    transactions,
    summary,
    export,
    serve,
    sign_payload,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CLIENTLEDGER_DB_PATH environment variable)",
    envvar="CLIENTLEDGER_DB_PATH",
)
@click.option(
    "--accountant",
    "accountant_id",
    help="Accountant ID to act as (overrides CLIENTLEDGER_ACCOUNTANT_ID environment variable)",
    envvar="CLIENTLEDGER_ACCOUNTANT_ID",
)
@click.pass_context
def cli(ctx, db_path: str | None, accountant_id: str | None):
    """Clientledger - accountant client and transaction review.

    Manage clients and categories, review AI-classified transactions and
    run the HTTP API.
    """
    ctx.ensure_object(dict)
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_json)
    ctx.obj["settings"] = settings
    ctx.obj["accountant_id"] = accountant_id

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(
            database_url=None if db_path else settings.database_url,
            database_path=db_path or settings.database_path,
        )
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
category.register_commands(cli)
client.register_commands(cli)
transactions.register_commands(cli)
summary.register_commands(cli)
export.register_commands(cli)
serve.register_commands(cli)
sign_payload.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
