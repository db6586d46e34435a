"""CLI error handling helpers."""

import click

from clientledger.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_accountant(ctx: click.Context) -> str:
    """Accountant ID given with --accountant, or exit with failure."""
    accountant_id = ctx.obj.get("accountant_id")
    if not accountant_id:
        click.echo(
            "Error: No accountant given. Use --accountant or set CLIENTLEDGER_ACCOUNTANT_ID.",
            err=True,
        )
        ctx.exit(1)
    return accountant_id
