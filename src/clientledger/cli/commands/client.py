"""Client management commands."""

import click

from clientledger.cli.error_handling import handle_domain_error, require_accountant
from clientledger.domain.client import ClientService
from clientledger.domain.errors import DomainError


@click.group()
def client_group():
    """Manage clients."""
    pass


@client_group.command("list")
@click.pass_context
def list_clients(ctx):
    """List the accountant's clients."""
    accountant_id = require_accountant(ctx)
    clients = ClientService(ctx.obj["db"]).list_clients(accountant_id)

    if not clients:
        click.echo("No clients found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<30} {'Email':<30} {'Phone':<15}")
    click.echo("-" * 84)
    for c in clients:
        click.echo(f"{c.id:<6} {c.full_name:<30} {c.email:<30} {c.phone_number or '':<15}")


@client_group.command("create")
@click.option("--first-name", required=True, help="Client first name")
@click.option("--email", required=True, help="Client email address")
@click.option("--last-name", help="Client last name")
@click.option("--phone", "phone_number", help="Client phone number")
@click.pass_context
def create_client(ctx, first_name: str, email: str, last_name: str, phone_number: str):
    """Create a new client."""
    accountant_id = require_accountant(ctx)

    try:
        client = ClientService(ctx.obj["db"]).create_client(
            accountant_id,
            first_name=first_name,
            email=email,
            last_name=last_name,
            phone_number=phone_number,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created client '{client.full_name}' (ID: {client.id})")


@client_group.command("files")
@click.argument("client_id", type=int)
@click.pass_context
def list_files(ctx, client_id: int):
    """List a client's files, newest first."""
    accountant_id = require_accountant(ctx)

    try:
        files = ClientService(ctx.obj["db"]).list_files(accountant_id, client_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not files:
        click.echo("No files found.")
        return

    for f in files:
        uploaded = f.uploaded_at.strftime("%Y-%m-%d %H:%M") if f.uploaded_at else ""
        click.echo(f"{f.id:<6} {f.name:<40} {uploaded}")


def register_commands(cli):
    """Register client commands with main CLI."""
    cli.add_command(client_group, name="client")
