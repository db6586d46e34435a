"""Webhook signing helper for operators and integration tests."""

import click

from clientledger.domain.webhook import SIGNATURE_PREFIX, compute_signature


@click.command("sign-payload")
@click.argument("payload", type=click.File("rb"), default="-")
@click.option("--secret", envvar="WEBHOOK_SECRET", help="Shared secret (defaults to WEBHOOK_SECRET)")
@click.pass_context
def sign_payload(ctx, payload, secret: str | None):
    """Print the x-signature header value for a webhook body.

    PAYLOAD is a file holding the exact request body, or - for stdin.
    """
    secret = secret or ctx.obj["settings"].webhook_secret
    if not secret:
        click.echo("Error: No secret given. Use --secret or set WEBHOOK_SECRET.", err=True)
        ctx.exit(1)

    click.echo(f"{SIGNATURE_PREFIX}{compute_signature(secret, payload.read())}")


def register_commands(cli):
    """Register sign-payload command with main CLI."""
    cli.add_command(sign_payload)
