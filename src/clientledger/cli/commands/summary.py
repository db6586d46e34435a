"""Summary commands."""

import click

from clientledger.cli.error_handling import handle_domain_error, require_accountant
from clientledger.domain.aggregation import AggregationService
from clientledger.domain.entities import CategorySummary
from clientledger.domain.errors import DomainError


def _display_section(title: str, summary: CategorySummary) -> None:
    click.echo(f"\n{title}")
    click.echo("-" * 70)
    if not summary.groups:
        click.echo("No transactions.")
        return
    for group in summary.groups:
        click.echo(f"{group.name:<40} {group.value:>15,.2f} {group.percentage:>8.1f}%")
    click.echo("-" * 70)
    click.echo(f"{'Total':<40} {summary.total:>15,.2f}")


@click.command("summary")
@click.argument("client_id", type=int)
@click.option("--file", "file_id", type=int, help="Limit the summary to one file")
@click.pass_context
def summary(ctx, client_id: int, file_id: int | None):
    """Show totals per category for a client or one of its files."""
    accountant_id = require_accountant(ctx)
    service = AggregationService(ctx.obj["db"])

    try:
        if file_id is None:
            report = service.client_report(accountant_id, client_id)
        else:
            report = service.file_report(accountant_id, client_id, file_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not report.has_chart_data:
        click.echo("No transactions found.")
        return

    _display_section("Expenses", report.expense)
    _display_section("Income", report.income)
    _display_section("All transactions", report.unified)


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
