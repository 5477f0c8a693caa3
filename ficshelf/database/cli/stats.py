"""
Stats Commands
--------------

Monthly reading analytics.

Commands:
    - month: Heatmap, fics finished, words read and top labels for a month
"""
import json
import click

from ficshelf.core.logging_manager import handle_cli_error
from ficshelf.core.exceptions import DatabaseError, ValidationError
from . import get_db


def _heatmap_rows(heatmap, first_weekday):
    """Render the heatmap as calendar weeks starting on Monday."""
    cells = ["  "] * first_weekday + ["██" if active else "··" for active in heatmap]
    return [" ".join(cells[i:i + 7]) for i in range(0, len(cells), 7)]


@click.group()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Reading statistics."""
    pass


@stats.command("month")
@click.argument("username")
@click.option(
    "--offset",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Months back from the current one",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def stats_month(ctx, username, offset, as_json):
    """Show USERNAME's monthly reading report."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            reader = db.profiles.require(username)
            report = db.monthly_analytics.compute(session, reader, month_offset=offset)

        if as_json:
            click.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
            return

        click.echo(f"\n📅 {report.window.label}")
        click.echo("Mo Tu We Th Fr Sa Su")
        for row in _heatmap_rows(report.heatmap, report.window.first_day.weekday()):
            click.echo(row)
        click.echo(f"\nDays read: {report.days_read}")
        click.echo(f"Fics finished: {report.fics_read}")
        click.echo(f"Words read: {report.words_read:,}")
        click.echo(f"Top fandom: {report.top_fandom}")
        click.echo(f"Top relationship: {report.top_relationship}")
        click.echo(f"Top character: {report.top_character}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "stats_month", additional_context={"username": username})
