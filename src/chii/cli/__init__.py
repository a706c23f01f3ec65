"""CLI commands for chii.

Provides command-line interface using Typer:
- chii trending subjects: Recompute trending subjects
- chii trending topics: Recompute trending subject topics
- chii trending show: Print a cached trending list
- chii schedule: Run the trending jobs on their cron schedules

Usage:
    chii --help
    chii trending subjects --type 2 --period week
    chii trending topics --flush
    chii trending show --type 2 --limit 10
    chii schedule
"""

import typer

from chii.cli.schedule_cmd import app as schedule_app
from chii.cli.trending_cmd import app as trending_app

# Main CLI application
app = typer.Typer(
    name="chii",
    help="chii: caching and trending workers for the content tracker",
    no_args_is_help=True,
)

app.add_typer(trending_app, name="trending")
app.add_typer(schedule_app, name="schedule")


@app.callback()
def callback() -> None:
    """chii: caching and trending workers for the content tracker."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
