"""
debtclock CLI

Commands:
- debtclock live        Live-updating national debt dashboard
- debtclock snapshot    One-shot render (or --json)
"""
from __future__ import annotations

import typer

from debtclock.utils.logging import configure_logging

app = typer.Typer(
    add_completion=False,
    help="""debtclock: U.S. national debt, live from Treasury FiscalData

\b
  debtclock live              Ticking headline, KPIs, trend, composition
  debtclock live --expanded   Full dollar figures
  debtclock snapshot --json   Machine-readable single fetch

\b
Run 'debtclock <command> --help' for details.
""",
)


@app.callback()
def main_callback(
    log_level: str = typer.Option("WARNING", "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
):
    configure_logging(log_level)


_COMMANDS_REGISTERED = False


def _register_commands() -> None:
    global _COMMANDS_REGISTERED
    if _COMMANDS_REGISTERED:
        return
    # Import here to keep `debtclock.cli` lightweight at import time.
    from debtclock.cli_commands.dashboard_cmd import register as register_dashboard

    register_dashboard(app)
    _COMMANDS_REGISTERED = True


def main():
    _register_commands()
    app()


# Register commands when imported as a console-script entrypoint (`pyproject.toml` uses `debtclock.cli:app`).
_register_commands()


if __name__ == "__main__":
    main()
