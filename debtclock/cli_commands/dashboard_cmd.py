"""
National debt dashboard for the terminal.

Layout (top to bottom):
- Header with the active toggles
- Banner: current debt (ticking), record date, /sec /min /hr /day deltas
- KPI cards: per capita, per taxpayer, debt-to-GDP and interest (static)
- 30-day sparkline
- Composition bar: publicly held vs intragovernmental
"""
from __future__ import annotations

import asyncio
import os
import sys
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from debtclock.config import DisplayOptions, Settings, load_settings
from debtclock.data.fiscaldata import FiscalDataClient
from debtclock.debt.models import DashboardView, Failed, Ready
from debtclock.debt.session import DebtDashboard
from debtclock.utils.formatting import (
    PLACEHOLDER,
    fmt_currency,
    fmt_kpi,
    fmt_signed_delta,
    fmt_usd,
)
from debtclock.utils.logging import console, log_event, to_json

PUBLIC_COLOR = "#2563eb"
INTRAGOV_COLOR = "#10b981"

_SPARK_CHARS = "▁▂▃▄▅▆▇█"


# ─────────────────────────────────────────────────────────────────────────────
# Rendering (stateless: DashboardView in, renderable out)
# ─────────────────────────────────────────────────────────────────────────────

def _sparkline(values: List[float]) -> str:
    """Render a list of floats as a Unicode sparkline."""
    if not values:
        return ""
    lo, hi = min(values), max(values)
    span = hi - lo if hi != lo else 1.0
    return "".join(_SPARK_CHARS[min(len(_SPARK_CHARS) - 1, int((v - lo) / span * (len(_SPARK_CHARS) - 1)))] for v in values)


def _toggle(label_on: str, label_off: str, on: bool) -> str:
    if on:
        return f"[reverse] {label_on} [/reverse]"
    return f"[dim] {label_off} [/dim]"


def render_header(view: DashboardView, *, hints: bool = False) -> Table:
    opts = view.options
    grid = Table.grid(expand=True)
    grid.add_column(justify="left")
    grid.add_column(justify="right")
    grid.add_row(
        "[bold]National Debt[/bold]",
        " ".join(
            [
                _toggle("Compact", "Expanded", opts.compact),
                _toggle("Ticker On", "Ticker Off", opts.ticker_on),
                _toggle("Deltas", "Deltas Hidden", opts.show_deltas),
            ]
        ),
    )
    if hints:
        grid.add_row("", "[dim][c] compact  [t] ticker  [d] deltas  [q] quit[/dim]")
    return grid


def headline_text(view: DashboardView) -> str:
    if view.loading:
        return "Loading…"
    if view.error is not None:
        return PLACEHOLDER
    return fmt_currency(view.display_value, compact=view.options.compact)


def render_deltas(view: DashboardView) -> Table:
    grid = Table.grid(expand=True, padding=(0, 1))
    deltas = view.per_second_deltas
    cells = []
    for label, value in (("/sec", deltas.sec), ("/min", deltas.min), ("/hr", deltas.hr), ("/day", deltas.day)):
        grid.add_column(justify="center", ratio=1)
        color = "green" if value >= 0 else "red"
        cells.append(f"[{color}]{fmt_signed_delta(value, compact=view.options.compact)}[/{color}]\n[dim]{label}[/dim]")
    grid.add_row(*cells)
    return grid


def render_banner(view: DashboardView) -> Panel:
    title = "Current National Debt"
    if view.record_date:
        title = f"{title} • {view.record_date}"
    parts: List[Any] = [Text.from_markup(f"[bold red]{headline_text(view)}[/bold red]")]
    if view.options.show_deltas:
        parts.append(render_deltas(view))
    return Panel(Group(*parts), title=title, title_align="left", border_style="dim")


def _kpi_card(label: str, value: str, *, static: bool = False) -> Panel:
    subtitle = "[dim]static[/dim]" if static else None
    return Panel(
        Text.from_markup(f"[bold]{value}[/bold]", justify="center"),
        title=f"[dim]{label}[/dim]",
        subtitle=subtitle,
        border_style="dim",
    )


def render_kpis(view: DashboardView) -> Table:
    compact = view.options.compact
    kpis = view.static_kpis
    grid = Table.grid(expand=True, padding=(0, 1))
    grid.add_column(ratio=1)
    grid.add_column(ratio=1)
    grid.add_row(
        _kpi_card("Per Capita", fmt_kpi(view.per_capita, compact=compact, prefix="$")),
        _kpi_card("Per Taxpayer", fmt_kpi(view.per_taxpayer, compact=compact, prefix="$")),
    )
    grid.add_row(
        _kpi_card("Debt-to-GDP", fmt_kpi(kpis.debt_to_gdp_pct, suffix="%", decimals=0), static=not kpis.live),
        _kpi_card(
            "Est. Interest (yr)",
            fmt_kpi(kpis.est_interest_annual, compact=compact, prefix="$"),
            static=not kpis.live,
        ),
    )
    return grid


def render_trend(view: DashboardView) -> Panel:
    points = [p for p in view.trend if p.value is not None]
    if not points:
        body: Any = Text(PLACEHOLDER, style="dim")
    else:
        values = [float(p.value) for p in points]
        body = Group(
            Text(_sparkline(values), style=PUBLIC_COLOR),
            Text.from_markup(
                f"[dim]{points[0].date}[/dim] {fmt_usd(points[0].value)}  →  "
                f"[dim]{points[-1].date}[/dim] {fmt_usd(points[-1].value)}"
            ),
        )
    title = f"{len(points)}-Day Trend" if points else "Trend"
    return Panel(body, title=title, title_align="left", border_style="dim")


def render_composition(view: DashboardView, width: int = 40) -> Panel:
    comp = view.composition
    share = comp.public_share
    if share is None:
        bar = Text("░" * width, style="dim")
    else:
        public_cells = round(share * width)
        bar = Text()
        bar.append("█" * public_cells, style=PUBLIC_COLOR)
        bar.append("█" * (width - public_cells), style=INTRAGOV_COLOR)

    def _pct(x: Optional[float]) -> str:
        return PLACEHOLDER if x is None else f"{x * 100:.1f}%"

    legend = Table.grid(expand=True, padding=(0, 2))
    legend.add_column()
    legend.add_column()
    legend.add_row(
        Text.from_markup(f"[{PUBLIC_COLOR}]■[/] Public {_pct(share)}  {fmt_usd(comp.public)}"),
        Text.from_markup(
            f"[{INTRAGOV_COLOR}]■[/] Intragov {_pct(comp.intragovernmental_share)}  {fmt_usd(comp.intragovernmental)}"
        ),
    )
    return Panel(Group(bar, legend), title="Debt Composition", title_align="left", border_style="dim")


def render_dashboard(view: DashboardView, *, hints: bool = False) -> Group:
    parts: List[Any] = [
        render_header(view, hints=hints),
        render_banner(view),
        render_kpis(view),
        render_trend(view),
        render_composition(view),
    ]
    if view.error is not None:
        parts.append(Text(f"Failed to load Treasury data: {view.error}", style="red", justify="center"))
    return Group(*parts)


def view_to_dict(view: DashboardView) -> Dict[str, Any]:
    """Machine-readable form of a frame (for --json)."""
    state = "ready" if isinstance(view.fetch_state, Ready) else "failed" if isinstance(view.fetch_state, Failed) else "loading"
    d = view.per_second_deltas
    return {
        "state": state,
        "error": view.error,
        "record_date": view.record_date,
        "display_value": view.display_value,
        "daily_change": view.daily_change,
        "per_second_deltas": {"sec": d.sec, "min": d.min, "hr": d.hr, "day": d.day},
        "per_capita": view.per_capita,
        "per_taxpayer": view.per_taxpayer,
        "composition": {
            "public": view.composition.public,
            "intragovernmental": view.composition.intragovernmental,
        },
        "static_kpis": view.static_kpis,
        "trend": [p.model_dump() for p in view.trend],
    }


# ─────────────────────────────────────────────────────────────────────────────
# Runners
# ─────────────────────────────────────────────────────────────────────────────

def make_client(settings: Settings) -> FiscalDataClient:
    return FiscalDataClient(settings.api_base_url)


async def run_snapshot(settings: Settings, options: DisplayOptions, *, json_out: bool, verbose: bool) -> int:
    async with make_client(settings) as client:
        dash = DebtDashboard(client, settings, options=options)
        try:
            state = await dash.load()
            view = dash.view()
        finally:
            dash.close()

    if verbose:
        log_event("debt_snapshot", {"state": type(state).__name__, "record_date": view.record_date})
    if json_out:
        typer.echo(to_json(view_to_dict(view)))
    else:
        console.print(render_dashboard(view))
    return 1 if isinstance(state, Failed) else 0


QUIT_KEY = "q"

KEY_BINDINGS: Dict[str, Callable[[DebtDashboard], None]] = {
    "c": DebtDashboard.toggle_compact,
    "t": DebtDashboard.toggle_ticker,
    "d": DebtDashboard.toggle_deltas,
}


def handle_key(dash: DebtDashboard, key: str) -> bool:
    """Apply one keypress to the dashboard. Returns False on the quit key."""
    key = key.lower()
    if key == QUIT_KEY:
        return False
    action = KEY_BINDINGS.get(key)
    if action is not None:
        action(dash)
    return True


@contextmanager
def keypresses(loop: asyncio.AbstractEventLoop, on_key: Callable[[str], None]) -> Iterator[None]:
    """
    Feed single keypresses from an interactive POSIX terminal to on_key.

    The terminal is put in cbreak mode for the duration and restored on exit.
    Piped or non-POSIX stdin gets no key bindings.
    """
    if os.name != "posix" or not sys.stdin.isatty():
        yield
        return

    import termios
    import tty

    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)

    def _read() -> None:
        data = os.read(fd, 32).decode(errors="ignore")
        for ch in data:
            on_key(ch)

    loop.add_reader(fd, _read)
    try:
        yield
    finally:
        loop.remove_reader(fd)
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


async def run_live(
    settings: Settings,
    options: DisplayOptions,
    *,
    seconds: float,
    verbose: bool,
    out: Optional[Console] = None,
) -> int:
    out = out or console
    stop = asyncio.Event()
    async with make_client(settings) as client:
        dash = DebtDashboard(client, settings, options=options)

        def on_key(key: str) -> None:
            if not handle_key(dash, key):
                stop.set()

        try:
            with Live(render_dashboard(dash.view(), hints=True), console=out, refresh_per_second=10) as live, \
                    keypresses(asyncio.get_running_loop(), on_key):
                dash.subscribe(lambda v: live.update(render_dashboard(v, hints=True)))
                state = await dash.load()
                if verbose:
                    log_event("debt_snapshot", {"state": type(state).__name__})
                if isinstance(state, Failed):
                    return 1
                if seconds > 0:
                    try:
                        await asyncio.wait_for(stop.wait(), timeout=seconds)
                    except asyncio.TimeoutError:
                        pass
                else:
                    await stop.wait()
        finally:
            dash.close()
    return 0


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def register(app: typer.Typer) -> None:
    @app.command("live")
    def live_cmd(
        expanded: bool = typer.Option(False, "--expanded/--compact", help="Full dollar figures instead of 36.2T"),
        ticker: bool = typer.Option(True, "--ticker/--no-ticker", help="Interpolate the headline between refreshes"),
        deltas: bool = typer.Option(True, "--deltas/--no-deltas", help="Show /sec /min /hr /day deltas"),
        seconds: float = typer.Option(0.0, "--seconds", help="Stop after N seconds (0 = until Ctrl-C)"),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Print fetch events"),
    ):
        """Live-updating national debt dashboard. Keys: c compact, t ticker, d deltas, q quit."""
        options = DisplayOptions(compact=not expanded, show_deltas=deltas, ticker_on=ticker)
        try:
            code = asyncio.run(run_live(load_settings(), options, seconds=seconds, verbose=verbose))
        except KeyboardInterrupt:
            code = 0
        raise typer.Exit(code)

    @app.command("snapshot")
    def snapshot_cmd(
        expanded: bool = typer.Option(False, "--expanded/--compact", help="Full dollar figures instead of 36.2T"),
        deltas: bool = typer.Option(True, "--deltas/--no-deltas", help="Show /sec /min /hr /day deltas"),
        json_out: bool = typer.Option(False, "--json", help="Machine-readable JSON output"),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Print fetch events"),
    ):
        """Fetch once and print the dashboard."""
        options = DisplayOptions(compact=not expanded, show_deltas=deltas, ticker_on=False)
        code = asyncio.run(run_snapshot(load_settings(), options, json_out=json_out, verbose=verbose))
        raise typer.Exit(code)
