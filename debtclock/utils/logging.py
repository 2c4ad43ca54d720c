from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from fractions import Fraction
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def _to_jsonable(x: Any) -> Any:
    if is_dataclass(x) and not isinstance(x, type):
        return {k: _to_jsonable(v) for k, v in asdict(x).items()}
    if hasattr(x, "model_dump"):
        return {k: _to_jsonable(v) for k, v in x.model_dump().items()}
    if isinstance(x, dict):
        return {k: _to_jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_to_jsonable(v) for v in x]
    if isinstance(x, (datetime, date)):
        return x.isoformat()
    if isinstance(x, Decimal):
        return str(x)
    if isinstance(x, Fraction):
        return str(Decimal(x.numerator) / Decimal(x.denominator))
    return x


def to_json(payload: Any) -> str:
    return json.dumps(_to_jsonable(payload), default=str)


def log_event(event: str, payload: dict[str, Any]) -> None:
    console.print(f"[bold]{event}[/bold]")
    console.print_json(to_json(payload))


def configure_logging(level: str = "WARNING") -> None:
    """Route stdlib logging through rich; safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
