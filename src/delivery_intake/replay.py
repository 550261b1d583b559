"""Replay captured group messages through the intake pipeline.

Reads one transport payload (JSON object) per line and writes one JSON
result per line. Orders are kept in memory for the duration of the run.

Usage:
    delivery-intake-replay messages.jsonl
    cat messages.jsonl | delivery-intake-replay
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable, Iterator
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from delivery_intake.domain import intake
from delivery_intake.domain.intake import IntakeResult, process_message
from delivery_intake.infra.order_store import InMemoryOrderStore, OrderStore
from delivery_intake.infra.settings import Settings, load_settings
from delivery_intake.observability.logging import get_logger
from delivery_intake.observability.redaction import safe_log_context
from delivery_intake.whatsapp.models import InvalidPayloadError, normalize

logger = get_logger(__name__)


def replay(
    lines: Iterable[str], *, store: OrderStore, settings: Settings
) -> Iterator[IntakeResult]:
    """Process payload lines in order. Blank and invalid lines are skipped."""
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
            if not isinstance(payload, dict):
                raise InvalidPayloadError("payload must be a JSON object")
            message = normalize(payload)
        except (json.JSONDecodeError, InvalidPayloadError) as exc:
            logger.warning(
                "invalid payload skipped",
                extra={
                    "extra_fields": safe_log_context(
                        line=lineno, error_type=type(exc).__name__
                    )
                },
            )
            continue
        yield process_message(message, store=store, settings=settings)


def _run(source: TextIO, out: TextIO, settings: Settings) -> None:
    store = InMemoryOrderStore()
    for result in replay(source, store=store, settings=settings):
        out.write(json.dumps(asdict(result), default=str, ensure_ascii=False) + "\n")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    settings = load_settings()
    for name in (intake.logger.name, logger.name):
        get_logger(name, level=settings.log_level)

    if not args:
        _run(sys.stdin, sys.stdout, settings)
        return 0

    path = Path(args[0])
    if not path.is_file():
        sys.stderr.write(f"Error: file not found: {path}\n")
        return 2

    with path.open(encoding="utf-8") as source:
        _run(source, sys.stdout, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
