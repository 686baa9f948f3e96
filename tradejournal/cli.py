"""CLI tool for journal operations.

Usage:
    python -m tradejournal.cli stats <file.json> [--strict]
    python -m tradejournal.cli import <file.json>
    python -m tradejournal.cli serve
"""

import json
import logging
import sys
from pathlib import Path

from sqlmodel import Session

from tradejournal.config import settings
from tradejournal.engine import MalformedTradeError, aggregate
from tradejournal.utils.logging import setup_logging

logger = logging.getLogger(__name__)

USAGE = """Usage: python -m tradejournal.cli <command> [args]
Commands:
  stats <file.json> [--strict]   print portfolio stats for exported trades
  import <file.json>             store trades through the journal write path
  serve                          run the API server"""


def load_records(path: str) -> list:
    """Read a JSON export: a list of records or an object with a "trades" list."""
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        raise ValueError("expected a JSON list or an object with a 'trades' list")
    return data


def stats(path: str, strict: bool = False):
    from tradejournal.services.journal import prepare_trades

    try:
        records = load_records(path)
        batch = prepare_trades(records, on_error="reject" if strict else "skip")
    except (OSError, ValueError) as e:
        # MalformedTradeError is a ValueError
        label = "Malformed trade" if isinstance(e, MalformedTradeError) else "Could not read trades"
        print(f"{label}: {e}")
        sys.exit(1)

    result = aggregate(batch.trades, batch.stop_losses)
    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    if batch.rejected:
        print(f"Skipped {len(batch.rejected)} malformed record(s).", file=sys.stderr)


def import_trades(path: str):
    from tradejournal.database import engine, create_db_and_tables
    from tradejournal.services.journal import import_record

    try:
        records = load_records(path)
    except (OSError, ValueError) as e:
        print(f"Could not read trades: {e}")
        sys.exit(1)

    create_db_and_tables()
    stored = 0
    with Session(engine) as session:
        for index, record in enumerate(records):
            try:
                import_record(session, record)
                stored += 1
            except ValueError as e:
                # MalformedTradeError and pydantic ValidationError included
                logger.warning(f"Skipping record #{index}: {e}")

    print(f"Imported {stored} of {len(records)} trades.")


def serve():
    import uvicorn

    uvicorn.run("tradejournal.main:app", host=settings.host, port=settings.port)


def main():
    setup_logging()
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command, args = sys.argv[1], sys.argv[2:]
    if command == "stats" and args:
        stats(args[0], strict="--strict" in args[1:])
    elif command == "import" and args:
        import_trades(args[0])
    elif command == "serve":
        serve()
    else:
        print(f"Unknown command: {' '.join(sys.argv[1:])}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
