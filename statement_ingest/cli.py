"""Command-line entrypoint for statement ingestion."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from statement_ingest.application.dto import ProcessFileRequest
from statement_ingest.application.use_cases import (
    ProcessStatementUseCase,
    StatementProcessingContext,
)
from statement_ingest.infrastructure.parsing.dispatcher import default_dispatcher
from statement_ingest.infrastructure.repositories.file_repository import FileSystemDataPointRepository
from statement_ingest.infrastructure.repositories.memory_repository import InMemoryDataPointRepository
from statement_ingest.logging_setup import configure_logging
from statement_ingest.presentation.report import render_csv, render_xlsx, response_lines


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract movements from a broker account statement")
    parser.add_argument("file", type=str, help="Path to the statement file (.xlsx, .xls, .html)")
    parser.add_argument("--broker", required=True, help="Broker key, e.g. IOL")
    parser.add_argument("--csv", type=str, help="Write the extracted movements to this CSV file")
    parser.add_argument("--xlsx", type=str, help="Write the extracted movements to this Excel file")
    parser.add_argument("--store", type=str, help="Persist data points as JSON under this directory")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default INFO)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.log_level)

    path = Path(args.file)
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 2
    content = path.read_bytes()

    repository = (
        FileSystemDataPointRepository(Path(args.store)) if args.store else InMemoryDataPointRepository()
    )
    context = StatementProcessingContext(repository=repository, dispatcher=default_dispatcher())
    response = ProcessStatementUseCase(context).execute(
        ProcessFileRequest(
            file_name=path.name,
            content=content,
            size_bytes=len(content),
            broker_key=args.broker,
        )
    )

    for line in response_lines(response):
        print(line)

    if args.csv and response.movements:
        Path(args.csv).write_bytes(render_csv(response.movements))
        print(f"\nMovements written to {args.csv}")
    if args.xlsx and response.movements:
        Path(args.xlsx).write_bytes(render_xlsx(response.movements))
        print(f"Movements written to {args.xlsx}")

    return 0 if response.is_success else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
