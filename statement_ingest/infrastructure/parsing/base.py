"""Shared row loop for statement parsers built on the tabular extractor."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from threading import Event
from typing import BinaryIO, ClassVar, Iterable, Iterator, Sequence
from uuid import UUID

from statement_ingest.config import SETTINGS
from statement_ingest.domain.errors import FormatError
from statement_ingest.domain.models import Movement
from statement_ingest.domain.results import ParsingOutcome
from statement_ingest.infrastructure.parsing.headers import ExpectedHeader, validate_header
from statement_ingest.infrastructure.parsing.tabular import Row, extract_rows
from statement_ingest.logging_setup import get_logger

logger = get_logger(__name__)


class TabularStatementParser:
    """Base strategy: header gate, then one movement per data row.

    Subclasses declare the brokers, extensions and header layout they accept
    and implement :meth:`build_movement`.
    """

    brokers: ClassVar[tuple[str, ...]] = ()
    extensions: ClassVar[tuple[str, ...]] = ()
    expected_headers: ClassVar[tuple[ExpectedHeader, ...]] = ()
    header_window: ClassVar[int] = 1

    def __init__(self, min_columns: int | None = None) -> None:
        self._min_columns = SETTINGS.min_columns if min_columns is None else min_columns

    def can_handle(self, broker_key: str, file_name: str) -> bool:
        broker = (broker_key or "").strip().upper()
        extension = Path(file_name or "").suffix.lower()
        return broker in self.brokers and extension in self.extensions

    def supported_brokers(self) -> Iterable[str]:
        return self.brokers

    def supported_extensions(self) -> Iterable[str]:
        return self.extensions

    def build_movement(self, row: Row, data_point_id: UUID, broker_key: str) -> Movement | None:
        """Return the movement for ``row``, or ``None`` for a non-movement row.

        Raises ``ValueError`` when the row is a movement but an invalid one.
        """
        raise NotImplementedError

    def parse(
        self,
        source: BinaryIO | BytesIO | Path | bytes,
        file_name: str,
        broker_key: str,
        data_point_id: UUID,
        cancel_event: Event | None = None,
    ) -> ParsingOutcome:
        outcome = ParsingOutcome()
        broker = (broker_key or "").strip().upper()
        try:
            rows = extract_rows(source, file_name, self._min_columns)
            header = next(rows, None)
            if header is None:
                outcome.add_error("The file contains no data")
                return outcome
            if not validate_header(header, self.expected_headers, self.header_window):
                outcome.add_error(
                    f"The file does not look like a valid {broker} statement: headers not recognised"
                )
                return outcome
            if not self._process_rows(rows, outcome, data_point_id, broker, cancel_event):
                return outcome
        except FormatError as exc:
            outcome.add_error(f"Could not read '{file_name}': {exc}")
            return outcome
        except OSError as exc:
            outcome.add_error(f"I/O error while reading '{file_name}': {exc}")
            return outcome

        if not outcome.movements:
            outcome.add_error("No movements could be extracted from the file")

        stats = outcome.statistics
        logger.info(
            "Parsed %s for %s: %d movements, %d warnings, %d ignored rows",
            file_name,
            broker,
            len(outcome.movements),
            len(outcome.warnings),
            stats.ignored_rows,
        )
        return outcome

    def _process_rows(
        self,
        rows: Iterator[Row],
        outcome: ParsingOutcome,
        data_point_id: UUID,
        broker: str,
        cancel_event: Event | None,
    ) -> bool:
        stats = outcome.statistics
        # Row 1 is the header.
        for index, row in enumerate(rows, start=2):
            if cancel_event is not None and cancel_event.is_set():
                outcome.add_error(f"Parsing cancelled at row {index}")
                logger.info("Parsing cancelled at row %d", index)
                return False
            stats.total_rows += 1
            try:
                movement = self.build_movement(row, data_point_id, broker)
            except (ValueError, ArithmeticError) as exc:
                stats.error_rows += 1
                outcome.add_warning(f"Row {index}: {exc}")
                logger.debug("Skipping row %d: %s", index, exc)
                continue
            if movement is None:
                stats.ignored_rows += 1
                continue
            outcome.add_movement(movement)
        return True


def cells(row: Sequence[str], *positions: int) -> list[str]:
    return [(row[pos] or "").strip() if pos < len(row) else "" for pos in positions]
