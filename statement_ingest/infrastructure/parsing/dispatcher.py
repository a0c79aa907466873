"""Broker dispatcher selecting the statement parser for an upload."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from threading import Event
from typing import BinaryIO, Iterable
from uuid import UUID

from statement_ingest.domain.repositories import StatementParser
from statement_ingest.domain.results import ParsingOutcome
from statement_ingest.infrastructure.parsing.iol import IolStatementParser
from statement_ingest.logging_setup import get_logger

logger = get_logger(__name__)


class BrokerDispatcher:
    """Routes a file to the first parser whose capability check accepts it.

    The parser set is fixed at construction, so one dispatcher can serve
    concurrent parses.
    """

    def __init__(self, parsers: Iterable[StatementParser]) -> None:
        self._parsers: tuple[StatementParser, ...] = tuple(parsers)

    @property
    def parsers(self) -> tuple[StatementParser, ...]:
        return self._parsers

    def find_parser(self, broker_key: str, file_name: str) -> StatementParser | None:
        for parser in self._parsers:
            if parser.can_handle(broker_key, file_name):
                return parser
        return None

    def can_handle(self, broker_key: str, file_name: str) -> bool:
        return self.find_parser(broker_key, file_name) is not None

    def supported_brokers(self) -> frozenset[str]:
        return frozenset(b for parser in self._parsers for b in parser.supported_brokers())

    def supported_extensions(self) -> frozenset[str]:
        return frozenset(e for parser in self._parsers for e in parser.supported_extensions())

    def parse(
        self,
        source: BinaryIO | BytesIO | Path | bytes,
        file_name: str,
        broker_key: str,
        data_point_id: UUID,
        cancel_event: Event | None = None,
    ) -> ParsingOutcome:
        parser = self.find_parser(broker_key, file_name)
        if parser is None:
            logger.warning("No parser for broker %r and file %r", broker_key, file_name)
            return ParsingOutcome.failure(
                f"No parser found for broker '{broker_key}' and file '{file_name}'"
            )
        logger.debug("Dispatching %s to %s", file_name, type(parser).__name__)
        return parser.parse(source, file_name, broker_key, data_point_id, cancel_event)


def default_dispatcher() -> BrokerDispatcher:
    return BrokerDispatcher([IolStatementParser()])
