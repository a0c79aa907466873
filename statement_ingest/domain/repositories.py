"""Repository and parser interfaces anchoring the domain layer."""
from __future__ import annotations

from threading import Event
from typing import BinaryIO, Iterable, Protocol
from uuid import UUID

from .data_point import DataPoint
from .results import ParsingOutcome


class DataPointRepository(Protocol):
    """Persistence gateway for data points and their movements."""

    def add(self, data_point: DataPoint) -> None:
        ...

    def update(self, data_point: DataPoint) -> None:
        ...

    def exists_with_same_file(self, file_name: str, size_bytes: int) -> bool:
        ...


class StatementParser(Protocol):
    """Parses the statement format of one or more brokers."""

    def can_handle(self, broker_key: str, file_name: str) -> bool:
        ...

    def supported_brokers(self) -> Iterable[str]:
        ...

    def supported_extensions(self) -> Iterable[str]:
        ...

    def parse(
        self,
        source: BinaryIO | bytes,
        file_name: str,
        broker_key: str,
        data_point_id: UUID,
        cancel_event: Event | None = None,
    ) -> ParsingOutcome:
        ...
