"""The data point aggregate: one statement file and the movements it yielded."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Sequence
from uuid import UUID, uuid4

from .errors import InvalidStateError
from .models import FileMetadata, Movement


class DataPointStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"


class DataPoint:
    """Ingestion unit owning the movements parsed from a single file.

    State only changes through the lifecycle methods:
    ``Pending -> Processing -> Completed | Failed``.
    """

    def __init__(
        self,
        file: FileMetadata,
        *,
        id: UUID | None = None,
        created_at: datetime | None = None,
    ) -> None:
        self._id = id or uuid4()
        self._created_at = created_at or datetime.now(timezone.utc)
        self._file = file
        self._status = DataPointStatus.PENDING
        self._error_message: str | None = None
        self._movements: list[Movement] = []

    @classmethod
    def create(cls, file: FileMetadata) -> "DataPoint":
        return cls(file)

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def file(self) -> FileMetadata:
        return self._file

    @property
    def status(self) -> DataPointStatus:
        return self._status

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def movements(self) -> Sequence[Movement]:
        return tuple(self._movements)

    def start_processing(self) -> None:
        if self._status is not DataPointStatus.PENDING:
            raise InvalidStateError(
                f"only a Pending data point can start processing (status is {self._status.value})"
            )
        self._status = DataPointStatus.PROCESSING

    def add_movements(self, movements: Iterable[Movement]) -> None:
        if self._status is not DataPointStatus.PROCESSING:
            raise InvalidStateError(
                f"movements can only be added while Processing (status is {self._status.value})"
            )
        self._movements.extend(movements)

    def mark_completed(self) -> None:
        if self._status is not DataPointStatus.PROCESSING:
            raise InvalidStateError(
                f"only a Processing data point can be completed (status is {self._status.value})"
            )
        if not self._movements:
            raise InvalidStateError("a data point cannot be completed without movements")
        self._status = DataPointStatus.COMPLETED

    def mark_failed(self, reason: str) -> None:
        if self._status is not DataPointStatus.PROCESSING:
            raise InvalidStateError(
                f"only a Processing data point can be marked failed (status is {self._status.value})"
            )
        self._status = DataPointStatus.FAILED
        self._error_message = reason or "unknown error"

    def is_terminal(self) -> bool:
        return self._status in (DataPointStatus.COMPLETED, DataPointStatus.FAILED)

    def __repr__(self) -> str:
        return (
            f"DataPoint(id={self._id}, file={self._file.name!r}, "
            f"status={self._status.value}, movements={len(self._movements)})"
        )
