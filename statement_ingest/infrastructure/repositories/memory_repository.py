"""In-memory data point repository."""
from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Sequence
from uuid import UUID

from statement_ingest.domain.data_point import DataPoint, DataPointStatus


@dataclass(frozen=True)
class DataPointStatistics:
    total: int
    by_status: dict[str, int] = field(default_factory=dict)
    total_movements: int = 0

    @property
    def success_rate(self) -> float:
        if not self.total:
            return 0.0
        return self.by_status.get(DataPointStatus.COMPLETED.value, 0) / self.total * 100


class InMemoryDataPointRepository:
    def __init__(self) -> None:
        self._items: dict[UUID, DataPoint] = {}
        self._lock = Lock()

    def add(self, data_point: DataPoint) -> None:
        with self._lock:
            if data_point.id in self._items:
                raise KeyError(f"Data point {data_point.id} already stored")
            self._items[data_point.id] = data_point

    def update(self, data_point: DataPoint) -> None:
        with self._lock:
            if data_point.id not in self._items:
                raise KeyError(f"Data point {data_point.id} not found")
            self._items[data_point.id] = data_point

    def get(self, data_point_id: UUID) -> DataPoint | None:
        return self._items.get(data_point_id)

    def delete(self, data_point_id: UUID) -> bool:
        with self._lock:
            return self._items.pop(data_point_id, None) is not None

    def list_by_status(self, status: DataPointStatus) -> Sequence[DataPoint]:
        return [dp for dp in self._items.values() if dp.status is status]

    def exists_with_same_file(self, file_name: str, size_bytes: int) -> bool:
        return any(
            dp.file.name == file_name and dp.file.size_bytes == size_bytes
            for dp in self._items.values()
        )

    def statistics(self) -> DataPointStatistics:
        items = list(self._items.values())
        by_status = {status.value: 0 for status in DataPointStatus}
        for dp in items:
            by_status[dp.status.value] += 1
        return DataPointStatistics(
            total=len(items),
            by_status=by_status,
            total_movements=sum(len(dp.movements) for dp in items),
        )
