"""Filesystem repository storing one JSON snapshot per data point."""
from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any
from uuid import UUID

from statement_ingest.domain.data_point import DataPoint
from statement_ingest.domain.models import UNKNOWN_DATE, Movement


def _date_or_none(value: date) -> str | None:
    if value == UNKNOWN_DATE:
        return None
    return value.isoformat()


def movement_to_dict(movement: Movement) -> dict[str, Any]:
    return {
        "id": str(movement.id),
        "data_point_id": str(movement.data_point_id),
        "number": movement.number,
        "broker": movement.broker,
        "ticker": movement.ticker,
        "category": movement.category.value,
        "concertation_date": _date_or_none(movement.concertation_date),
        "settlement_date": _date_or_none(movement.settlement_date),
        "quantity": movement.quantity,
        "price": str(movement.price),
        "commission": str(movement.commission),
        "commission_tax": str(movement.commission_tax),
        "other_taxes": str(movement.other_taxes),
        "total_amount": str(movement.total_amount),
        "currency": movement.currency.value,
        "note": movement.note,
        "created_at": movement.created_at.isoformat(),
    }


def data_point_to_dict(data_point: DataPoint) -> dict[str, Any]:
    return {
        "id": str(data_point.id),
        "created_at": data_point.created_at.isoformat(),
        "file": {
            "name": data_point.file.name,
            "size_bytes": data_point.file.size_bytes,
            "content_type": data_point.file.content_type,
        },
        "status": data_point.status.value,
        "error_message": data_point.error_message,
        "movements": [movement_to_dict(m) for m in data_point.movements],
    }


class FileSystemDataPointRepository:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def _path_for(self, data_point_id: UUID) -> Path:
        return self._root / f"{data_point_id}.json"

    def add(self, data_point: DataPoint) -> None:
        path = self._path_for(data_point.id)
        if path.exists():
            raise KeyError(f"Data point {data_point.id} already stored")
        self._write(data_point)

    def update(self, data_point: DataPoint) -> None:
        if not self._path_for(data_point.id).exists():
            raise KeyError(f"Data point {data_point.id} not found")
        self._write(data_point)

    def load(self, data_point_id: UUID) -> dict[str, Any] | None:
        path = self._path_for(data_point_id)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def delete(self, data_point_id: UUID) -> bool:
        path = self._path_for(data_point_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def exists_with_same_file(self, file_name: str, size_bytes: int) -> bool:
        if not self._root.is_dir():
            return False
        for path in self._root.glob("*.json"):
            try:
                snapshot = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                continue
            file = snapshot.get("file") or {}
            if file.get("name") == file_name and file.get("size_bytes") == size_bytes:
                return True
        return False

    def _write(self, data_point: DataPoint) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        self._path_for(data_point.id).write_text(
            json.dumps(data_point_to_dict(data_point), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
