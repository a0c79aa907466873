import json
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from statement_ingest.domain.data_point import DataPoint, DataPointStatus
from statement_ingest.domain.models import UNKNOWN_DATE, Currency, FileMetadata, Movement, MovementCategory
from statement_ingest.infrastructure.repositories.file_repository import FileSystemDataPointRepository
from statement_ingest.infrastructure.repositories.memory_repository import InMemoryDataPointRepository


def completed_data_point(name="movimientos.xlsx", size=2048, concertation=date(2024, 1, 5)):
    data_point = DataPoint.create(FileMetadata(name, size, "application/vnd.ms-excel"))
    data_point.start_processing()
    data_point.add_movements(
        [
            Movement.create(
                data_point_id=data_point.id,
                number=1,
                broker="IOL",
                category=MovementCategory.PURCHASE,
                ticker="ypfd",
                concertation_date=concertation,
                settlement_date=date(2024, 1, 8),
                quantity=10,
                price=Decimal("1500.50"),
                commission=Decimal("10.50"),
                total_amount=Decimal("-15018.21"),
                currency=Currency.ARS,
            )
        ]
    )
    data_point.mark_completed()
    return data_point


@pytest.fixture(params=["memory", "filesystem"])
def repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryDataPointRepository()
    return FileSystemDataPointRepository(tmp_path / "store")


def test_duplicate_detection_by_name_and_size(repository):
    repository.add(completed_data_point())

    assert repository.exists_with_same_file("movimientos.xlsx", 2048)
    assert not repository.exists_with_same_file("movimientos.xlsx", 2049)
    assert not repository.exists_with_same_file("otro.xlsx", 2048)


def test_add_twice_and_update_missing_raise(repository):
    data_point = completed_data_point()
    repository.add(data_point)
    with pytest.raises(KeyError):
        repository.add(data_point)
    with pytest.raises(KeyError):
        repository.update(completed_data_point(name="nuevo.xlsx"))


def test_empty_repository_has_no_duplicates(repository):
    assert not repository.exists_with_same_file("movimientos.xlsx", 2048)


def test_memory_repository_queries():
    repository = InMemoryDataPointRepository()
    done = completed_data_point()
    pending = DataPoint.create(FileMetadata("b.xlsx", 10, "application/octet-stream"))
    repository.add(done)
    repository.add(pending)

    assert repository.get(done.id) is done
    assert repository.list_by_status(DataPointStatus.PENDING) == [pending]

    stats = repository.statistics()
    assert stats.total == 2
    assert stats.by_status["Completed"] == 1
    assert stats.by_status["Failed"] == 0
    assert stats.total_movements == 1
    assert stats.success_rate == 50.0

    assert repository.delete(pending.id)
    assert not repository.delete(pending.id)
    assert repository.get(pending.id) is None


def test_filesystem_snapshot(tmp_path):
    repository = FileSystemDataPointRepository(tmp_path)
    data_point = completed_data_point(concertation=UNKNOWN_DATE)
    repository.add(data_point)

    snapshot = repository.load(data_point.id)
    assert snapshot["status"] == "Completed"
    assert snapshot["file"] == {
        "name": "movimientos.xlsx",
        "size_bytes": 2048,
        "content_type": "application/vnd.ms-excel",
    }
    (movement,) = snapshot["movements"]
    assert movement["ticker"] == "YPFD"
    assert movement["category"] == "purchase"
    assert movement["concertation_date"] is None
    assert movement["settlement_date"] == "2024-01-08"
    assert movement["price"] == "1500.50"
    assert movement["total_amount"] == "-15018.21"

    assert json.loads((tmp_path / f"{data_point.id}.json").read_text(encoding="utf-8")) == snapshot


def test_filesystem_update_and_delete(tmp_path):
    repository = FileSystemDataPointRepository(tmp_path)
    data_point = DataPoint.create(FileMetadata("a.xlsx", 5, "application/octet-stream"))
    repository.add(data_point)
    data_point.start_processing()
    data_point.mark_failed("headers not recognised")
    repository.update(data_point)

    snapshot = repository.load(data_point.id)
    assert snapshot["status"] == "Failed"
    assert snapshot["error_message"] == "headers not recognised"

    assert repository.delete(data_point.id)
    assert repository.load(data_point.id) is None
    assert not repository.delete(uuid4())


def test_filesystem_ignores_unreadable_snapshots(tmp_path):
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    repository = FileSystemDataPointRepository(tmp_path)
    assert not repository.exists_with_same_file("movimientos.xlsx", 2048)
