"""Application-level DTOs for statement processing."""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import BinaryIO, Sequence
from uuid import UUID

from statement_ingest.domain.models import UNKNOWN_DATE, Movement, MovementCategory
from statement_ingest.domain.results import ParsingStatistics


@dataclass(slots=True, frozen=True)
class ProcessFileRequest:
    file_name: str
    content: bytes | BinaryIO
    size_bytes: int
    broker_key: str
    content_type: str = "application/octet-stream"


@dataclass(slots=True, frozen=True)
class ProcessingSummary:
    purchases: int = 0
    sales: int = 0
    deposits: int = 0
    withdrawals: int = 0
    dividends: int = 0
    repos: int = 0
    others: int = 0
    total_traded_amount: Decimal = Decimal("0")
    movements_by_ticker: dict[str, int] = field(default_factory=dict)
    amounts_by_currency: dict[str, Decimal] = field(default_factory=dict)
    date_from: date | None = None
    date_to: date | None = None

    @classmethod
    def from_movements(cls, movements: Sequence[Movement]) -> "ProcessingSummary":
        if not movements:
            return cls()
        counts = Counter(m.category for m in movements)
        by_currency: dict[str, Decimal] = defaultdict(Decimal)
        for m in movements:
            by_currency[m.currency.value] += abs(m.total_amount)
        dates = [m.concertation_date for m in movements if m.concertation_date != UNKNOWN_DATE]
        return cls(
            purchases=counts[MovementCategory.PURCHASE],
            sales=counts[MovementCategory.SALE],
            deposits=counts[MovementCategory.DEPOSIT],
            withdrawals=counts[MovementCategory.WITHDRAWAL],
            dividends=counts[MovementCategory.DIVIDEND],
            repos=counts[MovementCategory.REPO_LENDING] + counts[MovementCategory.REPO_SETTLEMENT],
            others=(
                counts[MovementCategory.OTHER]
                + counts[MovementCategory.FUND_SUBSCRIPTION]
                + counts[MovementCategory.FUND_REDEMPTION]
                + counts[MovementCategory.CREDIT]
            ),
            total_traded_amount=sum((abs(m.total_amount) for m in movements), Decimal("0")),
            movements_by_ticker=dict(Counter(m.ticker for m in movements if m.ticker)),
            amounts_by_currency=dict(by_currency),
            date_from=min(dates) if dates else None,
            date_to=max(dates) if dates else None,
        )


@dataclass(slots=True, frozen=True)
class ProcessFileResponse:
    data_point_id: UUID | None
    status: str
    file_name: str
    broker_key: str
    movement_count: int
    processing_time_ms: int
    processed_at: datetime
    errors: Sequence[str] = field(default_factory=tuple)
    warnings: Sequence[str] = field(default_factory=tuple)
    summary: ProcessingSummary | None = None
    statistics: ParsingStatistics | None = None
    movements: Sequence[Movement] = field(default_factory=tuple)

    @property
    def is_success(self) -> bool:
        return self.status == "Completed"
