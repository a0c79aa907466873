"""Domain-level results for statement parsing."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from .models import UNKNOWN_DATE, Movement


@dataclass
class ParsingStatistics:
    total_rows: int = 0
    successful_rows: int = 0
    error_rows: int = 0
    ignored_rows: int = 0
    movements_by_category: dict[str, int] = field(default_factory=dict)
    earliest_date: date | None = None
    latest_date: date | None = None
    total_absolute_amount: Decimal = Decimal("0")

    @property
    def success_rate(self) -> float:
        if not self.total_rows:
            return 0.0
        return self.successful_rows / self.total_rows * 100

    def record(self, movement: Movement) -> None:
        self.successful_rows += 1
        key = movement.category.value
        self.movements_by_category[key] = self.movements_by_category.get(key, 0) + 1
        self.total_absolute_amount += abs(movement.total_amount)

        traded_on = movement.concertation_date
        if traded_on == UNKNOWN_DATE:
            return
        if self.earliest_date is None or traded_on < self.earliest_date:
            self.earliest_date = traded_on
        if self.latest_date is None or traded_on > self.latest_date:
            self.latest_date = traded_on


@dataclass
class ParsingOutcome:
    """Movements produced from one file plus fatal errors and row warnings."""

    movements: list[Movement] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    statistics: ParsingStatistics = field(default_factory=ParsingStatistics)

    @classmethod
    def failure(cls, message: str) -> "ParsingOutcome":
        outcome = cls()
        outcome.add_error(message)
        return outcome

    def add_movement(self, movement: Movement) -> None:
        self.movements.append(movement)
        self.statistics.record(movement)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def is_success(self) -> bool:
        return not self.errors

    def error_message(self) -> str:
        return "; ".join(self.errors)
