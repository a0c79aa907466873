"""Domain models for the statement ingestion pipeline.

These dataclasses capture the canonical schema for normalized movements
extracted from broker account statements.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from .errors import MovementValidationError

# Sentinel for dates that could not be parsed.
UNKNOWN_DATE = date.min


class MovementCategory(str, Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DIVIDEND = "dividend"
    REPO_LENDING = "repo_lending"
    REPO_SETTLEMENT = "repo_settlement"
    FUND_SUBSCRIPTION = "fund_subscription"
    FUND_REDEMPTION = "fund_redemption"
    CREDIT = "credit"
    OTHER = "other"


class Currency(str, Enum):
    ARS = "ARS"
    USD = "USD"
    EUR = "EUR"
    OTHER = "OTHER"


class CashFlow(str, Enum):
    INFLOW = "inflow"
    OUTFLOW = "outflow"
    NEUTRAL = "neutral"


INFLOW_CATEGORIES = frozenset(
    {
        MovementCategory.SALE,
        MovementCategory.DEPOSIT,
        MovementCategory.DIVIDEND,
        MovementCategory.REPO_SETTLEMENT,
        MovementCategory.FUND_REDEMPTION,
        MovementCategory.CREDIT,
    }
)
OUTFLOW_CATEGORIES = frozenset(
    {
        MovementCategory.PURCHASE,
        MovementCategory.WITHDRAWAL,
        MovementCategory.REPO_LENDING,
        MovementCategory.FUND_SUBSCRIPTION,
    }
)
TRADE_CATEGORIES = frozenset({MovementCategory.PURCHASE, MovementCategory.SALE})
REPO_CATEGORIES = frozenset({MovementCategory.REPO_LENDING, MovementCategory.REPO_SETTLEMENT})

# Categories that carry an instrument; the others are pure cash movements.
INSTRUMENT_CATEGORIES = frozenset(
    {
        MovementCategory.PURCHASE,
        MovementCategory.SALE,
        MovementCategory.DIVIDEND,
        MovementCategory.FUND_SUBSCRIPTION,
        MovementCategory.FUND_REDEMPTION,
        MovementCategory.OTHER,
    }
)


@dataclass(frozen=True)
class FileMetadata:
    """Describes the uploaded statement file."""

    name: str
    size_bytes: int
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class Movement:
    """One validated financial event extracted from a statement row.

    Instances are only ever valid: the invariants for the movement category
    are checked on construction and a violation raises
    :class:`MovementValidationError`.
    """

    data_point_id: UUID
    number: int
    broker: str
    category: MovementCategory
    concertation_date: date
    settlement_date: date
    quantity: int
    price: Decimal
    commission: Decimal
    total_amount: Decimal
    currency: Currency
    ticker: str | None = None
    commission_tax: Decimal = Decimal("0")
    other_taxes: Decimal = Decimal("0")
    note: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.data_point_id is None or self.data_point_id.int == 0:
            raise MovementValidationError("data point id must not be empty")
        if not self.broker or not self.broker.strip():
            raise MovementValidationError("broker must not be empty")
        if self.number <= 0:
            raise MovementValidationError(f"movement number must be positive, got {self.number}")

        if self.category in TRADE_CATEGORIES:
            if not self.ticker or not self.ticker.strip():
                raise MovementValidationError(f"{self.category.value} requires a ticker")
            if self.quantity <= 0:
                raise MovementValidationError(
                    f"{self.category.value} requires a positive quantity, got {self.quantity}"
                )
            if self.price < 0:
                raise MovementValidationError(f"price must not be negative, got {self.price}")
        elif self.category in REPO_CATEGORIES:
            if self.quantity <= 0:
                raise MovementValidationError(
                    f"{self.category.value} requires a positive quantity, got {self.quantity}"
                )

    @classmethod
    def create(
        cls,
        *,
        data_point_id: UUID,
        number: int,
        broker: str,
        category: MovementCategory,
        concertation_date: date,
        settlement_date: date,
        quantity: int,
        price: Decimal,
        commission: Decimal,
        total_amount: Decimal,
        currency: Currency,
        ticker: str | None = None,
        commission_tax: Decimal = Decimal("0"),
        other_taxes: Decimal = Decimal("0"),
        note: str | None = None,
    ) -> "Movement":
        ticker = ticker.strip().upper() if ticker else None
        note = note.strip() if note else None
        return cls(
            data_point_id=data_point_id,
            number=number,
            broker=broker,
            category=category,
            concertation_date=concertation_date,
            settlement_date=settlement_date,
            quantity=quantity,
            price=price,
            commission=commission,
            total_amount=total_amount,
            currency=currency,
            ticker=ticker or None,
            commission_tax=commission_tax,
            other_taxes=other_taxes,
            note=note or None,
        )

    @property
    def net_amount(self) -> Decimal:
        return self.total_amount - self.commission - self.commission_tax - self.other_taxes

    @property
    def total_tax_burden(self) -> Decimal:
        return self.commission + self.commission_tax + self.other_taxes

    @property
    def cash_flow(self) -> CashFlow:
        if self.category in INFLOW_CATEGORIES:
            return CashFlow.INFLOW
        if self.category in OUTFLOW_CATEGORIES:
            return CashFlow.OUTFLOW
        return CashFlow.NEUTRAL

    def is_inflow(self) -> bool:
        return self.cash_flow is CashFlow.INFLOW

    def is_outflow(self) -> bool:
        return self.cash_flow is CashFlow.OUTFLOW

    def with_note(self, text: str) -> "Movement":
        """Return a copy with ``text`` appended to the note."""
        if not text or not text.strip():
            return self
        text = text.strip()
        note = f"{self.note} | {text}" if self.note else text
        return replace(self, note=note)
