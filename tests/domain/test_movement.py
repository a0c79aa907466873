from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from statement_ingest.domain.errors import MovementValidationError
from statement_ingest.domain.models import CashFlow, Currency, Movement, MovementCategory


def make_movement(category: MovementCategory = MovementCategory.PURCHASE, **overrides) -> Movement:
    values = dict(
        data_point_id=uuid4(),
        number=1,
        broker="IOL",
        category=category,
        ticker="ypfd",
        concertation_date=date(2024, 1, 5),
        settlement_date=date(2024, 1, 8),
        quantity=10,
        price=Decimal("1500.50"),
        commission=Decimal("10.50"),
        commission_tax=Decimal("2.21"),
        other_taxes=Decimal("0.50"),
        total_amount=Decimal("-15018.21"),
        currency=Currency.ARS,
    )
    values.update(overrides)
    return Movement.create(**values)


def test_create_normalizes_ticker_and_note():
    movement = make_movement(ticker="  ypfd ", note="  ")
    assert movement.ticker == "YPFD"
    assert movement.note is None
    assert isinstance(movement.id, UUID)
    assert movement.created_at.tzinfo is not None


@pytest.mark.parametrize("category", [MovementCategory.PURCHASE, MovementCategory.SALE])
def test_trades_require_ticker(category):
    with pytest.raises(MovementValidationError, match="ticker"):
        make_movement(category, ticker=None)
    with pytest.raises(MovementValidationError, match="ticker"):
        make_movement(category, ticker="   ")


@pytest.mark.parametrize("category", [MovementCategory.PURCHASE, MovementCategory.SALE])
def test_trades_require_positive_quantity(category):
    with pytest.raises(MovementValidationError, match="quantity"):
        make_movement(category, quantity=0)


def test_trades_reject_negative_price_but_accept_zero():
    with pytest.raises(MovementValidationError, match="price"):
        make_movement(price=Decimal("-1"))
    assert make_movement(price=Decimal("0")).price == Decimal("0")


@pytest.mark.parametrize("category", [MovementCategory.REPO_LENDING, MovementCategory.REPO_SETTLEMENT])
def test_repos_require_positive_quantity(category):
    with pytest.raises(MovementValidationError):
        make_movement(category, ticker=None, quantity=0)
    assert make_movement(category, ticker=None, quantity=1).quantity == 1


@pytest.mark.parametrize(
    "category",
    [MovementCategory.DEPOSIT, MovementCategory.WITHDRAWAL, MovementCategory.DIVIDEND],
)
def test_cash_movements_have_no_ticker_requirement(category):
    movement = make_movement(category, ticker=None, quantity=0, price=Decimal("0"))
    assert movement.ticker is None


def test_common_invariants():
    with pytest.raises(MovementValidationError, match="broker"):
        make_movement(broker=" ")
    with pytest.raises(MovementValidationError, match="number"):
        make_movement(number=0)
    with pytest.raises(MovementValidationError, match="data point"):
        make_movement(data_point_id=UUID(int=0))


def test_movement_error_is_a_value_error():
    with pytest.raises(ValueError):
        make_movement(number=-3)


def test_derived_amounts():
    movement = make_movement()
    assert movement.total_tax_burden == Decimal("13.21")
    assert movement.net_amount == Decimal("-15031.42")


@pytest.mark.parametrize(
    "category, expected",
    [
        (MovementCategory.SALE, CashFlow.INFLOW),
        (MovementCategory.DEPOSIT, CashFlow.INFLOW),
        (MovementCategory.DIVIDEND, CashFlow.INFLOW),
        (MovementCategory.REPO_SETTLEMENT, CashFlow.INFLOW),
        (MovementCategory.FUND_REDEMPTION, CashFlow.INFLOW),
        (MovementCategory.CREDIT, CashFlow.INFLOW),
        (MovementCategory.PURCHASE, CashFlow.OUTFLOW),
        (MovementCategory.WITHDRAWAL, CashFlow.OUTFLOW),
        (MovementCategory.REPO_LENDING, CashFlow.OUTFLOW),
        (MovementCategory.FUND_SUBSCRIPTION, CashFlow.OUTFLOW),
        (MovementCategory.OTHER, CashFlow.NEUTRAL),
    ],
)
def test_cash_flow_direction(category, expected):
    movement = make_movement(category)
    assert movement.cash_flow is expected
    assert movement.is_inflow() == (expected is CashFlow.INFLOW)
    assert movement.is_outflow() == (expected is CashFlow.OUTFLOW)


def test_with_note_appends_and_keeps_identity():
    movement = make_movement(note="first")
    updated = movement.with_note("second")
    assert updated.note == "first | second"
    assert updated.id == movement.id
    assert movement.note == "first"
    assert movement.with_note("  ") is movement
    assert make_movement().with_note("only").note == "only"


def test_movement_is_immutable():
    movement = make_movement()
    with pytest.raises(FrozenInstanceError):
        movement.quantity = 5
