"""InvertirOnline (IOL) account statement parser."""
from __future__ import annotations

from uuid import UUID

from statement_ingest.domain.models import Movement
from statement_ingest.infrastructure.parsing.base import TabularStatementParser, cells
from statement_ingest.infrastructure.parsing.fields import (
    classify_currency,
    classify_movement,
    parse_date,
    parse_decimal,
    parse_int,
)
from statement_ingest.infrastructure.parsing.headers import ExpectedHeader
from statement_ingest.infrastructure.parsing.tabular import Row

MOVEMENT_NUMBER = 0
TICKET_NUMBER = 1
TYPE_LABEL = 2
CONCERTATION_DATE = 3
SETTLEMENT_DATE = 4
STATUS = 5
QUANTITY = 6
PRICE = 7
COMMISSION = 8
COMMISSION_TAX = 9
OTHER_TAXES = 10
TOTAL_AMOUNT = 11
NOTE = 12
ACCOUNT_TYPE = 13

IOL_HEADERS = (
    ExpectedHeader("Nro. de Mov.", MOVEMENT_NUMBER),
    ExpectedHeader("Nro. de Boleto", TICKET_NUMBER),
    ExpectedHeader("Tipo Mov.", TYPE_LABEL),
    ExpectedHeader("Concert.", CONCERTATION_DATE),
    ExpectedHeader("Liquid.", SETTLEMENT_DATE),
    ExpectedHeader("Est", STATUS),
    ExpectedHeader("Cant. titulos", QUANTITY),
    ExpectedHeader("Precio", PRICE),
    ExpectedHeader("Comis.", COMMISSION),
    ExpectedHeader("Iva Com.", COMMISSION_TAX),
    ExpectedHeader("Otros Imp.", OTHER_TAXES),
    ExpectedHeader("Monto", TOTAL_AMOUNT),
    ExpectedHeader("Observaciones", NOTE),
    ExpectedHeader("Tipo Cuenta", ACCOUNT_TYPE),
)


class IolStatementParser(TabularStatementParser):
    brokers = ("IOL",)
    extensions = (".xlsx", ".xls", ".html", ".htm")
    expected_headers = IOL_HEADERS

    def build_movement(self, row: Row, data_point_id: UUID, broker_key: str) -> Movement | None:
        number = parse_int(row[MOVEMENT_NUMBER])
        # Totals and footer rows carry no movement number.
        if number <= 0:
            return None

        label, note, account_type = cells(row, TYPE_LABEL, NOTE, ACCOUNT_TYPE)
        category, ticker = classify_movement(label)

        # Quantities and charges are stored as magnitudes; the category
        # carries the direction.
        return Movement.create(
            data_point_id=data_point_id,
            number=number,
            broker=broker_key,
            category=category,
            ticker=ticker,
            concertation_date=parse_date(row[CONCERTATION_DATE]),
            settlement_date=parse_date(row[SETTLEMENT_DATE]),
            quantity=abs(parse_int(row[QUANTITY])),
            price=parse_decimal(row[PRICE]),
            commission=abs(parse_decimal(row[COMMISSION])),
            commission_tax=abs(parse_decimal(row[COMMISSION_TAX])),
            other_taxes=abs(parse_decimal(row[OTHER_TAXES])),
            total_amount=parse_decimal(row[TOTAL_AMOUNT]),
            currency=classify_currency(account_type),
            note=note,
        )
