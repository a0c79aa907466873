"""Tabular and textual renderings of parsed movements."""
from __future__ import annotations

import csv
import html
import io
from io import BytesIO
from typing import Sequence

import pandas as pd

from statement_ingest.application.dto import ProcessFileResponse
from statement_ingest.domain.models import UNKNOWN_DATE, Movement

COLUMNS = [
    "number",
    "category",
    "ticker",
    "concertation_date",
    "settlement_date",
    "quantity",
    "price",
    "commission",
    "commission_tax",
    "other_taxes",
    "total_amount",
    "net_amount",
    "currency",
    "cash_flow",
    "note",
]
MONEY_COLUMNS = [
    "price",
    "commission",
    "commission_tax",
    "other_taxes",
    "total_amount",
    "net_amount",
]


def _date_text(value) -> str:
    return "" if value == UNKNOWN_DATE else value.isoformat()


def movements_to_rows(movements: Sequence[Movement]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for m in movements:
        rows.append(
            {
                "number": str(m.number),
                "category": m.category.value,
                "ticker": m.ticker or "",
                "concertation_date": _date_text(m.concertation_date),
                "settlement_date": _date_text(m.settlement_date),
                "quantity": str(m.quantity),
                "price": str(m.price),
                "commission": str(m.commission),
                "commission_tax": str(m.commission_tax),
                "other_taxes": str(m.other_taxes),
                "total_amount": str(m.total_amount),
                "net_amount": str(m.net_amount),
                "currency": m.currency.value,
                "cash_flow": m.cash_flow.value,
                "note": m.note or "",
            }
        )
    return rows


def movements_to_dataframe(movements: Sequence[Movement]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                "number": m.number,
                "category": m.category.value,
                "ticker": m.ticker,
                "concertation_date": None if m.concertation_date == UNKNOWN_DATE else m.concertation_date,
                "settlement_date": None if m.settlement_date == UNKNOWN_DATE else m.settlement_date,
                "quantity": m.quantity,
                "price": m.price,
                "commission": m.commission,
                "commission_tax": m.commission_tax,
                "other_taxes": m.other_taxes,
                "total_amount": m.total_amount,
                "net_amount": m.net_amount,
                "currency": m.currency.value,
                "cash_flow": m.cash_flow.value,
                "note": m.note,
            }
            for m in movements
        ],
        columns=COLUMNS,
    )
    return frame


def render_csv(movements: Sequence[Movement]) -> bytes:
    rows = movements_to_rows(movements)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_xlsx(movements: Sequence[Movement], sheet_name: str = "movements") -> bytes:
    frame = movements_to_dataframe(movements)
    frame = frame.astype({col: float for col in MONEY_COLUMNS})
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
        if not frame.empty:
            workbook = writer.book
            worksheet = writer.sheets[sheet_name]
            red = workbook.add_format({"font_color": "#C00000"})
            amount_idx = frame.columns.get_loc("total_amount")
            # Negative amounts in red; row 0 is the header.
            worksheet.conditional_format(1, amount_idx, len(frame), amount_idx, {
                "type": "cell",
                "criteria": "<",
                "value": 0,
                "format": red,
            })
    buf.seek(0)
    return buf.getvalue()


def render_html(movements: Sequence[Movement]) -> str:
    rows = movements_to_rows(movements)
    if not rows:
        return "<p>No movements extracted.</p>"
    header = "".join(f"<th>{col}</th>" for col in COLUMNS)
    body = "".join(
        "<tr>" + "".join(f"<td>{html.escape(row[col])}</td>" for col in COLUMNS) + "</tr>"
        for row in rows
    )
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body}</tbody></table>"


def response_lines(response: ProcessFileResponse) -> list[str]:
    lines = [
        "Processing Summary",
        "==================",
        f"File: {response.file_name}",
        f"Broker: {response.broker_key}",
        f"Status: {response.status}",
        f"Movements: {response.movement_count}",
        f"Elapsed: {response.processing_time_ms} ms",
    ]
    stats = response.statistics
    if stats is not None:
        lines.append(
            f"Rows: {stats.total_rows} (ok {stats.successful_rows}, "
            f"errors {stats.error_rows}, ignored {stats.ignored_rows})"
        )
        for category, count in stats.movements_by_category.items():
            lines.append(f"  {category}: {count}")
        if stats.earliest_date and stats.latest_date:
            lines.append(f"Dates: {stats.earliest_date} .. {stats.latest_date}")
    if response.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"- {warning}" for warning in response.warnings)
    if response.errors:
        lines.append("")
        lines.append("Errors:")
        lines.extend(f"- {error}" for error in response.errors)
    return lines
