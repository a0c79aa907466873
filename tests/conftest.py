from datetime import datetime
from html import escape
from io import BytesIO
from typing import Callable, Sequence
from uuid import uuid4
from zipfile import ZipFile

import pytest
from openpyxl import Workbook

IOL_HEADER = [
    "Nro. de Mov.",
    "Nro. de Boleto",
    "Tipo Mov.",
    "Concert.",
    "Liquid.",
    "Est",
    "Cant. titulos",
    "Precio",
    "Comis.",
    "Iva Com.",
    "Otros Imp.",
    "Monto",
    "Observaciones",
    "Tipo Cuenta",
]

# number, ticket, label, concert, liquid, status, qty, price, comm, iva, other, total, note, account
IOL_ROWS = [
    [1, "1001", "Compra (YPFD)", datetime(2024, 1, 5), datetime(2024, 1, 8), "Terminada",
     "10", "1500,50", "10,50", "2,21", "0,50", "-15018,21", "", "Cuenta Pesos"],
    [2, "", "Depósito", "03/01/2024", "03/01/2024", "Terminada",
     "", "", "", "", "", "100000,00", "Transferencia", "Cuenta Pesos"],
    [3, "1002", "Venta (GGAL)", "04/01/2024", "06/01/2024", "Terminada",
     5, 2000.5, "", "", "", 10002.5, "", "Cuenta Dólares"],
    [4, "1003", "Compra", "04/01/2024", "06/01/2024", "Terminada",
     "3", "100", "", "", "", "-300", "", "Cuenta Pesos"],
    ["", "", "Total", "", "", "", "", "", "", "", "", "95000", "", ""],
]


def build_workbook(rows: Sequence[Sequence[object]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(list(row))
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_html(rows: Sequence[Sequence[object]], header_tag: str = "th") -> bytes:
    parts = ["<html><head><meta charset='utf-8'></head><body><p>Movimientos</p><table>"]
    for index, row in enumerate(rows):
        tag = header_tag if index == 0 else "td"
        cells = "".join(f"<{tag}>{escape(str(value))}</{tag}>" for value in row)
        parts.append(f"<tr>{cells}</tr>")
    parts.append("</table></body></html>")
    return "".join(parts).encode("utf-8")


def truncate_sheet(data: bytes, member: str = "xl/worksheets/sheet1.xml") -> bytes:
    """Return ``data`` with the worksheet XML cut in half; the zip stays valid."""
    source = ZipFile(BytesIO(data))
    buffer = BytesIO()
    with ZipFile(buffer, "w") as target:
        for item in source.infolist():
            content = source.read(item.filename)
            if item.filename == member:
                content = content[: len(content) // 2]
            target.writestr(item, content)
    return buffer.getvalue()


@pytest.fixture
def workbook_factory() -> Callable[[Sequence[Sequence[object]]], bytes]:
    return build_workbook


@pytest.fixture
def html_factory() -> Callable[..., bytes]:
    return build_html


@pytest.fixture
def iol_header() -> list[str]:
    return list(IOL_HEADER)


@pytest.fixture
def iol_statement() -> bytes:
    return build_workbook([IOL_HEADER, *IOL_ROWS])


@pytest.fixture
def data_point_id():
    return uuid4()
