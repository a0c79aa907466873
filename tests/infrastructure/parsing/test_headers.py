import pytest

from statement_ingest.infrastructure.parsing.headers import (
    ExpectedHeader,
    count_header_matches,
    validate_header,
)
from statement_ingest.infrastructure.parsing.iol import IOL_HEADERS

KEY_HEADERS = (
    ExpectedHeader("Nro. de Mov.", 0),
    ExpectedHeader("Tipo Mov.", 1),
    ExpectedHeader("Concert.", 2),
    ExpectedHeader("Precio", 3),
    ExpectedHeader("Monto", 4),
)


def pad(row, width=14):
    return list(row) + [""] * (width - len(row))


@pytest.mark.parametrize(
    "label, token",
    [
        ("Nro. de Mov.", "Nro"),
        ("Iva Com.", "Iva Com"),
        ("Est", "Est"),
        ("Observaciones", "Observaciones"),
        ("Hora: inicio", "Hora"),
    ],
)
def test_leading_token(label, token):
    assert ExpectedHeader(label, 0).token == token


def test_full_iol_header_is_accepted(iol_header):
    assert count_header_matches(iol_header, IOL_HEADERS) == len(IOL_HEADERS)
    assert validate_header(iol_header, IOL_HEADERS)


def test_key_header_scenario():
    row = pad(["Nro. de Mov.", "Tipo Mov.", "Concert.", "Precio", "Monto"])
    assert validate_header(row, KEY_HEADERS)

    three_of_five = pad(["Nro. de Mov.", "Tipo Mov.", "Concert.", "Fecha", "Saldo"])
    assert count_header_matches(three_of_five, KEY_HEADERS) == 3
    assert validate_header(three_of_five, KEY_HEADERS)


def test_matching_is_case_and_accent_insensitive(iol_header):
    assert validate_header([cell.upper() for cell in iol_header], IOL_HEADERS)


def test_shifted_columns_still_match(iol_header):
    shifted = [""] + iol_header
    assert validate_header(shifted, IOL_HEADERS)
    assert not validate_header(shifted, IOL_HEADERS, window=0)


def test_half_threshold_boundary(iol_header):
    seven = iol_header[:7] + [""] * 7
    six = iol_header[:6] + [""] * 8
    assert count_header_matches(seven, IOL_HEADERS) == 7
    assert validate_header(seven, IOL_HEADERS)
    assert count_header_matches(six, IOL_HEADERS) == 6
    assert not validate_header(six, IOL_HEADERS)


def test_foreign_layout_is_rejected():
    row = pad(["Fecha", "Descripción", "Débito", "Crédito", "Saldo"])
    assert not validate_header(row, IOL_HEADERS)


def test_short_row_does_not_fail():
    assert not validate_header(["Nro. de Mov."], IOL_HEADERS)
