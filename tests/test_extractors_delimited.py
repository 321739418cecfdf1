from __future__ import annotations

import pytest

from statement_analysis.errors import UnsupportedFileType
from statement_analysis.extractors import (
    DelimitedExtractor,
    DocumentExtractor,
    SpreadsheetExtractor,
    extractor_for,
    resolve_file_family,
)
from statement_analysis.extractors.fields import find_header_row, resolve_columns
from statement_analysis.models import TransactionType
from tests.helpers.stubs import csv_bytes


@pytest.mark.parametrize(
    ("declared", "family"),
    [
        ("csv", "delimited"),
        (".CSV", "delimited"),
        ("statement.csv", "delimited"),
        ("text/csv; charset=utf-8", "delimited"),
        ("xlsx", "spreadsheet"),
        ("march.xls", "spreadsheet"),
        ("application/vnd.ms-excel", "spreadsheet"),
        ("PDF", "document"),
        ("application/pdf", "document"),
    ],
)
def test_resolve_file_family(declared: str, family: str) -> None:
    assert resolve_file_family(declared) == family


@pytest.mark.parametrize("declared", ["txt", "statement.docx", "image/png", ""])
def test_unknown_file_types_are_rejected(declared: str) -> None:
    with pytest.raises(UnsupportedFileType):
        resolve_file_family(declared)


def test_extractor_for_returns_family_extractor() -> None:
    assert isinstance(extractor_for("csv"), DelimitedExtractor)
    assert isinstance(extractor_for("xlsx"), SpreadsheetExtractor)
    assert isinstance(extractor_for("pdf"), DocumentExtractor)


def test_resolve_columns_prefers_exact_headers_and_keeps_dates_out_of_amounts() -> None:
    columns = resolve_columns(
        ["Trans Date", "Value Date", "Narration", "Debit", "Credit", "Balance", "Ref No"]
    )
    assert columns.get("date") == "Trans Date"
    assert columns.get("description") == "Narration"
    assert columns.get("debit") == "Debit"
    assert columns.get("credit") == "Credit"
    assert columns.get("balance") == "Balance"
    assert columns.get("reference") == "Ref No"
    assert columns.get("amount") is None
    assert columns.has_amount()


def test_find_header_row_skips_preamble() -> None:
    rows = [
        ["Account Name", "JOHN DOE", ""],
        ["Period", "01/01/2024 - 31/01/2024", ""],
        ["Date", "Description", "Amount", "Balance"],
    ]
    assert find_header_row(rows) == 2
    assert find_header_row([["foo", "bar", "baz"]]) is None


def test_csv_with_debit_and_credit_columns() -> None:
    data = csv_bytes(
        [
            ["Date", "Narration", "Debit", "Credit", "Balance", "Reference"],
            ["05/01/2024", "POS PURCHASE SHOPRITE", "2,500.00", "", "47,500.00", "FT001"],
            ["06/01/2024", "SALARY JANUARY", "", "150,000.00", "197,500.00", "FT002"],
        ]
    )

    result = DelimitedExtractor().extract(data)

    assert [r.type for r in result.records] == [TransactionType.DEBIT, TransactionType.CREDIT]
    first = result.records[0]
    assert first.date == "05/01/2024"
    assert first.description == "POS PURCHASE SHOPRITE"
    assert first.amount == "2500.00"
    assert first.balance == "47,500.00"
    assert first.reference == "FT001"
    assert first.raw is not None and first.raw["Narration"] == "POS PURCHASE SHOPRITE"
    assert result.dialect == "generic"


def test_csv_single_amount_column_uses_type_and_sign() -> None:
    data = csv_bytes(
        [
            ["Transaction Date", "Description", "Type", "Amount"],
            ["2024-01-05", "AIRTIME MTN", "DR", "500.00"],
            ["2024-01-06", "REFUND", "", "-200.00"],
            ["2024-01-07", "TRANSFER IN", "", "1,000.00"],
        ]
    )

    records = DelimitedExtractor().extract(data).records

    assert [r.type for r in records] == [
        TransactionType.DEBIT,
        TransactionType.DEBIT,
        TransactionType.CREDIT,
    ]
    assert [r.amount for r in records] == ["500.00", "200.00", "1000.00"]


def test_csv_preamble_totals_and_blank_rows_are_skipped() -> None:
    data = csv_bytes(
        [
            ["Customer Statement"],
            ["Account", "0123456789"],
            [],
            ["Date", "Description", "Debit", "Credit", "Balance"],
            ["05/01/2024", "POS PURCHASE", "100.00", "", "900.00"],
            ["", "Total", "100.00", "0.00", ""],
            ["07/01/2024", "", "50.00", "", "850.00"],
            ["08/01/2024", "ATM WITHDRAWAL", "0.00", "0.00", "850.00"],
        ]
    )

    result = DelimitedExtractor().extract(data, dialect="zenith")

    assert [r.description for r in result.records] == ["POS PURCHASE"]
    assert result.dropped == 3
    assert result.records[0].dialect == "zenith"
    assert result.dialect == "zenith"


def test_csv_semicolon_delimited_with_bom() -> None:
    text = (
        "\ufeffDate;Description;Amount;Balance\n"
        "2024-02-01;DSTV SUBSCRIPTION;-9,000.00;1,000.00\n"
    )

    records = DelimitedExtractor().extract(text.encode("utf-8")).records

    assert len(records) == 1
    assert records[0].description == "DSTV SUBSCRIPTION"
    assert records[0].type is TransactionType.DEBIT


def test_empty_csv_yields_no_records() -> None:
    assert DelimitedExtractor().extract(b"").records == ()
    assert DelimitedExtractor().extract(b"\n\n").records == ()
