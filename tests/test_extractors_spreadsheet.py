from __future__ import annotations

import datetime as dt

from statement_analysis.extractors import SpreadsheetExtractor
from statement_analysis.extractors.spreadsheet import read_sheet_rows
from statement_analysis.models import TransactionType
from tests.helpers.stubs import xlsx_bytes


def _statement_rows() -> list[list[object]]:
    return [
        ["ACME BANK PLC", None, None, None, None],
        ["Account Number", "0123456789", None, None, None],
        [None, None, None, None, None],
        ["Date", "Description", "Debit", "Credit", "Balance"],
        [dt.datetime(2024, 1, 5, 9, 30), "POS PURCHASE SHOPRITE", 2500.5, None, 47499.5],
        [45293, "SALARY JANUARY", None, 150000, 197499.5],
        [None, "Total", 2500.5, 150000, None],
    ]


def test_xlsx_skips_title_rows_and_reads_typed_cells() -> None:
    result = SpreadsheetExtractor().extract(xlsx_bytes(_statement_rows()))

    assert [r.description for r in result.records] == ["POS PURCHASE SHOPRITE", "SALARY JANUARY"]
    shop, salary = result.records
    assert shop.date == "2024-01-05"
    assert shop.amount == "2500.5"
    assert shop.type is TransactionType.DEBIT
    assert shop.balance == "47499.5"
    assert salary.type is TransactionType.CREDIT
    assert salary.amount == "150000"
    assert result.dropped >= 1


def test_xlsx_serial_date_cells_are_converted_through_the_epoch() -> None:
    rows = [
        ["Transaction Date", "Narration", "Amount", "Type"],
        [45292, "AIRTIME MTN", 500, "Debit"],
    ]

    (record,) = SpreadsheetExtractor().extract(xlsx_bytes(rows)).records

    assert record.date == "2024-01-01"
    assert record.type is TransactionType.DEBIT
    assert record.raw is not None and record.raw["Transaction Date"] == 45292


def test_xlsx_without_a_header_in_the_first_rows_yields_nothing() -> None:
    rows = [["lorem", "ipsum", "dolor"] for _ in range(12)]

    result = SpreadsheetExtractor().extract(xlsx_bytes(rows))

    assert result.records == ()
    assert result.dropped == 12


def test_unreadable_workbook_yields_no_records() -> None:
    # A legacy BIFF .xls signature is not an OOXML workbook.
    data = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64

    assert read_sheet_rows(data) is None
    result = SpreadsheetExtractor().extract(data, dialect="gtbank")
    assert result.records == ()
    assert result.dialect == "gtbank"
