from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from statement_analysis.models import TransactionType
from statement_analysis.normalize import (
    amount_direction,
    collapse_whitespace,
    excel_serial_to_date,
    format_amount,
    parse_amount,
    parse_date,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("₦1,234.50", Decimal("1234.50")),
        ("NGN 5,000", Decimal("5000")),
        ("-2,000.00 DR", Decimal("2000.00")),
        ("(15.00)", Decimal("15.00")),
        ("+76,695.00", Decimal("76695.00")),
        ("1.234.567", Decimal("1234.567")),
        (-50, Decimal("50")),
        (12.5, Decimal("12.5")),
        (Decimal("-3.10"), Decimal("3.10")),
    ],
)
def test_parse_amount_reads_magnitude(raw, expected) -> None:
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "₦", "--", True, float("nan")])
def test_parse_amount_unreadable_is_zero(raw) -> None:
    assert parse_amount(raw) == Decimal(0)


@pytest.mark.parametrize(
    "raw", ["₦1,234.50", "-2,000.00 DR", "(15.00)", "1.234.567", "0.75", "NGN 12", "7 CR"]
)
def test_parse_amount_is_idempotent_through_format(raw) -> None:
    once = parse_amount(raw)
    assert once >= 0
    assert parse_amount(format_amount(once)) == once


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("-50.00", TransactionType.DEBIT),
        ("(15.00)", TransactionType.DEBIT),
        ("2,000.00 DR", TransactionType.DEBIT),
        ("500 CR", TransactionType.CREDIT),
        ("+20", TransactionType.CREDIT),
        ("500", None),
        (-3, TransactionType.DEBIT),
        (3, None),
        (None, None),
    ],
)
def test_amount_direction_reads_explicit_markers(raw, expected) -> None:
    assert amount_direction(raw) is expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-01-05", dt.date(2024, 1, 5)),
        ("2024-01-05T10:30:00", dt.date(2024, 1, 5)),
        ("2024/01/05", dt.date(2024, 1, 5)),
        ("05/01/2024", dt.date(2024, 1, 5)),
        ("05-01-24", dt.date(2024, 1, 5)),
        ("05.01.2024", dt.date(2024, 1, 5)),
        ("5 Jan 2024", dt.date(2024, 1, 5)),
        ("05-Jan-2024", dt.date(2024, 1, 5)),
        ("2024 Jan 5", dt.date(2024, 1, 5)),
        ("Jan 5, 2024", dt.date(2024, 1, 5)),
        ("20240105", dt.date(2024, 1, 5)),
        ("15 January 2024 10:00", dt.date(2024, 1, 15)),
        (dt.datetime(2024, 1, 5, 9, 0), dt.date(2024, 1, 5)),
        (dt.date(2024, 1, 5), dt.date(2024, 1, 5)),
    ],
)
def test_parse_date_supported_layouts_agree(raw, expected) -> None:
    assert parse_date(raw) == expected


def test_parse_date_reads_month_first_only_when_day_first_is_impossible() -> None:
    assert parse_date("12/25/2024") == dt.date(2024, 12, 25)
    assert parse_date("03/04/2024") == dt.date(2024, 4, 3)


@pytest.mark.parametrize("raw", [None, "", "hello", "12345", "Opening Balance"])
def test_parse_date_rejects_non_dates(raw) -> None:
    assert parse_date(raw) is None


def test_excel_serial_to_date_uses_workbook_epoch() -> None:
    assert excel_serial_to_date(45292) == dt.date(2024, 1, 1)
    assert excel_serial_to_date(0) is None
    assert excel_serial_to_date(True) is None
    assert excel_serial_to_date("45292") is None


def test_collapse_whitespace() -> None:
    assert collapse_whitespace("  POS \t PURCHASE\nSHOPRITE ") == "POS PURCHASE SHOPRITE"
    assert collapse_whitespace(None) == ""
