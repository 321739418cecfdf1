from __future__ import annotations

from statement_analysis.extractors import DocumentExtractor
from statement_analysis.extractors.document import extract_from_text
from statement_analysis.extractors.grammars import (
    access,
    columnar,
    generic,
    grammar_for,
    gtbank,
    opay,
    split_lines,
)
from statement_analysis.models import TransactionType

CREDIT, DEBIT = TransactionType.CREDIT, TransactionType.DEBIT


def test_grammar_for_falls_back_to_generic() -> None:
    assert grammar_for("gtbank") is gtbank.parse_lines
    assert grammar_for("zenith") is columnar.parse_lines
    assert grammar_for("uba") is generic.parse_lines
    assert grammar_for("generic") is generic.parse_lines


def test_split_lines_collapses_whitespace_and_drops_blanks() -> None:
    assert split_lines("  a   b \n\n\t\nc  ") == ["a b", "c"]


# ---- gtbank ---------------------------------------------------------------


def test_gtbank_spaced_lines() -> None:
    lines = [
        "Trans. Time Value Date Description Debits/Credits Balance Channel Reference",
        "2025 Jul 14 06:00:02 14 Jul 2025 TRANSFER FROM JOHN DOE +76,695.00 76,695.00 MOBILE"
        " 0003921",
        "2025 Jul 15 10:12:45 15 Jul 2025 POS PURCHASE SHOPRITE -12,500.00 64,195.00 POS 0003922",
        "Closing Balance 64,195.00 as at 31 Jul 2025",
    ]

    parsed = gtbank.parse_lines(lines)

    credit, debit = parsed.records
    assert (credit.date, credit.description, credit.amount) == (
        "14 Jul 2025",
        "TRANSFER FROM JOHN DOE",
        "+76,695.00",
    )
    assert credit.type is CREDIT
    assert credit.balance == "76,695.00"
    assert credit.reference == "0003921"
    assert debit.type is DEBIT
    assert debit.description == "POS PURCHASE SHOPRITE"
    assert parsed.dropped == 0


def test_gtbank_concatenated_line() -> None:
    line = "2025 Jul 14 06:00:0214 Jul 2025TRANSFER FROM JANE+5,000.0081,695.00MOBILE0003923"

    record = gtbank.concatenated_line(line)

    assert record is not None
    assert record.date == "14 Jul 2025"
    assert record.description == "TRANSFER FROM JANE"
    assert record.amount == "+5,000.00"
    assert record.balance == "81,695.00"
    assert record.type is CREDIT


# ---- access ---------------------------------------------------------------


def test_access_lines_read_direction_from_marker() -> None:
    lines = [
        "Opening Balance 50,000.00",
        "05-01-2024 05-01-2024 POS PURCHASE SHOPRITE DR 2,500.00 47,500.00",
        "06-01-2024 SALARY JANUARY 150,000.00CR 197,500.00",
    ]

    records = access.parse_lines(lines).records

    assert [(r.date, r.description, r.amount, r.type) for r in records] == [
        ("05-01-2024", "POS PURCHASE SHOPRITE", "2,500.00", DEBIT),
        ("06-01-2024", "SALARY JANUARY", "150,000.00", CREDIT),
    ]
    assert records[1].balance == "197,500.00"


def test_access_keeps_merchants_named_total() -> None:
    lines = [
        "05-01-2024 POS PURCHASE TOTALENERGIES LEKKI DR 20,000.00 80,000.00",
        "06-01-2024 TOTAL FILLING STATION IKOYI DR 15,000.00 65,000.00",
        "Total 35,000.00 65,000.00",
    ]

    parsed = access.parse_lines(lines)

    assert [r.description for r in parsed.records] == [
        "POS PURCHASE TOTALENERGIES LEKKI",
        "TOTAL FILLING STATION IKOYI",
    ]
    assert parsed.dropped == 0


# ---- columnar (first bank / zenith) ---------------------------------------


def test_columnar_direction_from_running_balance() -> None:
    lines = [
        "Opening Balance 50,000.00",
        "05/01/2024 POS PURCHASE SHOPRITE 2,500.00 47,500.00",
        "06/01/2024 TRANSFER FROM JOHN 10,000.00 57,500.00",
        "07/01/2024 AIRTIME MTN 1,000.00 0.00 56,500.00",
        "08/01/2024 SALARY JANUARY 0.00 150,000.00 206,500.00",
        "Account Name: JOHN DOE EXAMPLE",
        "Closing Balance 206,500.00",
    ]

    parsed = columnar.parse_lines(lines, "zenith")

    assert [(r.description, r.amount, r.type) for r in parsed.records] == [
        ("POS PURCHASE SHOPRITE", "2,500.00", DEBIT),
        ("TRANSFER FROM JOHN", "10,000.00", CREDIT),
        ("AIRTIME MTN", "1,000.00", DEBIT),
        ("SALARY JANUARY", "150,000.00", CREDIT),
    ]
    assert {r.dialect for r in parsed.records} == {"zenith"}
    assert parsed.dropped == 1


def test_columnar_without_previous_balance_uses_wording() -> None:
    parsed = columnar.parse_lines(["05/01/2024 SALARY DEPOSIT 9,000.00 9,000.00"], "firstbank")

    assert parsed.records[0].type is CREDIT


def test_columnar_keeps_lines_mentioning_page() -> None:
    lines = [
        "Opening Balance 100,000.00",
        "05/01/2024 FACEBOOK PAGE BOOST 5,000.00 95,000.00",
        "Page 2 of 3",
    ]

    parsed = columnar.parse_lines(lines, "zenith")

    assert [(r.description, r.type) for r in parsed.records] == [("FACEBOOK PAGE BOOST", DEBIT)]
    assert parsed.dropped == 0


# ---- opay -----------------------------------------------------------------


def _opay_lines() -> list[str]:
    return [
        "Wallet Account Statement",
        "2025 Jul 14 06:00:02",
        "14 Jul 2025",
        "Transfer from JOHN DOE",
        "+₦76,695.00",
        "₦76,695.00",
        "Mobile 250714010100",
        "2025 Jul 15 09:30:11",
        "15 Jul 2025",
        "Airtime Purchase MTN",
        "-₦1,000.00",
        "₦75,695.00",
    ]


def test_opay_blocks() -> None:
    blocks = opay.collect_blocks(_opay_lines())
    assert [b[0] for b in blocks] == ["2025 Jul 14 06:00:02", "2025 Jul 15 09:30:11"]

    first, second = opay.parse_lines(_opay_lines()).records

    assert first.date == "2025 Jul 14"
    assert first.amount == "76,695.00"
    assert first.type is CREDIT
    assert first.description.startswith("Transfer from JOHN DOE")
    assert "₦" not in first.description
    assert second.type is DEBIT
    assert second.amount == "1,000.00"
    assert second.description == "Airtime Purchase MTN"


def test_opay_block_without_description_gets_default() -> None:
    record = opay.parse_block(["14 Jul 2025", "-₦50.00"])

    assert record is not None
    assert record.description == "OPay Transaction"
    assert record.type is DEBIT


# ---- generic --------------------------------------------------------------


def test_generic_cascade_handles_mixed_layouts() -> None:
    lines = [
        "Statement of account",
        "Date Description Amount Balance",
        "05/01/2024 POS PURCHASE SHOPRITE 2,500.00 DR 47,500.00",
        "06/01/2024 SALARY JANUARY 0.00 150,000.00 197,500.00",
        "07/01/2024 NETFLIX SUBSCRIPTION 4,500.00 193,000.00",
        "2024-01-08 REFUND FROM JUMIA 3,000",
        "10 Jan 2024 UBER TRIP LAGOS 2,150.00",
        "short",
        "Total Debit 9,150.00",
        "Thank you for banking with us",
    ]

    parsed = generic.parse_lines(lines)

    assert [(r.date, r.description, r.type) for r in parsed.records] == [
        ("05/01/2024", "POS PURCHASE SHOPRITE", DEBIT),
        ("06/01/2024", "SALARY JANUARY", CREDIT),
        ("07/01/2024", "NETFLIX SUBSCRIPTION", DEBIT),
        ("2024-01-08", "REFUND FROM JUMIA", CREDIT),
        ("10 Jan 2024", "UBER TRIP LAGOS", DEBIT),
    ]
    assert parsed.records[1].amount == "150,000.00"
    assert parsed.records[3].amount == "3,000"
    assert parsed.dropped == 1


def test_generic_skip_rules() -> None:
    assert generic.skip_line("too short")
    assert generic.skip_line("Balance Brought Forward 1,000.00")
    assert generic.skip_line("Date Narration Debit Credit Balance")
    assert not generic.skip_line("05/01/2024 POS PURCHASE 100.00")


# ---- document text --------------------------------------------------------


def test_extract_from_text_detects_dialect() -> None:
    text = "\n".join(["OPay Digital Services Limited", *_opay_lines()])

    result = extract_from_text(text)

    assert result.dialect == "opay"
    assert len(result.records) == 2
    assert result.text == text


def test_extract_from_text_retries_generic_for_unknown_layout() -> None:
    text = "\n".join(
        [
            "Guaranty Trust Bank Plc",
            "05/01/2024 POS PURCHASE SHOPRITE 2,500.00 47,500.00",
        ]
    )

    result = extract_from_text(text)

    assert result.dialect == "gtbank"
    (record,) = result.records
    assert record.description == "POS PURCHASE SHOPRITE"
    assert record.dialect == "gtbank"
    assert record.raw is not None and record.raw["bank"] == "gtbank"


def test_extract_from_text_explicit_dialect_wins() -> None:
    result = extract_from_text("05-01-2024 POS PURCHASE DR 100.00 900.00", dialect="access")

    assert result.dialect == "access"
    assert result.records[0].type is DEBIT


def test_document_extractor_on_non_pdf_bytes_is_empty() -> None:
    result = DocumentExtractor().extract(b"not a pdf at all")

    assert result.records == ()
    assert result.text == ""
