from __future__ import annotations

import asyncio
import datetime as dt
from decimal import Decimal

import pytest

from statement_analysis import (
    INSIGHTS_UNAVAILABLE,
    ClassifierConfig,
    NoTransactionsFound,
    PipelineConfig,
    UnsupportedFileType,
    process_statement,
)
from statement_analysis.errors import ExternalClassifierError
from statement_analysis.extractors import ExtractionResult
from statement_analysis.pipeline import extract_ledger, statement_bank_name
from tests.helpers.stubs import StubClassifier, StubInsightWriter, csv_bytes, tx, xlsx_bytes

HEADER = ["Date", "Narration", "Debit", "Credit", "Balance"]


def _statement_csv() -> bytes:
    return csv_bytes(
        [
            HEADER,
            [
                "02/01/2024",
                "NIP TRF FROM ZENITH BANK/ACME LTD SALARY",
                "",
                "250,000.00",
                "250,000.00",
            ],
            ["03/01/2024", "POS PURCHASE SHOPRITE #1234", "12,500.00", "", "237,500.00"],
            ["05/01/2024", "UBER TRIP 8812", "3,200.00", "", "234,300.00"],
            ["not a date", "garbage row", "1.00", "", ""],
            ["15/02/2024", "DSTV SUBSCRIPTION", "9,000.00", "", "225,300.00"],
        ]
    )


def _config(**pipeline: object) -> PipelineConfig:
    classifier = ClassifierConfig().without_pauses()
    return PipelineConfig(classifier=classifier, **pipeline)  # type: ignore[arg-type]


def test_csv_statement_without_external_services() -> None:
    result = asyncio.run(process_statement(_statement_csv(), "statement.csv"))

    assert [t.description for t in result.transactions] == [
        "NIP TRF FROM ZENITH BANK/ACME LTD SALARY",
        "POS PURCHASE SHOPRITE #1234",
        "UBER TRIP 8812",
        "DSTV SUBSCRIPTION",
    ]
    assert result.bank_name == "Zenith Bank"
    assert result.dialect == "generic"
    assert result.statement_period is not None
    assert result.statement_period.start_date == dt.date(2024, 1, 2)
    assert result.statement_period.end_date == dt.date(2024, 2, 15)
    assert result.classification.outcome == "exhausted"
    assert result.classification.fallback_classified == 4
    assert [t.category for t in result.transactions[1:]] == [
        "Shopping",
        "Transportation",
        "Bills & Utilities",
    ]

    summary = result.analysis.summary
    assert summary.total_income == Decimal("250000.00")
    assert summary.total_expenses == Decimal("24700.00")
    first, second = result.analysis.insights
    assert first == "Positive cash flow of ₦225,300.00 during this period."
    assert "large transactions" in second


def test_classifier_and_insight_writer_are_used() -> None:
    stub = StubClassifier(category=lambda d: ("Income" if "SALARY" in d else "Shopping", 0.95))
    writer = StubInsightWriter(["Cut back on rides."])

    result = asyncio.run(
        process_statement(
            _statement_csv(),
            "text/csv",
            classifier=stub,
            insight_writer=writer,
            config=_config(),
        )
    )

    assert result.classification.ai_classified == 4
    assert result.transactions[0].category == "Income"
    assert result.analysis.insights == ("Cut back on rides.",)
    assert writer.seen[0].total_transactions == 4


@pytest.mark.parametrize(
    "writer",
    [
        StubInsightWriter(error=ExternalClassifierError("down")),
        StubInsightWriter([]),
        StubInsightWriter(["   "], hang=True),
    ],
)
def test_insight_failures_degrade_to_placeholder(writer: StubInsightWriter) -> None:
    result = asyncio.run(
        process_statement(
            _statement_csv(), "csv", insight_writer=writer, config=_config(insights_timeout=0.01)
        )
    )

    assert result.analysis.insights == (INSIGHTS_UNAVAILABLE,)
    assert result.analysis.summary.total_transactions == 4


def test_xlsx_statement() -> None:
    data = xlsx_bytes(
        [
            ["GTBank Customer Statement", None, None, None],
            ["Value Date", "Description", "Amount", "Balance"],
            [dt.datetime(2024, 3, 1), "TRANSFER TO JOHN", "-5,000.00", "45,000.00"],
            [dt.datetime(2024, 3, 2), "REVERSAL", "+1,000.00", "46,000.00"],
        ]
    )

    result = asyncio.run(process_statement(data, "march.xlsx"))

    assert [(t.type.value, t.amount) for t in result.transactions] == [
        ("debit", Decimal("5000.00")),
        ("credit", Decimal("1000.00")),
    ]


def test_unsupported_type_fails_before_extraction() -> None:
    with pytest.raises(UnsupportedFileType):
        asyncio.run(process_statement(b"whatever", "statement.docx"))


def test_no_matching_rows_raises_no_transactions() -> None:
    data = csv_bytes([HEADER, ["Total", "", "", "", ""]])

    with pytest.raises(NoTransactionsFound, match="delimited"):
        extract_ledger(data, "csv")


def test_zero_amount_rows_raise_no_transactions() -> None:
    data = csv_bytes([HEADER, ["01/01/2024", "FEE", "0.00", "0.00", ""]])

    with pytest.raises(NoTransactionsFound):
        asyncio.run(process_statement(data, "csv"))


def test_statement_bank_name_prefers_dialect() -> None:
    ledger = [tx(10, description="NIP TRF TO ACCESS BANK")]

    assert statement_bank_name(ExtractionResult(records=(), dialect="opay"), ledger) == "OPay"
    assert statement_bank_name(ExtractionResult(records=()), ledger) == "Access Bank"
    assert statement_bank_name(ExtractionResult(records=()), [tx(10)]) is None


def test_result_to_json_is_serializable() -> None:
    result = asyncio.run(process_statement(_statement_csv(), "csv"))

    data = result.to_json()

    assert data["bank_name"] == "Zenith Bank"
    assert data["statement_period"] == {"start_date": "2024-01-02", "end_date": "2024-02-15"}
    assert data["transactions"][1]["amount"] == "12500.00"
    assert data["transactions"][1]["type"] == "debit"
    assert data["classification"]["strategy"] == "direct"
    assert data["analysis"]["categories"][0]["name"] == "Shopping"
