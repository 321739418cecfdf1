# ruff: noqa: I001
"""CLI for the ``statement_analysis`` package.

Command handlers (``cmd_process``, ``cmd_detect``) are plain functions that
return a process exit code; the Typer commands below only parse options and
delegate. ``.env`` is loaded with ``python-dotenv`` before any command runs,
so ``OPENAI_API_KEY``, ``DATABASE_URL`` and ``STATEMENT_ANALYSIS_*`` settings
can live there.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .logging_setup import configure_logging

if TYPE_CHECKING:
    from .pipeline import StatementResult

console = Console()


def _read_file(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {path}: {e.strerror or e}", file=sys.stderr)
        return None


def _render_result(result: StatementResult) -> None:
    analysis = result.analysis
    summary = analysis.summary

    overview = Table(title="Statement", show_header=False)
    overview.add_column("field", style="cyan")
    overview.add_column("value")
    overview.add_row("Bank", result.bank_name or "unknown")
    overview.add_row("Layout", result.dialect)
    if result.statement_period is not None:
        overview.add_row(
            "Period",
            f"{result.statement_period.start_date} to {result.statement_period.end_date}",
        )
    overview.add_row("Transactions", str(summary.total_transactions))
    overview.add_row("Income", f"₦{summary.total_income:,.2f}")
    overview.add_row("Expenses", f"₦{summary.total_expenses:,.2f}")
    overview.add_row("Net cash flow", f"₦{summary.net_cash_flow:,.2f}")
    report = result.classification
    overview.add_row(
        "Classification",
        f"{report.strategy}/{report.outcome} (ai={report.ai_classified}, "
        f"fallback={report.fallback_classified})",
    )
    console.print(overview)

    if analysis.categories:
        cats = Table(title="Spending by category")
        cats.add_column("Category")
        cats.add_column("Amount", justify="right")
        cats.add_column("%", justify="right")
        cats.add_column("Count", justify="right")
        for c in analysis.categories:
            cats.add_row(
                c.name, f"₦{c.amount:,.2f}", f"{c.percentage:.1f}", str(c.transaction_count)
            )
        console.print(cats)

    if analysis.patterns.recurring_payments:
        rec = Table(title="Recurring payments")
        rec.add_column("Merchant")
        rec.add_column("Average", justify="right")
        rec.add_column("Frequency")
        for r in analysis.patterns.recurring_payments:
            rec.add_row(r.merchant, f"₦{r.amount:,.2f}", r.frequency)
        console.print(rec)

    for line in analysis.insights:
        console.print(f"[green]•[/green] {line}")


def cmd_process(
    file_path: Path,
    *,
    file_type: str | None = None,
    use_ai: bool = True,
    persist: bool = False,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Process one statement file and print its analysis.

    With ``persist`` the run goes through :class:`StatementProcessor` and the
    configured database; otherwise nothing is written. Errors are written to
    stderr and the function returns 1.
    """

    import os

    # Local imports keep CLI startup fast
    from .classification import OpenAIClassifier
    from .config import PipelineConfig
    from .errors import StatementAnalysisError
    from .insights import OpenAIInsightWriter
    from .pipeline import StatementProcessor, process_statement

    data = _read_file(file_path)
    if data is None:
        return 1
    declared = file_type or file_path.name

    try:
        config = PipelineConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    classifier = None
    insight_writer = None
    if use_ai:
        if not os.getenv("OPENAI_API_KEY"):
            print(
                "Error: OPENAI_API_KEY is not set in the environment (use --no-ai to skip).",
                file=sys.stderr,
            )
            return 1
        classifier = OpenAIClassifier(model=config.model)
        insight_writer = OpenAIInsightWriter(model=config.model)

    try:
        if persist:
            from sqlalchemy.exc import SQLAlchemyError

            from .persistence import SqlStatementStore

            processor = StatementProcessor(
                SqlStatementStore(database_url),
                classifier=classifier,
                insight_writer=insight_writer,
                config=config,
            )
            try:
                processed = asyncio.run(processor.run(data, file_path.name, declared))
            except (RuntimeError, SQLAlchemyError) as e:
                print(f"Error: persistence failed: {e}", file=sys.stderr)
                return 1
            result = processed.result
            print(f"Saved statement {processed.statement_id}", file=sys.stderr)
        else:
            result = asyncio.run(
                process_statement(
                    data,
                    declared,
                    classifier=classifier,
                    insight_writer=insight_writer,
                    config=config,
                )
            )
    except StatementAnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if as_json:
        typer.echo(json.dumps(result.to_json(), indent=2, ensure_ascii=False))
    else:
        _render_result(result)
    return 0


def cmd_detect(file_path: Path) -> int:
    """Print the file family, detected layout and bank for ``file_path``."""

    from .dialects import GENERIC, bank_name_for, detect_bank_name
    from .errors import UnsupportedFileType
    from .extractors import extractor_for, resolve_file_family

    data = _read_file(file_path)
    if data is None:
        return 1
    try:
        family = resolve_file_family(file_path.name)
    except UnsupportedFileType as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    extraction = extractor_for(file_path.name).extract(data)
    if extraction.dialect != GENERIC:
        bank = bank_name_for(extraction.dialect)
    else:
        texts: list[str | None] = []
        for r in extraction.records:
            texts.extend((r.description, r.reference))
        bank = detect_bank_name(texts)

    typer.echo(f"family: {family}")
    typer.echo(f"dialect: {extraction.dialect}")
    typer.echo(f"bank: {bank or 'unknown'}")
    typer.echo(f"records: {len(extraction.records)}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Extract, classify and analyze Nigerian bank statements (PDF, CSV, XLSX). "
        "Loads OPENAI_API_KEY and DATABASE_URL from a local .env before running."
    ),
)


@app.command("process")
def process_cmd(
    file: Annotated[
        Path, typer.Option("--file", help="Statement file (.pdf, .csv, .xlsx, .xls)")
    ],
    file_type: Annotated[
        str | None,
        typer.Option("--file-type", help="Override the type inferred from the extension."),
    ] = None,
    no_ai: Annotated[
        bool, typer.Option("--no-ai", help="Use the keyword classifier only.")
    ] = False,
    persist: Annotated[
        bool, typer.Option("--persist", help="Record the statement in the database.")
    ] = False,
    database_url: Annotated[
        str | None,
        typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var)."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full result as JSON.")] = False,
) -> None:
    """Process a statement and print a summary."""

    code = cmd_process(
        file,
        file_type=file_type,
        use_ai=not no_ai,
        persist=persist,
        database_url=database_url,
        as_json=as_json,
    )
    if code:
        raise typer.Exit(code)


@app.command("detect")
def detect_cmd(
    file: Annotated[Path, typer.Option("--file", help="Statement file to inspect")],
) -> None:
    """Show which extractor and bank layout a file maps to."""

    code = cmd_detect(file)
    if code:
        raise typer.Exit(code)


@app.callback()
def _root() -> None:
    """Load ``.env`` (without overriding the environment) and set up logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
