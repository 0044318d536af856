"""Bank reconciliation CLI commands.

Provides commands for bank statement import, pairing preview, batch
auto-reconciliation, the manual review queue and reconciliation status.
"""

from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from ...exceptions import OpenBandiError
from ...storage.database.base import sqlite_url
from ...utils.config import get_settings
from ...utils.logging import get_logger
from ..application.services import ReconciliationService
from ..infrastructure.importers import create_importer
from ..infrastructure.repository import SqlLedgerStore
from ..metrics import record_transaction_import

app = typer.Typer(name="banking", help="🏦 Bank statements & expense reconciliation")
console = Console()
logger = get_logger(__name__)

STORE_OPTION_HELP = "SQLite ledger file (default: OPENBANDI_DATABASE_URL)"


def get_repository(store: Optional[Path] = None) -> SqlLedgerStore:
    """Open the SQLite file given on the command line, or the configured database."""
    return SqlLedgerStore(sqlite_url(store) if store else get_settings().database_url)


def get_service(store: Optional[Path] = None) -> ReconciliationService:
    return ReconciliationService(get_repository(store))


def _fail(error: OpenBandiError) -> NoReturn:
    logger.error("banking_command_failed", error=str(error), context=error.context)
    console.print(f"[red]✗ {error.message}[/]")
    raise typer.Exit(1)


def _confidence_style(confidence: int) -> str:
    if confidence >= 80:
        return "green"
    if confidence >= 60:
        return "yellow"
    return "red"


# ============================================================================
# COMMAND 1: import-statement
# ============================================================================


@app.command(name="import-statement")
def import_statement(
    file_path: Path = typer.Argument(
        ..., help="Bank statement file (CSV, MT940 or CAMT.053 XML)", exists=True
    ),
    store: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
    statement_date: Optional[datetime] = typer.Option(
        None,
        "--statement-date",
        formats=["%Y-%m-%d", "%d/%m/%Y"],
        help="Date for rows without one (invoice listings)",
    ),
    auto_match: bool = typer.Option(True, "--auto-match/--no-auto-match"),
    confidence: Optional[int] = typer.Option(None, "--confidence", "-c", min=0, max=100),
):
    """📥 Import a bank statement and auto-reconcile expenses.

    Examples:
        openbandi banking import-statement estratto_marzo.csv

        openbandi banking import-statement fatture.csv --statement-date 2024-03-31 --no-auto-match
    """
    try:
        repository = get_repository(store)
        importer = create_importer(
            file_path, statement_date=statement_date.date() if statement_date else None
        )
        console.print(f"[cyan]📂 Importing {file_path.name}...[/]")
        result = importer.import_transactions(existing=repository.list_transactions())
        repository.add_transactions(result.transactions)
    except OpenBandiError as e:
        _fail(e)
        return

    record_transaction_import("success", result.success_count)
    record_transaction_import("error", result.error_count)
    record_transaction_import("duplicate", result.duplicate_count)

    table = Table(title="📊 Import Results", show_header=True)
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Count", justify="right", style="bold")
    table.add_row("✅ Success", f"[green]{result.success_count}[/]")
    table.add_row("❌ Errors", f"[red]{result.error_count}[/]")
    table.add_row("🔁 Duplicates", f"[yellow]{result.duplicate_count}[/]")
    table.add_row("━" * 20, "━" * 10)
    table.add_row("📈 Total", f"[bold]{result.total_count}[/]")
    console.print(table)

    if result.errors:
        console.print("\n[red]Errors:[/]")
        for error in result.errors[:5]:
            console.print(f"  • {error}")

    if auto_match and result.success_count > 0:
        try:
            recon = ReconciliationService(repository).reconcile_batch(min_confidence=confidence)
        except OpenBandiError as e:
            _fail(e)
            return
        console.print("\n[bold]Reconciliation Results:[/]")
        console.print(f"  [green]✅ Matched: {recon.matched_count}[/]")
        console.print(f"  [yellow]⏳ Review needed: {recon.review_count}[/]")
        console.print(f"  [dim]❔ Unmatched: {recon.unmatched_count}[/]")


# ============================================================================
# COMMAND 2: score
# ============================================================================


@app.command()
def score(
    transaction_id: str = typer.Argument(..., help="Bank transaction ID"),
    expense_id: str = typer.Argument(..., help="Expense ID"),
    store: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """🎯 Preview the match score of one transaction/expense pairing."""
    try:
        match = get_service(store).preview(transaction_id, expense_id)
    except OpenBandiError as e:
        _fail(e)
        return

    table = Table(title=f"🎯 {transaction_id} ↔ {expense_id}", show_header=True)
    table.add_column("Factor", style="cyan")
    table.add_column("Points", justify="right", style="bold")
    for factor, points in match.breakdown.items():
        table.add_row(factor, str(points))
    console.print(table)

    style = _confidence_style(match.confidence)
    console.print(f"Confidence: [{style}]{match.confidence}%[/]")
    for reason in match.reasons:
        console.print(f"  • {reason}")


# ============================================================================
# COMMAND 3: match
# ============================================================================


@app.command()
def match(
    confidence: Optional[int] = typer.Option(None, "--confidence", "-c", min=0, max=100),
    project_id: Optional[str] = typer.Option(None, "--project", "-p", help="Filter by project"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show matches without saving"),
    store: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """🔍 Auto-reconcile expenses with their best bank transaction.

    Examples:
        openbandi banking match

        openbandi banking match --confidence 85 --dry-run
    """
    try:
        result = get_service(store).reconcile_batch(
            min_confidence=confidence, dry_run=dry_run, project_id=project_id
        )
    except OpenBandiError as e:
        _fail(e)
        return

    if result.matches:
        title = "🔍 Matches (dry run)" if dry_run else "✅ Reconciled"
        table = Table(title=title, show_header=True)
        table.add_column("Expense", style="cyan")
        table.add_column("Transaction", style="yellow")
        table.add_column("Conf.", justify="right")
        table.add_column("Reasons", style="dim")
        for expense_id, best in result.matches.items():
            style = _confidence_style(best.confidence)
            table.add_row(
                expense_id,
                best.transaction.id if best.transaction else "-",
                f"[{style}]{best.confidence}%[/]",
                best.summary[:60],
            )
        console.print(table)

    console.print("\n[bold]Results:[/]")
    console.print(f"  [green]✅ Matched: {result.matched_count}[/]")
    console.print(f"  [yellow]⏳ Review needed: {result.review_count}[/]")
    console.print(f"  [dim]❔ Unmatched: {result.unmatched_count}[/]")

    if result.review_count > 0:
        console.print(
            "\n[yellow]💡 Tip: Run 'openbandi banking suggest' to review medium-confidence matches[/]"
        )


# ============================================================================
# COMMAND 4: suggest (review queue)
# ============================================================================


@app.command()
def suggest(
    review_min: Optional[int] = typer.Option(None, "--min", min=0, max=100),
    auto_min: Optional[int] = typer.Option(None, "--auto", min=0, max=100),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Filter text"),
    project_id: Optional[str] = typer.Option(None, "--project", "-p", help="Filter by project"),
    limit: int = typer.Option(20, "--limit", "-l", min=1),
    store: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """📋 List candidate pairings for manual review, best first."""
    try:
        suggestions = get_service(store).suggest_matches(
            review_threshold=review_min,
            auto_threshold=auto_min,
            search=search,
            project_id=project_id,
        )
    except OpenBandiError as e:
        _fail(e)
        return

    if not suggestions:
        console.print("[green]✅ No pairings need review[/]")
        return

    table = Table(title=f"📋 Review Queue ({len(suggestions)} items)")
    table.add_column("Date", style="cyan")
    table.add_column("Amount", justify="right", style="green")
    table.add_column("Transaction", style="yellow")
    table.add_column("Expense", style="yellow")
    table.add_column("Conf.", justify="right")
    table.add_column("Auto", justify="center")
    table.add_column("Reasons", style="dim")

    for suggestion in suggestions[:limit]:
        tx = suggestion.transaction
        style = _confidence_style(suggestion.confidence)
        table.add_row(
            tx.transaction_date.strftime("%d/%m/%Y"),
            f"€{abs(tx.amount)}",
            f"{tx.id} {tx.description[:30]}",
            f"{suggestion.expense.id} {suggestion.expense.description[:30]}",
            f"[{style}]{suggestion.confidence}%[/]",
            "✓" if suggestion.auto_match else "",
            ", ".join(suggestion.reasons)[:50],
        )

    console.print(table)
    auto_count = sum(1 for s in suggestions if s.auto_match)
    console.print(f"[bold]{auto_count}[/] of {len(suggestions)} above the auto-match threshold")


# ============================================================================
# COMMAND 5: reconcile
# ============================================================================


@app.command()
def reconcile(
    transaction_id: str = typer.Argument(..., help="Bank transaction ID"),
    expense_id: str = typer.Argument(..., help="Expense ID"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Reconciliation notes"),
    confidence: Optional[int] = typer.Option(None, "--confidence", "-c", min=0, max=100),
    store: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """🔗 Manually reconcile a transaction with an expense."""
    try:
        updated = get_service(store).reconcile(
            transaction_id, expense_id, confidence=confidence, notes=notes
        )
    except OpenBandiError as e:
        _fail(e)
        return

    console.print(f"[green]✅ Transaction {updated.id} reconciled with expense {expense_id}[/]")
    console.print(f"[dim]{updated.reconciliation_notes}[/]")


# ============================================================================
# COMMAND 6: status
# ============================================================================


@app.command()
def status(
    project_id: Optional[str] = typer.Option(None, "--project", "-p", help="Filter by project"),
    store: Optional[Path] = typer.Option(None, "--store", "-s", help=STORE_OPTION_HELP),
):
    """📊 Show which expenses are reconciled with a bank transaction."""
    try:
        rows = get_service(store).reconciliation_status(project_id)
    except OpenBandiError as e:
        _fail(e)
        return

    if not rows:
        console.print("[yellow]No expenses found[/]")
        return

    table = Table(title="📊 Reconciliation Status", show_header=True)
    table.add_column("Expense", style="cyan")
    table.add_column("Date", style="cyan")
    table.add_column("Supplier")
    table.add_column("Amount", justify="right", style="green")
    table.add_column("Reconciled", justify="center")

    for expense, reconciled in rows:
        table.add_row(
            expense.id,
            expense.expense_date.strftime("%d/%m/%Y"),
            expense.supplier_name or "-",
            f"€{expense.amount}",
            "[green]Yes[/]" if reconciled else "[yellow]No[/]",
        )

    console.print(table)
    reconciled_count = sum(1 for _, reconciled in rows if reconciled)
    console.print(f"[bold]{reconciled_count}/{len(rows)}[/] expenses reconciled")
