"""
SplitLedger report CLI
- Per-group and cross-group balances for one member, from a JSON export of
  the groups store.
- Excel and CSV exports.

Run:
  split-ledger overview groups.json --observer <uid>
"""
from __future__ import annotations
import json
import os
from datetime import date
from typing import List, Optional, Tuple

import typer

from logging_setup import configure_logging, get_logger
from models import LedgerSnapshot
from config import (
    LedgerFormatError,
    aggregate_to_dict,
    group_analysis_to_dict,
    load_snapshots,
)
from computations import (
    analyze_groups,
    build_group_analysis,
    filter_snapshot_by_date,
    recent_expenses,
    sorted_category_totals,
)
from csv_handler import export_expenses_to_csv, export_payments_to_csv
from excel_export import export_excel
from utils import optional_date

app = typer.Typer(add_completion=False, help="Shared-expense balances and settlements.")
logger = get_logger(__name__)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: SPLIT_LEDGER_LOG_LEVEL or INFO)"),
) -> None:
    configure_logging(log_level)


def _load(path: str) -> List[LedgerSnapshot]:
    if not os.path.exists(path):
        typer.echo(f"No such file: {path}", err=True)
        raise typer.Exit(code=2)
    try:
        return load_snapshots(path)
    except (LedgerFormatError, json.JSONDecodeError) as ex:
        typer.echo(f"Cannot read {path}: {ex}", err=True)
        raise typer.Exit(code=1)


def _window(start: Optional[str], end: Optional[str]) -> Tuple[Optional[date], Optional[date]]:
    try:
        return optional_date(start), optional_date(end)
    except ValueError:
        typer.echo("Dates must be YYYY-MM-DD.", err=True)
        raise typer.Exit(code=2)


def _find(snapshots: List[LedgerSnapshot], group_id: str) -> LedgerSnapshot:
    for s in snapshots:
        if s.group_id == group_id:
            return s
    typer.echo(f"Unknown group: {group_id}", err=True)
    raise typer.Exit(code=2)


@app.command()
def group(
    file: str = typer.Argument(..., help="JSON file with groups"),
    group_id: str = typer.Argument(...),
    observer: str = typer.Option(..., "--observer", "-o", help="Member id to report for"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON payload"),
    start: Optional[str] = typer.Option(None, help="First day, YYYY-MM-DD"),
    end: Optional[str] = typer.Option(None, help="Last day, YYYY-MM-DD"),
) -> None:
    """Balance and debts for one group."""
    s, e = _window(start, end)
    snapshot = filter_snapshot_by_date(_find(_load(file), group_id), s, e)
    a = build_group_analysis(snapshot, observer)
    if as_json:
        typer.echo(json.dumps(group_analysis_to_dict(a), indent=2))
        return
    typer.echo(f"{a.group_name or a.group_id}")
    typer.echo(f"  Balance:     {a.observer_balance:.2f}")
    typer.echo(f"  Total spent: {a.total_spent:.2f}")
    typer.echo(f"  Your share:  {a.observer_share:.2f}")
    for d in a.owed_by_others:
        typer.echo(f"  {d.counterparty_id} owes you {d.amount:.2f}")
    for d in a.owed_to_others:
        typer.echo(f"  You owe {d.counterparty_id} {d.amount:.2f}")
    for cat, v in sorted_category_totals(a.category_totals):
        typer.echo(f"  [{cat or '-'}] {v:.2f}")


@app.command()
def overview(
    file: str = typer.Argument(..., help="JSON file with groups"),
    observer: str = typer.Option(..., "--observer", "-o", help="Member id to report for"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON payload"),
    start: Optional[str] = typer.Option(None, help="First day, YYYY-MM-DD"),
    end: Optional[str] = typer.Option(None, help="Last day, YYYY-MM-DD"),
    workers: Optional[int] = typer.Option(None, min=1, help="Groups analyzed in parallel"),
) -> None:
    """Totals across every group the member belongs to."""
    s, e = _window(start, end)
    snapshots = [filter_snapshot_by_date(g, s, e) for g in _load(file)]
    analyses, agg = analyze_groups(snapshots, observer, max_workers=workers)
    if as_json:
        payload = aggregate_to_dict(agg)
        payload["groups"] = [group_analysis_to_dict(a) for a in analyses]
        typer.echo(json.dumps(payload, indent=2))
        return
    typer.echo(f"Groups:           {len(analyses)}")
    typer.echo(f"Total balance:    {agg.total_balance:.2f}")
    typer.echo(f"Owed to you:      {agg.total_owed_to_observer:.2f}")
    typer.echo(f"You owe:          {agg.total_owed_by_observer:.2f}")
    for cat, v in sorted_category_totals(agg.category_totals):
        typer.echo(f"  [{cat or '-'}] {v:.2f}")


@app.command()
def excel(
    file: str = typer.Argument(..., help="JSON file with groups"),
    out: str = typer.Argument(..., help="Output .xlsx path"),
    observer: str = typer.Option(..., "--observer", "-o", help="Member id to report for"),
) -> None:
    """Write the member's reports to an Excel workbook."""
    analyses, agg = analyze_groups(_load(file), observer)
    export_excel(analyses, agg, out, observer_id=observer)
    logger.info("Exported %d groups to %s", len(analyses), out)
    typer.echo(f"Exported: {out}")


@app.command()
def csv(
    file: str = typer.Argument(..., help="JSON file with groups"),
    group_id: str = typer.Argument(...),
    out_dir: str = typer.Argument(..., help="Directory for expenses.csv and payments.csv"),
) -> None:
    """Dump one group's expenses and payments as CSV."""
    snapshot = _find(_load(file), group_id)
    os.makedirs(out_dir, exist_ok=True)
    export_expenses_to_csv(list(snapshot.expenses), os.path.join(out_dir, "expenses.csv"))
    export_payments_to_csv(list(snapshot.payments), os.path.join(out_dir, "payments.csv"))
    typer.echo(f"Exported {len(snapshot.expenses)} expenses and {len(snapshot.payments)} payments to {out_dir}")


@app.command()
def recent(
    file: str = typer.Argument(..., help="JSON file with groups"),
    limit: int = typer.Option(10, min=0, help="Number of expenses"),
) -> None:
    """Latest expenses across all groups."""
    for e in recent_expenses(_load(file), limit=limit):
        typer.echo(f"{e.date or '----------'}  {e.group_id}  {e.payer_id}  {e.value:.2f}  {e.category}  {e.description}")


if __name__ == "__main__":
    app()
