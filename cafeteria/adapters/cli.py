# cafeteria/adapters/cli.py
"""
CLI of the cafeteria council toolkit (Typer).

Main commands:
- migrate                          -> apply migrations and create views
- item add / import / show         -> register food items (enter the committee queue)
- committee list/approve/reject    -> cafeteria committee gate
- president list/approve/reject    -> president / vice-president gate
- stock                            -> stock analysis of fully approved items
- students import / count          -> student roster
- menu import / week / now         -> weekly menu and live meal status
- tui                              -> terminal dashboard
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from cafeteria.config import DB_PATH
from cafeteria.domain.errors import CafeteriaError, SchemaMismatch
from cafeteria.domain.models import InventoryFilter, InventoryItem
from cafeteria.infra.migrations import apply_migrations
from cafeteria.infra.views import create_views
from cafeteria.usecases.approval import (
    committee_approve,
    committee_reject,
    get_item,
    list_inventory,
    president_approve,
    president_reject,
)
from cafeteria.usecases.register_item import run_register_item, run_import_items
from cafeteria.usecases.roster import count_active_students, run_import_students
from cafeteria.usecases.stock_analysis import run_stock_analysis
from cafeteria.usecases.weekly_menu import run_import_menu, run_meal_status, run_weekly_menu


app = typer.Typer(help="Cafeteria Council CLI")
console = Console()

STATUS_STYLES = {
    "critical": "bold red",
    "low": "bold dark_orange",
    "warning": "bold yellow",
    "good": "bold green",
    "active": "bold green",
    "upcoming": "bold blue",
    "closed": "dim",
    "not-today": "dim",
    "not-scheduled": "yellow",
}

MEAL_STATUS_TEXT = {
    "active": "Now Serving",
    "upcoming": "Coming Soon",
    "closed": "Service Closed",
    "not-today": "Not Today",
    "not-scheduled": "Not Scheduled",
}


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _fmt(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, bool):
        return "yes" if val else "no"
    if isinstance(val, float):
        return f"{val:,.2f}"
    return str(val)


def _styled(status: str) -> str:
    style = STATUS_STYLES.get(status)
    return f"[{style}]{status}[/]" if style else status


def _meal_label(status: str) -> str:
    text = MEAL_STATUS_TEXT.get(status, status)
    style = STATUS_STYLES.get(status)
    return f"[{style}]{text}[/]" if style else text


def _display_table(rows: List[Dict[str, Any]], columns: List[str], title: str) -> None:
    """Show rows as a Rich table (status columns are colored)."""
    if not rows:
        console.print(Panel("No data found", title=title, border_style="yellow"))
        return
    table = Table(title=title, box=box.ROUNDED)
    for col in columns:
        numeric = col in {"current_stock", "min_stock_level", "consumption_per_student",
                          "predicted_days", "weekly_requirement"}
        table.add_column(col, justify="right" if numeric else "left")
    for row in rows:
        values = []
        for col in columns:
            val = row.get(col)
            if col in {"stock_status", "status"} and isinstance(val, str):
                values.append(_styled(val))
            else:
                values.append(_fmt(val))
        table.add_row(*values)
    console.print(table)


def _run(fn: Callable[[], Any]) -> Any:
    """Run a use case and turn domain errors into an operator message."""
    try:
        return fn()
    except SchemaMismatch as e:
        console.print(Panel(f"{e.message}\nConfiguration incomplete: run `migrate` first.",
                            title="Database update required", border_style="red"))
        raise typer.Exit(code=1)
    except CafeteriaError as e:
        console.print(Panel(e.message, title=type(e).__name__, border_style="red"))
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(Panel(str(e), title="Invalid input", border_style="red"))
        raise typer.Exit(code=1)


QUEUE_COLUMNS = ["id", "name", "category", "current_stock", "unit",
                 "consumption_per_student", "min_stock_level", "supplier", "created_at"]


def _show_queue(flt: InventoryFilter, title: str, db_path: str, as_json: bool) -> None:
    items = _run(lambda: list_inventory(flt, db_path=db_path))
    rows = [asdict(i) for i in items]
    if as_json:
        _print_json(rows)
        return
    _display_table(rows, QUEUE_COLUMNS, title=title)


def _report_transition(item: InventoryItem, message: str) -> None:
    console.print(f"[green]>>[/green] {message}: {item.name} ({item.id})")


# -----------------------
# infra commands
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path")):
    """Apply migrations and recreate the helper views."""
    _run(lambda: (apply_migrations(db_path), create_views(db_path)))
    typer.echo(f">> Migrations applied and views created in: {db_path}")


# -----------------------
# inventory items
# -----------------------

item_app = typer.Typer(help="Register and inspect food inventory items.")
app.add_typer(item_app, name="item")


@item_app.command("add")
def cmd_item_add(
    name: str = typer.Option(..., help="Food item name"),
    category: Optional[str] = typer.Option(None, help="Ex.: grains, dairy"),
    unit: Optional[str] = typer.Option(None, help="Ex.: kg, l"),
    current_stock: float = typer.Option(0.0, help="Quantity in stock"),
    min_stock_level: float = typer.Option(0.0, help="Reorder threshold"),
    consumption_per_student: float = typer.Option(0.0, help="Quantity one student eats per meal"),
    supplier: Optional[str] = typer.Option(None),
    storage_condition: Optional[str] = typer.Option(None),
    registered_by: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Register one item; it waits for the cafeteria committee."""
    rec = {
        "name": name,
        "category": category,
        "unit": unit,
        "current_stock": current_stock,
        "min_stock_level": min_stock_level,
        "consumption_per_student": consumption_per_student,
        "supplier": supplier,
        "storage_condition": storage_condition,
        "registered_by": registered_by,
    }
    row = _run(lambda: run_register_item(rec, db_path=db_path))
    typer.echo(row["id"])


@item_app.command("import")
def cmd_item_import(
    path: str = typer.Argument(..., help="XLSX/CSV sheet of food items"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Register items in batch from a sheet."""
    info = _run(lambda: run_import_items(path, db_path=db_path))
    lines = [f"Rows read: {info['total']}", f"Inserted: {info['inserted']}"]
    if info["errors"]:
        lines.append(f"Errors: {len(info['errors'])}")
    console.print(Panel("\n".join(lines), title="Item import"))
    if info["errors"]:
        err_table = Table(title="Rejected rows")
        err_table.add_column("Line")
        err_table.add_column("Error")
        for err in info["errors"]:
            err_table.add_row(str(err["line"]), err["message"])
        console.print(err_table)


@item_app.command("show")
def cmd_item_show(
    item_id: str = typer.Argument(...),
    as_json: bool = typer.Option(False, "--json", help="JSON output"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Show one item with its approval flags."""
    item = _run(lambda: get_item(item_id, db_path=db_path))
    data = asdict(item)
    if as_json:
        _print_json(data)
        return
    table = Table(title=item.name, box=box.ROUNDED)
    table.add_column("Field")
    table.add_column("Value")
    for k, v in data.items():
        table.add_row(k, _fmt(v))
    console.print(table)


# -----------------------
# committee gate
# -----------------------

committee_app = typer.Typer(help="Cafeteria committee approvals.")
app.add_typer(committee_app, name="committee")


@committee_app.command("list")
def cmd_committee_list(
    as_json: bool = typer.Option(False, "--json", help="JSON output"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Items waiting for committee approval (newest first)."""
    _show_queue(InventoryFilter.COMMITTEE_ONLY, "Pending committee approval", db_path, as_json)


@committee_app.command("approve")
def cmd_committee_approve(
    item_id: str = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Approve an item and send it to the president."""
    item = _run(lambda: committee_approve(item_id, db_path=db_path))
    _report_transition(item, "Approved and sent to the president for final approval")


@committee_app.command("reject")
def cmd_committee_reject(
    item_id: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Reject an item (final)."""
    if not yes:
        typer.confirm(f"Reject item {item_id}? This cannot be undone", abort=True)
    item = _run(lambda: committee_reject(item_id, db_path=db_path))
    _report_transition(item, "Rejected")


# -----------------------
# president gate
# -----------------------

president_app = typer.Typer(help="President / vice-president approvals.")
app.add_typer(president_app, name="president")


@president_app.command("list")
def cmd_president_list(
    as_json: bool = typer.Option(False, "--json", help="JSON output"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Committee-approved items waiting for final approval (newest first)."""
    _show_queue(InventoryFilter.PRESIDENT_ONLY, "Pending final approval", db_path, as_json)


@president_app.command("approve")
def cmd_president_approve(
    item_id: str = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Give final approval to an item."""
    item = _run(lambda: president_approve(item_id, db_path=db_path))
    _report_transition(item, "Final approval granted")


@president_app.command("reject")
def cmd_president_reject(
    item_id: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Reject an item (final)."""
    if not yes:
        typer.confirm(f"Reject item {item_id}? This cannot be undone", abort=True)
    item = _run(lambda: president_reject(item_id, db_path=db_path))
    _report_transition(item, "Rejected")


# -----------------------
# stock analysis
# -----------------------

STOCK_COLUMNS = ["name", "category", "current_stock", "unit", "min_stock_level",
                 "weekly_requirement", "predicted_days", "stock_status"]


@app.command("stock")
def cmd_stock(
    students: Optional[int] = typer.Option(None, help="Head-count to use (default: active roster)"),
    as_json: bool = typer.Option(False, "--json", help="JSON output"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Days of supply and stock status of every fully approved item."""
    res = _run(lambda: run_stock_analysis(student_count=students, db_path=db_path))
    rows = [p.as_dict() for p in res["items"]]
    if as_json:
        _print_json({"student_count": res["student_count"], "summary": res["summary"], "items": rows})
        return
    _display_table(rows, STOCK_COLUMNS, title="Stock analysis")
    s = res["summary"]
    console.print(
        f"Items: {s['total']}  |  [bold red]critical: {s['critical']}[/]  "
        f"[bold dark_orange]low: {s['low']}[/]  [bold yellow]warning: {s['warning']}[/]  "
        f"[bold green]good: {s['good']}[/]"
    )
    console.print(f"[dim]Based on {res['student_count']} students[/dim]")


# -----------------------
# students
# -----------------------

students_app = typer.Typer(help="Student roster.")
app.add_typer(students_app, name="students")


@students_app.command("import")
def cmd_students_import(
    path: str = typer.Argument(..., help="XLSX/CSV roster"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Upsert the student roster from a sheet."""
    info = _run(lambda: run_import_students(path, db_path=db_path))
    typer.echo(f">> {info['upserted']} students imported ({info['active']} active).")


@students_app.command("count")
def cmd_students_count(db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path")):
    """Active student head-count."""
    typer.echo(_run(lambda: count_active_students(db_path=db_path)))


# -----------------------
# menu
# -----------------------

menu_app = typer.Typer(help="Weekly menu and meal service status.")
app.add_typer(menu_app, name="menu")


def _parse_at(at: Optional[str]) -> datetime:
    if not at:
        return datetime.now()
    try:
        return datetime.fromisoformat(at)
    except ValueError:
        console.print(Panel(f"Invalid timestamp: {at!r} (use YYYY-MM-DDTHH:MM)",
                            title="Invalid input", border_style="red"))
        raise typer.Exit(code=1)


@menu_app.command("import")
def cmd_menu_import(
    path: str = typer.Argument(..., help="XLSX/CSV weekly schedule"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Upsert the weekly schedule from a sheet."""
    info = _run(lambda: run_import_menu(path, db_path=db_path))
    typer.echo(f">> {info['upserted']} menu slots imported.")


@menu_app.command("week")
def cmd_menu_week(
    at: Optional[str] = typer.Option(None, help="Moment to evaluate (ISO, default: now)"),
    as_json: bool = typer.Option(False, "--json", help="JSON output"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Menu for the whole week."""
    week = _run(lambda: run_weekly_menu(now=_parse_at(at), db_path=db_path))
    if as_json:
        _print_json(week)
        return
    table = Table(title="Weekly menu", box=box.ROUNDED)
    table.add_column("Day")
    for meal in ("breakfast", "lunch", "dinner"):
        table.add_column(meal.capitalize())
    for day, meals in week.items():
        cells = []
        for meal in ("breakfast", "lunch", "dinner"):
            m = meals[meal]
            status = m["status"]
            label = "" if status == "not-today" else f"\n{_meal_label(status)}"
            cells.append(f"{m['menu']}\n[dim]{m['time']}[/dim]{label}")
        table.add_row(day, *cells)
    console.print(table)


@menu_app.command("now")
def cmd_menu_now(
    at: Optional[str] = typer.Option(None, help="Moment to evaluate (ISO, default: now)"),
    as_json: bool = typer.Option(False, "--json", help="JSON output"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Which meal is being served right now."""
    res = _run(lambda: run_meal_status(now=_parse_at(at), db_path=db_path))
    if as_json:
        _print_json(res)
        return
    table = Table(title=f"{res['day']} {res['time']}", box=box.ROUNDED)
    table.add_column("Meal")
    table.add_column("Status")
    for meal, status in res["meals"].items():
        table.add_row(meal, _meal_label(status))
    console.print(table)


# -----------------------
# dashboard
# -----------------------

@app.command("tui")
def cmd_tui(
    role: str = typer.Option("committee", help="committee | president"),
    db_path: str = typer.Option(DB_PATH, "--db", help="SQLite path"),
):
    """Start the terminal dashboard for a council role."""
    from cafeteria.adapters.dashboard_tui import main as tui_main
    try:
        tui_main(role=role, db_path=db_path)
    except ValueError as e:
        console.print(Panel(str(e), title="Invalid input", border_style="red"))
        raise typer.Exit(code=1)


# Optional entry point:
def main():
    app()


if __name__ == "__main__":
    main()
