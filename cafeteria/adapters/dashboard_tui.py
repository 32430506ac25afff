from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Label, Static

from cafeteria.config import DB_PATH
from cafeteria.domain.errors import CafeteriaError
from cafeteria.domain.models import InventoryFilter, InventoryItem, StockProjection
from cafeteria.infra.logger import log_system_event
from cafeteria.usecases.approval import (
    committee_approve,
    committee_reject,
    list_inventory,
    president_approve,
    president_reject,
)
from cafeteria.usecases.stock_analysis import run_stock_analysis


QUEUE_COLUMNS = ("Item", "Category", "Stock", "Per student", "Min level", "Supplier", "Registered")
STOCK_COLUMNS = ("Item", "Category", "Stock", "Min level", "Weekly need", "Days left", "Status")

STATUS_ICONS = {"critical": "🚨", "low": "⚠️", "warning": "🔔", "good": "✅"}

# role -> (queue, approve, reject, title)
ROLES: Dict[str, Tuple[InventoryFilter, Callable[..., InventoryItem], Callable[..., InventoryItem], str]] = {
    "committee": (InventoryFilter.COMMITTEE_ONLY, committee_approve, committee_reject, "Cafeteria Committee"),
    "president": (InventoryFilter.PRESIDENT_ONLY, president_approve, president_reject, "President / Vice-President"),
}


def _qty(value: float, unit: Optional[str]) -> str:
    return f"{value:g} {unit or ''}".strip()


def queue_rows(items: Iterable[InventoryItem]) -> List[Tuple[str, List[str]]]:
    """(item id, cells) for each pending item."""
    out = []
    for i in items:
        out.append((i.id, [
            i.name,
            i.category or "",
            _qty(i.current_stock, i.unit),
            f"{_qty(i.consumption_per_student, i.unit)}/student",
            _qty(i.min_stock_level, i.unit),
            i.supplier or "",
            (i.created_at or "")[:10],
        ]))
    return out


def stock_rows(projections: Iterable[StockProjection]) -> List[Tuple[str, List[str]]]:
    out = []
    for p in projections:
        status = p.stock_status.value
        out.append((p.item_id, [
            p.name,
            p.category or "",
            _qty(p.current_stock, p.unit),
            _qty(p.min_stock_level, p.unit),
            _qty(p.weekly_requirement, p.unit),
            str(p.predicted_days),
            f"{STATUS_ICONS.get(status, '')} {status.upper()}".strip(),
        ]))
    return out


def summary_text(summary: Dict[str, int], student_count: int) -> str:
    return (
        f"📦 {summary.get('total', 0)} items   "
        f"🚨 critical {summary.get('critical', 0)}   "
        f"⚠️ low {summary.get('low', 0)}   "
        f"🔔 warning {summary.get('warning', 0)}   "
        f"✅ good {summary.get('good', 0)}   "
        f"| based on {student_count} students"
    )


class ConfirmRejectScreen(ModalScreen[bool]):
    """Ask before rejecting; rejection is final."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, item_name: str) -> None:
        super().__init__()
        self.item_name = item_name

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(f"Reject '{self.item_name}'? This cannot be undone.")
            with Horizontal():
                yield Button("Reject", variant="error", id="confirm")
                yield Button("Cancel", variant="primary", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")

    def action_cancel(self) -> None:
        self.dismiss(False)


class StockScreen(Screen):
    """Stock analysis of fully approved items."""
    BINDINGS = [
        ("escape", "app.pop_screen", "Back"),
        ("q", "app.pop_screen", "Back"),
    ]

    def __init__(self, analysis: Dict[str, Any]) -> None:
        super().__init__()
        self.analysis = analysis

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(summary_text(self.analysis["summary"], self.analysis["student_count"]), id="stock-summary")
        yield DataTable(id="stock", zebra_stripes=True, cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#stock", DataTable)
        table.add_columns(*STOCK_COLUMNS)
        for key, cells in stock_rows(self.analysis["items"]):
            table.add_row(*cells, key=key)


class CouncilDashboardApp(App):
    """Approval queue of one council role, with the stock analysis one key away."""

    CSS = """
    #queue-title { padding: 1 2; text-style: bold; }
    #confirm-dialog { width: 60; height: auto; padding: 1 2; border: thick $error; background: $surface; }
    #confirm-dialog Horizontal { height: auto; margin-top: 1; }
    #stock-summary { padding: 1 2; }
    """

    BINDINGS = [
        ("a", "approve", "Approve"),
        ("r", "reject", "Reject"),
        ("s", "stock", "Stock analysis"),
        ("f5", "refresh", "Refresh"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, role: str = "committee", db_path: str = DB_PATH) -> None:
        if role not in ROLES:
            raise ValueError(f"role must be one of {sorted(ROLES)}")
        super().__init__()
        self.role = role
        self.db_path = db_path
        self.queue, self.approve_fn, self.reject_fn, label = ROLES[role]
        self.title = f"Cafeteria Council: {label}"
        self._names: Dict[str, str] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("Pending approval", id="queue-title")
        yield DataTable(id="queue", zebra_stripes=True, cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#queue", DataTable).add_columns(*QUEUE_COLUMNS)
        self.refresh_queue()

    def refresh_queue(self) -> None:
        table = self.query_one("#queue", DataTable)
        table.clear()
        try:
            items = list_inventory(self.queue, db_path=self.db_path)
        except CafeteriaError as e:
            self.notify(e.message, title=type(e).__name__, severity="error")
            items = []
        self._names = {i.id: i.name for i in items}
        for key, cells in queue_rows(items):
            table.add_row(*cells, key=key)
        self.query_one("#queue-title", Static).update(f"Pending approval: {len(items)}")

    def _selected_id(self) -> Optional[str]:
        table = self.query_one("#queue", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    def _apply(self, fn: Callable[..., InventoryItem], item_id: str, message: str) -> None:
        try:
            item = fn(item_id, db_path=self.db_path)
            self.notify(f"{message}: {item.name}")
        except CafeteriaError as e:
            self.notify(e.message, title=type(e).__name__, severity="error")
        finally:
            self.refresh_queue()

    def action_approve(self) -> None:
        item_id = self._selected_id()
        if item_id is None:
            return
        log_system_event("dashboard_approve", {"role": self.role, "id": item_id})
        msg = "Sent to the president for final approval" if self.role == "committee" else "Final approval granted"
        self._apply(self.approve_fn, item_id, msg)

    def action_reject(self) -> None:
        item_id = self._selected_id()
        if item_id is None:
            return

        def _confirmed(ok: Optional[bool]) -> None:
            if ok:
                log_system_event("dashboard_reject", {"role": self.role, "id": item_id})
                self._apply(self.reject_fn, item_id, "Rejected")

        self.push_screen(ConfirmRejectScreen(self._names.get(item_id, item_id)), _confirmed)

    def action_stock(self) -> None:
        try:
            analysis = run_stock_analysis(db_path=self.db_path)
        except CafeteriaError as e:
            self.notify(e.message, title=type(e).__name__, severity="error")
            return
        self.push_screen(StockScreen(analysis))

    def action_refresh(self) -> None:
        self.refresh_queue()


def main(role: str = "committee", db_path: str = DB_PATH) -> None:
    CouncilDashboardApp(role=role, db_path=db_path).run()
