import asyncio
from typing import List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, MarkdownViewer, Select

import db.crud as crud
from db.models import QUOTATION_STATUSES, Quotation
from utils.messages import NewQuotationMessage
from utils.pdf import export_quotation_pdf
from utils.pure import format_currency, generate_markdown_table, parse_amount
from views.base_screen import BaseScreen


class AdminQuotesScreen(BaseScreen):
    """
    Generated quotations, newest first. The highlighted quotation can get a
    delivery fee, a discount and a new status, and can be exported to PDF.
    The item snapshot itself is read-only.
    """

    ADMIN_ONLY = True

    def __init__(self) -> None:
        super().__init__()
        self._quotes: List[Quotation] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-quote-detail", show_table_of_contents=False)
            yield DataTable(id="table-quotes")
        with Horizontal(id="hort-quote-controls"):
            with Vertical():
                yield Label("Status")
                yield Select(
                    [(s, s) for s in QUOTATION_STATUSES],
                    allow_blank=False,
                    id="select-status",
                )
            with Vertical():
                yield Label("Delivery Fee")
                yield Input(
                    id="input-delivery",
                    type="number",
                    validators=[Number(minimum=0.0)],
                )
            with Vertical():
                yield Label("Discount")
                yield Input(
                    id="input-discount",
                    type="number",
                    validators=[Number(minimum=0.0)],
                )
            yield Button("Save", id="btn-save-quote", variant="success")
            yield Button("Export PDF", id="btn-export", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Ref No", "Date", "Customer", "Items", "Grand Total", "Status")
        if self.app.state.is_admin:
            self.load_quotes()

    @on(ScreenResume)
    @on(NewQuotationMessage)
    def handle_refresh(self) -> None:
        if self.admin_locked_out():
            return
        self.load_quotes()

    @work(exclusive=True, group="quotes")
    async def load_quotes(self) -> None:
        quotes = await crud.list_quotations(self.app.state.store)
        quotes.sort(key=lambda q: q.date, reverse=True)
        self._quotes = quotes

        table = self.query_one(DataTable)
        cursor = table.cursor_row
        table.clear()
        for q in quotes:
            table.add_row(
                q.number,
                q.date[:10],
                q.customer.company or q.customer.name,
                sum(i.qty for i in q.items),
                format_currency(q.grand_total),
                q.status,
                key=q.id,
            )
        self.query_one("#hort-quote-controls").display = bool(quotes)
        if quotes:
            table.move_cursor(row=min(cursor, len(quotes) - 1))
            self._render_detail(self._current())
        else:
            self._render_detail(None)

    def _current(self) -> Quotation | None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return next((q for q in self._quotes if q.id == row_key.value), None)

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        quote = self._current()
        self._render_detail(quote)
        if quote is not None:
            self.query_one("#select-status", Select).value = quote.status
            self.query_one("#input-delivery", Input).value = f"{quote.delivery_fee:.2f}"
            self.query_one("#input-discount", Input).value = f"{quote.discount:.2f}"

    def _render_detail(self, quote: Quotation | None) -> None:
        viewer = self.query_one("#md-quote-detail", MarkdownViewer)
        if quote is None:
            viewer.document.update("### No quotations generated yet.")
            return

        c = quote.customer
        header = (
            f"### Quotation {quote.number} ({quote.status})\n"
            f"Date: {quote.date}  \n"
            f"Customer: {c.name}{f' / {c.company}' if c.company else ''}  \n"
            f"Contact: {c.email}, {c.phone}  \n"
            f"Address: {c.address}\n\n"
        )
        rows = [
            [
                i.product.code,
                i.product.name,
                i.qty,
                format_currency(i.product.selling_price),
                format_currency(i.line_total),
            ]
            for i in quote.items
        ]
        table = generate_markdown_table(
            ["Item", "Description", "Qty", "Unit Price", "Total"],
            rows,
            ["l", "l", "r", "r", "r"],
        )
        footer = (
            f"\n\nSubtotal: {format_currency(quote.subtotal)}  \n"
            f"Discount: - {format_currency(quote.discount)}  \n"
            f"Delivery Fee: {format_currency(quote.delivery_fee)}  \n"
            f"**Grand Total:** {format_currency(quote.grand_total)}"
        )
        viewer.document.update(header + table + footer)

    @on(Button.Pressed, "#btn-save-quote")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        quote = self._current()
        if quote is None:
            return
        fee = parse_amount(self.query_one("#input-delivery", Input).value)
        discount = parse_amount(self.query_one("#input-discount", Input).value)
        status = str(self.query_one("#select-status", Select).value)
        try:
            updated = await crud.update_quotation(
                self.app.state.store,
                quote.id,
                status=status,
                delivery_fee=fee or 0.0,
                discount=discount or 0.0,
            )
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        if updated is None:
            self.notify("Quotation no longer exists.", severity="error")
        else:
            self.notify(f"Quotation {updated.number} updated.")
        self.load_quotes()

    @on(Button.Pressed, "#btn-export")
    @work(exclusive=True, group="pdf")
    async def handle_export(self) -> None:
        quote = self._current()
        if quote is None:
            return
        path = await asyncio.to_thread(export_quotation_pdf, quote)
        self.notify(f"PDF saved to {path}")
