from __future__ import annotations

from typing import List, Set

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, Select

import db.crud as crud
from db.models import PRODUCT_CATEGORIES, Product
from utils.messages import ProductsChangedMessage
from utils.pure import format_currency, parse_amount
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal, summarize_names
from views.modal_product_editor import ProductEditorModal


class AdminProductsScreen(BaseScreen):
    """
    Product management: edit/add/delete records, inline price edit and
    bulk status/category changes over a selection.
    """

    ADMIN_ONLY = True

    BINDINGS = [
        Binding("space", "toggle_select", "Select", show=True),
        Binding("ctrl+a", "toggle_select_all", "Select All", show=True),
        Binding("n", "new_product", "New Product", show=True),
        Binding("delete", "delete_product", "Delete", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._products: List[Product] = []
        self._selected: Set[str] = set()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            with Horizontal(id="hort-bulk"):
                yield Label("0 Selected", id="label-selected")
                yield Button("Active", id="btn-bulk-active", variant="success")
                yield Button("Inactive", id="btn-bulk-inactive", variant="error")
                yield Select(
                    [(c, c) for c in PRODUCT_CATEGORIES],
                    prompt="Move to category...",
                    id="select-bulk-category",
                )
            yield DataTable(id="table-products")
            with Horizontal(id="hort-controls"):
                with Vertical():
                    yield Label("Selling Price:")
                    yield Input(
                        placeholder="new price for highlighted row",
                        id="input-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Horizontal(id="div-button"):
                    yield Button("Update Price", id="btn-update", variant="success")
                    yield Button("Add New Product", id="btn-new", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("", "Code", "Name", "Category", "Price", "Status", "")
        self.query_one("#hort-bulk").display = False
        if self.app.state.is_admin:
            self.load_products()

    @on(ScreenResume)
    @on(ProductsChangedMessage)
    def handle_reload(self) -> None:
        if self.admin_locked_out():
            return
        self.load_products()

    @work(exclusive=True, group="load")
    async def load_products(self) -> None:
        self._products = await crud.list_products(self.app.state.store)
        known = {p.id for p in self._products}
        self._selected &= known

        table = self.query_one(DataTable)
        cursor = table.cursor_row
        table.clear()
        for p in self._products:
            table.add_row(
                "[x]" if p.id in self._selected else "[ ]",
                p.code,
                p.name,
                p.category,
                format_currency(p.selling_price),
                "Active" if p.is_active else "Disabled",
                "Locked" if p.is_locked else "",
                key=p.id,
            )
        if self._products:
            table.move_cursor(row=min(cursor, len(self._products) - 1))
        self._refresh_bulk_bar()

    def _refresh_bulk_bar(self) -> None:
        self.query_one("#hort-bulk").display = bool(self._selected)
        self.query_one("#label-selected", Label).update(
            f"{len(self._selected)} Selected"
        )

    def _selected_names(self) -> List[str]:
        return [p.name for p in self._products if p.id in self._selected]

    def _current(self) -> Product | None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return next((p for p in self._products if p.id == row_key.value), None)

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        prod = self._current()
        if prod is not None:
            self.query_one("#input-price", Input).value = f"{prod.selling_price:.2f}"

    # selection

    def action_toggle_select(self) -> None:
        prod = self._current()
        if prod is None:
            return
        self._selected ^= {prod.id}
        self.load_products()

    def action_toggle_select_all(self) -> None:
        if self._products and len(self._selected) == len(self._products):
            self._selected = set()
        else:
            self._selected = {p.id for p in self._products}
        self.load_products()

    @on(Button.Pressed, "#btn-bulk-active")
    @on(Button.Pressed, "#btn-bulk-inactive")
    @work(exclusive=True)
    async def handle_bulk_status(self, event: Button.Pressed) -> None:
        is_active = event.button.id == "btn-bulk-active"
        n = await crud.bulk_set_active(self.app.state.store, self._selected, is_active)
        self.notify(f"{n} products set to {'Active' if is_active else 'Inactive'}.")
        self._selected = set()
        self.post_message(ProductsChangedMessage())

    @on(Select.Changed, "#select-bulk-category")
    @work(group="bulk-category")
    async def handle_bulk_category(self, event: Select.Changed) -> None:
        if event.value is Select.BLANK or not self._selected:
            return
        category = str(event.value)
        confirmed = await self.app.push_screen_wait(
            DialogModal(
                f'Move {len(self._selected)} products to "{category}"?',
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
                detail=summarize_names(self._selected_names()),
            )
        )
        if confirmed:
            await crud.bulk_set_category(self.app.state.store, self._selected, category)
        event.select.clear()
        if not confirmed:
            return
        self._selected = set()
        self.post_message(ProductsChangedMessage())

    # single record

    @on(Button.Pressed, "#btn-update")
    @work(exclusive=True)
    async def handle_update(self) -> None:
        prod = self._current()
        price_input = self.query_one("#input-price", Input)
        price = parse_amount(price_input.value)
        if prod is None:
            return
        if price is None or price < 0:
            price_input.focus()
            price_input.add_class("-invalid")
            self.notify("Enter a price of 0 or more.", severity="error")
            return
        if price == prod.selling_price:
            self.notify("Nothing to update.", severity="warning")
            return

        if await crud.set_selling_price(self.app.state.store, prod.id, price):
            self.notify("Price updated successfully.")
        else:
            self.notify("Update failed.", severity="error")
        self.post_message(ProductsChangedMessage())

    @on(DataTable.RowSelected)
    @work()
    async def handle_edit(self) -> None:
        prod = self._current()
        if prod is not None:
            await self._edit(prod)

    @on(Button.Pressed, "#btn-new")
    @work()
    async def action_new_product(self) -> None:
        await self._edit(crud.new_product())

    async def _edit(self, prod: Product) -> None:
        edited = await self.app.push_screen_wait(ProductEditorModal(prod))
        if edited is None:
            return
        try:
            saved = await crud.save_product(self.app.state.store, edited)
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Saved {saved.name}.")
        self.post_message(ProductsChangedMessage())

    @work()
    async def action_delete_product(self) -> None:
        prod = self._current()
        if prod is None:
            return
        if prod.is_locked:
            self.notify("Locked catalog products cannot be deleted.", severity="error")
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                "Delete product?", primary_text="Yes", secondary_text="No", tone="error"
            )
        ):
            return
        if await crud.delete_product(self.app.state.store, prod.id):
            self.notify("Product deleted.")
        self.post_message(ProductsChangedMessage())
