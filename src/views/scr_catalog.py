from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.reactive import reactive
from textual.widgets import DataTable, Input, Label, Select

import db.crud
from db.models import PRODUCT_CATEGORIES
from utils.messages import CartChangedMessage, ProductsChangedMessage
from utils.pure import format_currency
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal


class CatalogScreen(BaseScreen):
    """
    product catalog, searchable by name or code and filterable by category
    """

    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
        Binding("a", "add_selected", "Add to Cart", show=True),
    ]

    query_str = reactive("")
    category = reactive("All")

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-filters"):
            yield Input(id="input-search", placeholder="Search by name or code...")
            yield Select(
                [(c, c) for c in ("All", *PRODUCT_CATEGORIES)],
                value="All",
                allow_blank=False,
                id="select-category",
            )
        yield DataTable(id="table-catalog")
        yield Label("", id="label-result-cnt")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Code", "Name", "Category", "Price", "Status")

        self.query_one("#input-search").focus()
        self.update_results()

    @on(Input.Changed, "#input-search")
    def handle_search_changed(self, message: Input.Changed) -> None:
        self.query_str = message.value
        self.update_results()

    @on(Select.Changed, "#select-category")
    def handle_category_changed(self, message: Select.Changed) -> None:
        self.category = str(message.value)
        self.update_results()

    @on(ScreenResume)
    @on(ProductsChangedMessage)
    def handle_reload(self) -> None:
        self.update_results()

    @work(exclusive=True, group="search")
    async def update_results(self) -> None:
        products = await db.crud.search_products(
            self.app.state.store, self.query_str, self.category
        )
        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.code,
                p.name,
                p.category,
                format_currency(p.selling_price),
                "Available" if p.is_active else "Unavailable",
                key=p.id,
            )

        label = self.query_one("#label-result-cnt", Label)
        if products:
            label.update(f"Showing {len(products)} products")
        else:
            label.update("No products match. Clear the search or pick 'All'.")

    def _selected_pid(self) -> str | None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    @on(DataTable.RowSelected)
    @work()
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        if await self.app.push_screen_wait(ProdDetailModal(event.row_key.value)):
            self.app.post_message(CartChangedMessage())

    @work(exclusive=True, group="add")
    async def action_add_selected(self) -> None:
        pid = self._selected_pid()
        if pid is None:
            return
        product = await db.crud.get_product(self.app.state.store, pid)
        if product is None:
            return
        if not product.is_active:
            self.notify("This product is currently unavailable.", severity="warning")
            return
        await db.crud.add_to_cart(self.app.state.store, product)
        self.notify(f"Added {product.name} to cart.")
        self.app.post_message(CartChangedMessage())
        await self.refresh_sidebar()

    def action_noop(self) -> None:
        pass
