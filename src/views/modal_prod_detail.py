from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, MarkdownViewer

from db.crud import add_to_cart, get_product, list_cart
from db.models import Product
from utils.pure import format_currency, generate_markdown_table, short_image_ref


class ProdDetailModal(ModalScreen[bool]):
    """
    prod detail, plus add to cart
    Will return true of cart changed, false if not
    """

    def __init__(self, pid: str) -> None:
        super().__init__()

        self._pid = pid
        self._prod: Product | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label("", id="label-in-cart")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        store = self.app.state.store
        self._prod = await get_product(store, self._pid)
        if self._prod is None:
            self.dismiss(False)
            return

        p = self._prod
        table_rows = [
            ["Code", p.code],
            ["Category", p.category],
            ["Price", format_currency(p.selling_price)],
            ["Dimensions", p.dimensions or "Contact for info"],
            ["Description", p.description or "Premium quality office furniture."],
        ]
        md = f"### {p.name}\n\n" + generate_markdown_table(
            ["Attribute", "Value"], table_rows, ["l", "l"]
        )
        if p.images:
            md += "\n\n#### Images\n\n" + "\n".join(
                f"- {'(primary) ' if i == 0 else ''}{short_image_ref(ref)}"
                for i, ref in enumerate(p.images)
            )
        await self.query_one(MarkdownViewer).document.update(md)

        if not p.is_active:
            order_btn = self.query_one("#btn-addcart", Button)
            order_btn.label = "Unavailable"
            order_btn.disabled = True
            order_btn.variant = "warning"

        await self._render_cart_qty()
        self.query_one("#btn-addcart").focus()

    async def _render_cart_qty(self) -> None:
        cart_items = await list_cart(self.app.state.store)
        qty = next((i.qty for i in cart_items if i.pid == self._pid), 0)
        self.query_one("#label-in-cart", Label).update(
            f"In cart: {qty}" if qty else "Not in cart yet"
        )

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True)
    async def handle_addcart(self):
        await add_to_cart(self.app.state.store, self._prod)
        self.app.notify("Item added to cart successfully.")
        self.dismiss(True)
