from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.message import Message
from textual.validation import Number
from textual.widgets import Button, Input, Label, Rule

from db.crud import cart_subtotal, clear_cart, list_cart, remove_from_cart, update_cart_qty
from db.models import CartItem
from utils.messages import CartChangedMessage, NewQuotationMessage
from utils.pure import format_currency
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal, summarize_names


class CartItemActionRemoveMessage(Message):
    bubble = True


class CartItemActionLabel(Label):
    def action_remove(self):
        self.post_message(CartItemActionRemoveMessage())


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: CartItem):
        super().__init__()
        self.item = item

    def compose(self):
        p = self.item.product
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(f"{p.code}  {p.name}", id="label-item-name")
                yield Input(
                    value=str(self.item.qty),
                    id="input-item-qty",
                    type="integer",
                    validators=[Number(minimum=1)],
                )
                yield Label(
                    f"{format_currency(p.selling_price)} each, "
                    f"{format_currency(self.item.line_total)}",
                    id="label-item-price",
                )
            with Container(id="div-actions"):
                yield CartItemActionLabel(
                    content="[@click=remove()]Remove[/]", id="link-item-remove"
                )

    @on(Input.Submitted, "#input-item-qty")
    @work(exclusive=True)
    async def handle_qty_submitted(self, event: Input.Submitted) -> None:
        if not event.input.is_valid or not event.value:
            event.input.add_class("-invalid")
            self.notify("Quantity must be a whole number of at least 1.", severity="error")
            return
        await update_cart_qty(self.app.state.store, self.item.pid, int(event.value))
        self.post_message(CartChangedMessage())

    @on(CartItemActionRemoveMessage)
    @work()
    async def handle_remove_item(self):
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove this item from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )

        if remove_confirmed:
            await remove_from_cart(self.app.state.store, self.item.pid)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    cart review, quantity edits and the entry to quotation checkout
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Subtotal: P 0.00", id="label-cart-total")
        yield Label(
            "* Delivery fees and special discounts will be calculated "
            "in the final quotation document.",
            id="label-cart-note",
        )
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Refresh", id="btn-refresh")
            yield Button("Request Quotation", id="btn-checkout", variant="primary")

    async def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="cart-items")  # concurrent rebuilds mount duplicates
    async def handle_cart_change(self):
        """
        Rebuild the item list from the stored cart
        """
        cart_items = await list_cart(self.app.state.store)

        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        await content.mount_all([CartItemWidget(item) for item in cart_items])

        if not cart_items:
            content.add_class("no-items")
        else:
            content.remove_class("no-items")

        self.query_one("#label-cart-total", Label).update(
            f"Subtotal: {format_currency(cart_subtotal(cart_items))}"
        )
        self.query_one("#btn-checkout", Button).disabled = not cart_items
        await self.refresh_sidebar()

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        cart_items = await list_cart(self.app.state.store)
        if not cart_items:
            self.app.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
                detail=summarize_names(
                    f"{i.qty} x {i.product.name}" for i in cart_items
                ),
            )
        )
        if remove_confirmed:
            await clear_cart(self.app.state.store)
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        """
        Open up the customer details form
        """
        cart_items = await list_cart(self.app.state.store)
        if not cart_items:
            self.app.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(CheckoutModal()):
            self.app.post_message(NewQuotationMessage())
            await self.app.switch_mode("catalog")
            return
        self.post_message(CartChangedMessage())
