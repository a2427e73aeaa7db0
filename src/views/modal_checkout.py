import asyncio

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from db.crud import cart_subtotal, checkout, list_cart
from db.models import CustomerDetails
from utils.pdf import export_quotation_pdf
from utils.pure import format_currency, generate_markdown_table

CUSTOMER_INPUTS = [
    # (field, label, placeholder)
    ("name", "Full Name *", "Juan Dela Cruz"),
    ("company", "Company", "Acme Corp."),
    ("email", "Email *", "juan@example.com"),
    ("phone", "Phone *", "+63 900 000 0000"),
    ("address", "Delivery Address *", "123 Ayala Ave, Makati City"),
]


class CheckoutModal(ModalScreen[bool]):
    """
    Customer details form that turns the cart into a quotation.
    After generation the modal shows the quotation number and offers the PDF.
    Return True if a quotation was created.
    """

    def __init__(self):
        super().__init__()
        self._created = False

    def compose(self) -> ComposeResult:
        with Vertical(id="div-checkout-form"):
            yield MarkdownViewer("", show_table_of_contents=False)
            for name, label, placeholder in CUSTOMER_INPUTS:
                yield Label(label)
                yield Input(placeholder=placeholder, id=f"input-{name}")
            with Horizontal():
                yield Button("Back to Cart", id="btn-quit")
                yield Button("Generate Quotation", id="btn-submit", variant="primary")
        with Vertical(id="div-checkout-done"):
            yield Label("", id="label-quote-created")
            yield Label("", id="label-quote-saved")
            with Horizontal():
                yield Button("Back to Catalog", id="btn-done")
                yield Button("Download PDF", id="btn-pdf", variant="success")

    async def on_mount(self):
        self.query_one("#div-checkout-done").display = False

        cart_items = await list_cart(self.app.state.store)
        headers = ["Item", "Description", "Qty", "Unit Price", "Total"]
        rows = [
            [
                item.product.code,
                item.product.name,
                item.qty,
                format_currency(item.product.selling_price),
                format_currency(item.line_total),
            ]
            for item in cart_items
        ]
        md = "### Quotation Summary\n\n"
        md += generate_markdown_table(headers, rows, ["l", "l", "c", "r", "r"])
        md += f"\n\n**Subtotal:** {format_currency(cart_subtotal(cart_items))}"
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#input-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(self._created)

    def _read_customer(self) -> CustomerDetails:
        values = {
            name: self.query_one(f"#input-{name}", Input).value.strip()
            for name, _, _ in CUSTOMER_INPUTS
        }
        return CustomerDetails(**values)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        customer = self._read_customer()
        missing = customer.missing_fields()
        if missing:
            for name in missing:
                self.query_one(f"#input-{name}", Input).add_class("-invalid")
            self.query_one(f"#input-{missing[0]}", Input).focus()
            self.notify("Please fill in all required fields.", severity="error")
            return

        try:
            quote = await checkout(self.app.state.store, customer)
        except ValueError as e:
            self.notify(str(e), severity="error")
            return

        self._created = True
        self.app.state.last_quotation = quote
        self.query_one("#div-checkout-form").display = False
        self.query_one("#div-checkout-done").display = True
        self.query_one("#label-quote-created", Label).update(
            f"Quotation {quote.number} generated. "
            f"Grand total: {format_currency(quote.grand_total)}"
        )
        self.query_one("#btn-pdf").focus()

    @on(Button.Pressed, "#btn-pdf")
    @work(exclusive=True, group="pdf")
    async def handle_pdf(self):
        quote = self.app.state.last_quotation
        if quote is None:
            return
        path = await asyncio.to_thread(export_quotation_pdf, quote)
        self.query_one("#label-quote-saved", Label).update(f"Saved to {path}")
        self.notify(f"PDF saved to {path}")

    @on(Button.Pressed, "#btn-quit")
    @on(Button.Pressed, "#btn-done")
    def handle_quit(self):
        self.dismiss(self._created)
