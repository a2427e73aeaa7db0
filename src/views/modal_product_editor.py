from __future__ import annotations

from dataclasses import replace

from textual import events, on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, OptionList, Select

from db.crud import derive_selling_price, validate_product
from db.models import PRODUCT_CATEGORIES, Product
from utils import gallery
from utils.pure import parse_amount, short_image_ref
from views.modal_dialog import AlertModal


class ProductEditorModal(ModalScreen[Product | None]):
    """
    Edit a product record including its image gallery.
    Returns the edited Product, or None if cancelled. Saving is up to the caller.
    Locked products show name and code read-only.
    """

    BINDINGS = [
        Binding("shift+up", "move_image(-1)", "Move Image Up", show=True),
        Binding("shift+down", "move_image(1)", "Move Image Down", show=True),
    ]

    def __init__(self, product: Product) -> None:
        super().__init__()
        self._product = product
        self._images = tuple(product.images)

    def compose(self) -> ComposeResult:
        p = self._product
        with VerticalScroll(id="div-editor"):
            yield Label(
                "Catalog Details" if p.is_locked else "Edit Product", id="label-title"
            )
            if p.is_locked:
                yield Label(
                    "Locked Entry: this is a core catalog product. Names, codes, "
                    "category and details are fixed. You can manage prices and images.",
                    id="label-locked",
                )
            with Horizontal():
                with Vertical():
                    yield Label("Code")
                    yield Input(p.code, id="input-code", disabled=p.is_locked)
                with Vertical():
                    yield Label("Name *")
                    yield Input(p.name, id="input-name", disabled=p.is_locked)
            with Horizontal():
                with Vertical():
                    yield Label("Category")
                    yield Select(
                        [(c, c) for c in PRODUCT_CATEGORIES],
                        value=p.category,
                        allow_blank=False,
                        id="select-category",
                        disabled=p.is_locked,
                    )
                with Vertical():
                    yield Label("Status")
                    yield Select(
                        [("Active (Visible)", True), ("Disabled (Hidden)", False)],
                        value=p.is_active,
                        allow_blank=False,
                        id="select-status",
                    )
            with Horizontal():
                with Vertical():
                    yield Label("Original Price")
                    yield Input(
                        f"{p.original_price:.2f}",
                        id="input-original-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("Selling Price")
                    yield Input(
                        f"{p.selling_price:.2f}",
                        id="input-selling-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
            yield Label("Dimensions")
            yield Input(p.dimensions, id="input-dimensions", disabled=p.is_locked)
            yield Label("Description")
            yield Input(
                p.description, id="input-description", disabled=p.is_locked
            )

            yield Label("Images (first one is the primary image)")
            yield OptionList(id="optlist-images")
            with Horizontal(id="hort-image-actions"):
                yield Button("Make Primary", id="btn-img-primary")
                yield Button("Up", id="btn-img-up")
                yield Button("Down", id="btn-img-down")
                yield Button("Delete", id="btn-img-delete", variant="error")
            with Horizontal():
                yield Input(placeholder="Paste image URL here...", id="input-image-url")
                yield Button("Add URL", id="btn-add-url")
            with Horizontal():
                yield Input(
                    placeholder="Image file paths, separated by ';'",
                    id="input-image-files",
                )
                yield Button("Upload Files", id="btn-add-files")

            with Horizontal(id="hort-editor-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Save", id="btn-save", variant="success")

    def on_mount(self) -> None:
        self._render_images()
        focus_id = "#input-original-price" if self._product.is_locked else "#input-code"
        self.query_one(focus_id).focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    # images

    def _render_images(self, highlight: int | None = None) -> None:
        opt_list = self.query_one("#optlist-images", OptionList)
        opt_list.clear_options()
        opt_list.add_options(
            [
                f"{'[Primary] ' if i == 0 else ''}{short_image_ref(ref)}"
                for i, ref in enumerate(self._images)
            ]
        )
        if highlight is not None and self._images:
            opt_list.highlighted = max(0, min(highlight, len(self._images) - 1))

    def _highlighted(self) -> int | None:
        idx = self.query_one("#optlist-images", OptionList).highlighted
        if idx is None or not self._images:
            self.notify("Select an image first.", severity="warning")
            return None
        return idx

    @on(Button.Pressed, "#btn-img-primary")
    def handle_promote(self) -> None:
        idx = self._highlighted()
        if idx is not None:
            self._images = gallery.promote(self._images, idx)
            self._render_images(0)

    @on(Button.Pressed, "#btn-img-delete")
    def handle_delete_image(self) -> None:
        idx = self._highlighted()
        if idx is not None:
            self._images = gallery.remove(self._images, idx)
            self._render_images(idx)

    @on(Button.Pressed, "#btn-img-up")
    def handle_move_up(self) -> None:
        self.action_move_image(-1)

    @on(Button.Pressed, "#btn-img-down")
    def handle_move_down(self) -> None:
        self.action_move_image(1)

    def action_move_image(self, step: int) -> None:
        idx = self._highlighted()
        if idx is None:
            return
        target = idx + step
        if 0 <= target < len(self._images):
            self._images = gallery.move(self._images, idx, target)
            self._render_images(target)

    @on(Input.Submitted, "#input-image-url")
    @on(Button.Pressed, "#btn-add-url")
    def handle_add_url(self) -> None:
        url_input = self.query_one("#input-image-url", Input)
        try:
            self._images = gallery.append_url(self._images, url_input.value)
        except ValueError as e:
            url_input.add_class("-invalid")
            self.notify(str(e), severity="error")
            return
        url_input.value = ""
        url_input.remove_class("-invalid")
        self._render_images(len(self._images) - 1)

    @on(Input.Submitted, "#input-image-files")
    @on(Button.Pressed, "#btn-add-files")
    @work(exclusive=True, group="upload")
    async def handle_add_files(self) -> None:
        files_input = self.query_one("#input-image-files", Input)
        paths = [p.strip() for p in files_input.value.split(";") if p.strip()]
        if not paths:
            return

        upload_btn = self.query_one("#btn-add-files", Button)
        upload_btn.label = "Uploading..."
        upload_btn.disabled = True
        try:
            data_urls = await gallery.read_image_files(paths)
        except gallery.ImageReadError as e:
            await self.app.push_screen_wait(
                AlertModal(
                    f"{e}. One or more images failed to upload. "
                    "Please check file sizes or formats.",
                    reason=e.reason,
                )
            )
            return
        finally:
            upload_btn.label = "Upload Files"
            upload_btn.disabled = False

        before = len(self._images)
        self._images = gallery.append_uploads(self._images, data_urls)
        skipped = len(paths) - (len(self._images) - before)
        if skipped:
            self.notify(f"Skipped {skipped} non-image file(s).", severity="warning")
        files_input.value = ""
        self._render_images(len(self._images) - 1)

    # form

    @on(Input.Changed, "#input-original-price")
    def handle_original_price_changed(self, event: Input.Changed) -> None:
        if self.focused is not event.input:
            return
        original = parse_amount(event.value)
        if original is not None and original >= 0:
            self.query_one("#input-selling-price", Input).value = (
                f"{derive_selling_price(original):.2f}"
            )

    def _collect(self) -> Product:
        def value(widget_id: str) -> str:
            return self.query_one(widget_id, Input).value.strip()

        original = parse_amount(value("#input-original-price"))
        selling = parse_amount(value("#input-selling-price"))
        if original is None or selling is None:
            raise ValueError("Prices must be numbers.")

        return replace(
            self._product,
            code=value("#input-code"),
            name=value("#input-name"),
            category=str(self.query_one("#select-category", Select).value),
            is_active=bool(self.query_one("#select-status", Select).value),
            original_price=original,
            selling_price=selling,
            dimensions=value("#input-dimensions"),
            description=value("#input-description"),
            images=self._images,
        )

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        try:
            product = self._collect()
            validate_product(product)
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        self.dismiss(product)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)
