from typing import Iterable, Literal

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Label

from utils.messages import QuitRequestedMessage

Tone = Literal["default", "positive", "warning", "error"]

# tone -> (confirm button variant, cancel button variant)
BUTTON_VARIANTS: dict[str, tuple[str, str]] = {
    "default": ("primary", "default"),
    "positive": ("success", "default"),
    "warning": ("warning", "default"),
    "error": ("error", "primary"),
}

MAX_DETAIL_LINES = 6


def summarize_names(names: Iterable[str], limit: int = MAX_DETAIL_LINES) -> str:
    """Bullet list of the first `limit` names, with a "+N more" tail."""
    names = list(names)
    lines = [f"- {name}" for name in names[:limit]]
    if len(names) > limit:
        lines.append(f"  +{len(names) - limit} more")
    return "\n".join(lines)


class DialogModal(ModalScreen[bool]):
    """
    Blocking confirmation box, dismissed with True on confirm and False on cancel.

    `detail` is an optional second block under the caption, e.g. the products
    a bulk edit will touch. Without `cancel_text` it becomes a plain OK box.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel", show=False)]

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Tone = "default",
        detail: str = "",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone
        self.detail = detail

    def compose(self) -> ComposeResult:
        confirm_variant, cancel_variant = BUTTON_VARIANTS[self.tone]
        with Container(id="div-dialog", classes=f"-tone-{self.tone}"):
            yield Label(self.caption, id="caption")
            if self.detail:
                yield Label(self.detail, id="detail")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(
                        self.secondary_text, variant=cancel_variant, id="btn-secondary"
                    )
                yield Button(self.primary_text, variant=confirm_variant, id="btn-primary")

    def on_mount(self):
        # destructive prompts start on the cancel button
        if self.secondary_text and self.tone == "error":
            self.query_one("#btn-secondary").focus()
        else:
            self.query_one("#btn-primary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "btn-primary")

    def action_cancel(self) -> None:
        self.dismiss(False)


class AlertModal(DialogModal):
    """OK-only error box; `reason` goes into the detail block."""

    def __init__(self, caption: str, reason: str = ""):
        super().__init__(caption, tone="error", detail=reason)


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
        super().on_button_pressed(event)
